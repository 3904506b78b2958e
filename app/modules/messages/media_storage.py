import uuid
from supabase import Client
from app.config import settings
import logging

logger = logging.getLogger(__name__)


def build_media_path(group_id: str, user_id: str, filename: str) -> str:
    """media/<group>/<user>-<random>.<ext>; files without an extension keep none"""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    name = f"{user_id}-{uuid.uuid4().hex}"
    if ext:
        name = f"{name}.{ext}"
    return f"media/{group_id}/{name}"


class ChatMediaStorage:
    def __init__(self, supabase: Client, bucket_name: str = None):
        self.bucket_name = bucket_name or settings.chat_media_bucket
        self.bucket = supabase.storage.from_(self.bucket_name)

    def upload_file(self, file_content: bytes, path: str, content_type: str = "application/octet-stream") -> str:
        """Upload file to the chat media bucket and return its public URL"""
        try:
            self.bucket.upload(
                path,
                file_content,
                {
                    "content-type": content_type,
                    "cache-control": settings.chat_media_cache_control,
                    "upsert": "false",
                },
            )
        except Exception as e:
            logger.error(f"Failed to upload {path} to {self.bucket_name}: {str(e)}")
            raise

        public_url = self.bucket.get_public_url(path)
        if not public_url:
            raise ValueError("Failed to get public URL for uploaded file")
        return public_url

    def delete_file(self, path: str) -> bool:
        """Delete file from the chat media bucket"""
        try:
            self.bucket.remove([path])
            return True
        except Exception as e:
            logger.error(f"Failed to delete {path} from {self.bucket_name}: {str(e)}")
            return False
