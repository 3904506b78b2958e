from datetime import datetime, timezone
from supabase import Client
from app.modules.messages.schemas import MessageResponse
from app.modules.messages.media_storage import ChatMediaStorage, build_media_path
from app.modules.groups.service import GroupService
from typing import List, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

MEDIA_MESSAGE_TEXT = "Sawir/meme ayaa la diray"


class MessageService:
    def __init__(self, supabase: Client, storage: Optional[ChatMediaStorage] = None):
        self.supabase = supabase
        self._storage = storage

    @property
    def storage(self) -> ChatMediaStorage:
        if self._storage is None:
            self._storage = ChatMediaStorage(self.supabase)
        return self._storage

    def list_messages(self, group_id: str, limit: int = 200) -> List[MessageResponse]:
        """The latest limit messages of a group, oldest first"""
        try:
            result = self.supabase.table("messages")\
                .select("*")\
                .eq("group_id", group_id)\
                .order("created_at", desc=True)\
                .limit(limit)\
                .execute()
            return [MessageResponse(**m) for m in reversed(result.data or [])]
        except Exception as e:
            logger.error(f"Error fetching messages of {group_id}: {e}")
            raise HTTPException(status_code=500, detail="An error occurred while loading the group messages")

    def _insert(self, row: dict) -> MessageResponse:
        result = self.supabase.table("messages").insert(row).execute()
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to send message")
        message = result.data[0]
        try:
            GroupService(self.supabase).touch_last_message(row["group_id"], message.get("created_at"))
        except Exception as e:
            logger.warning(f"Could not update last_message_at of {row['group_id']}: {e}")
        return MessageResponse(**message)

    def send_message(self, group_id: str, user_id: str, content: str) -> MessageResponse:
        if not content or not content.strip():
            raise HTTPException(status_code=400, detail="Message cannot be empty")
        try:
            return self._insert({
                "group_id": group_id,
                "user_id": user_id,
                "content": content,
                "is_meme": False,
            })
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error sending message: {e}")
            raise HTTPException(status_code=500, detail="An error occurred while sending the message")

    def send_media(self, group_id: str, user_id: str, filename: str, file_content: bytes,
                   content_type: str = "application/octet-stream") -> MessageResponse:
        """Upload a file and post it as a meme message"""
        if not file_content:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")
        path = build_media_path(group_id, user_id, filename or "upload")
        try:
            public_url = self.storage.upload_file(file_content, path, content_type)
        except Exception as e:
            logger.error(f"Error uploading file: {e}")
            raise HTTPException(status_code=500, detail="An error occurred while uploading the file")

        try:
            return self._insert({
                "group_id": group_id,
                "user_id": user_id,
                "content": MEDIA_MESSAGE_TEXT,
                "is_meme": True,
                "media_url": public_url,
            })
        except HTTPException:
            self.storage.delete_file(path)
            raise
        except Exception as e:
            logger.error(f"Error saving media message, removing {path}: {e}")
            self.storage.delete_file(path)
            raise HTTPException(status_code=500, detail="An error occurred while uploading the file")

    def post_system_message(self, group_id: str, user_id: str, content: str) -> bool:
        """Call notices and similar; failures are logged, never raised"""
        try:
            self.supabase.table("messages").insert({
                "group_id": group_id,
                "user_id": user_id,
                "content": content,
                "is_system_message": True,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
            return True
        except Exception as e:
            logger.error(f"Error sending system message to {group_id}: {e}")
            return False

    def delete_message(self, group_id: str, message_id: str) -> bool:
        try:
            result = self.supabase.table("messages")\
                .delete()\
                .eq("id", message_id)\
                .eq("group_id", group_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Message not found")
        return True
