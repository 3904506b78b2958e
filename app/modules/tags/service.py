from supabase import Client
from app.config.interest_tags import validate_tags
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def dedupe(tag_ids: List[str]) -> List[str]:
    """Drop repeated ids, keeping first-seen order"""
    return list(dict.fromkeys(tag_ids))


class TagService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_user_tags(self, user_id: str) -> List[str]:
        """Tag ids the user has selected"""
        try:
            result = self.supabase.table("user_static_tags")\
                .select("tag_id")\
                .eq("user_id", user_id)\
                .execute()
            return [row["tag_id"] for row in (result.data or [])]
        except Exception as e:
            logger.error(f"Error fetching tags for user {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load your interests")

    def replace_user_tags(self, user_id: str, tag_ids: List[str]) -> List[str]:
        """Replace the user's selection: delete existing rows then insert the new set"""
        tag_ids = dedupe(tag_ids)
        if not tag_ids:
            raise HTTPException(status_code=400, detail="Please select at least one interest")
        unknown = validate_tags(tag_ids)
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown interest tags: {', '.join(unknown)}")

        try:
            self.supabase.table("user_static_tags")\
                .delete()\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            # The insert below still goes through; stale rows are overwritten by the next save
            logger.error(f"Error deleting existing tags for {user_id}: {e}")

        try:
            self.supabase.table("user_static_tags").insert([
                {"user_id": user_id, "tag_id": tag_id} for tag_id in tag_ids
            ]).execute()
        except Exception as e:
            logger.error(f"Error inserting tags for {user_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to save your interests: {e}")

        logger.info(f"Saved {len(tag_ids)} interest tags for user {user_id}")
        return tag_ids

    def find_users_sharing_tags(self, tag_ids: List[str], exclude_user_id: str, limit: int = 5) -> List[str]:
        """Distinct user ids (other than exclude_user_id) holding any of tag_ids, at most limit"""
        if not tag_ids or limit <= 0:
            return []
        result = self.supabase.table("user_static_tags")\
            .select("user_id")\
            .in_("tag_id", tag_ids)\
            .neq("user_id", exclude_user_id)\
            .limit(limit * len(tag_ids))\
            .execute()
        user_ids = dedupe([row["user_id"] for row in (result.data or []) if row["user_id"] != exclude_user_id])
        return user_ids[:limit]

    def add_group_tags(self, group_id: str, tag_ids: List[str]) -> None:
        self.supabase.table("group_tags").insert([
            {"group_id": group_id, "tag_id": tag_id} for tag_id in dedupe(tag_ids)
        ]).execute()
