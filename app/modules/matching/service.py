import logging
from datetime import datetime, timezone
from supabase import Client
from app.config import settings
from app.config.interest_tags import validate_tags
from app.database.supabase_client import call_rpc
from app.modules.matching.schemas import MatchResult, GroupSearchResult
from app.modules.tags.service import TagService, dedupe
from app.modules.groups.service import GroupService
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def rpc_group_id(data: Any) -> Optional[str]:
    """RPC results come back as a bare uuid, a row, or a one-row list depending on the function signature"""
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, dict):
        data = data.get("group_id") or data.get("id")
    return str(data) if data else None


class MatchingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.tags = TagService(supabase)
        self.groups = GroupService(supabase)

    def match_by_interests(self, user_id: str, tag_ids: List[str]) -> MatchResult:
        """Save the user's tags, then let the database place them; build a group locally if it can't"""
        tag_ids = self.tags.replace_user_tags(user_id, tag_ids)

        params = {
            "user_uuid": user_id,
            "min_tag_matches": settings.match_min_tag_matches,
            "max_group_size": settings.match_max_group_size,
        }
        logger.info(f"Calling create_static_tag_group with params: {params}")
        try:
            group_id = rpc_group_id(call_rpc(self.supabase, "create_static_tag_group", params))
        except Exception as e:
            message = str(e)
            if "row-level security policy" in message:
                logger.warning(f"RLS policy error in group matching, using fallback: {message}")
            else:
                logger.error(f"Group matching error: {message}")
            group_id = None
        else:
            if group_id:
                logger.info(f"User {user_id} assigned to group {group_id}")
                return MatchResult(group_id=group_id, matched_by="rpc")
            logger.info(f"No group assigned to {user_id}, creating fallback group")

        fallback_id = self.create_fallback_group(user_id, tag_ids)
        if not fallback_id:
            raise HTTPException(status_code=500, detail="Unable to create a group. Please try again later.")
        return MatchResult(group_id=fallback_id, matched_by="fallback")

    def create_fallback_group(self, user_id: str, tag_ids: List[str]) -> Optional[str]:
        """
        Create an interest group for the user and pull in a few others sharing a tag.
        Group creation and the owner's membership are required; the rest is best-effort.
        """
        now = datetime.now(timezone.utc)
        try:
            result = self.supabase.table("groups").insert({
                "name": f"Interest Group {now.strftime('%Y-%m-%d')}",
                "description": "Group created based on your interests",
                "created_by": user_id,
                "min_correct_answers": 1,
                "total_questions": 2,
                "is_interest_based": True,
                "is_active": True,
                "last_message_at": now.isoformat(),
            }).execute()
            if not result.data:
                logger.error("No group data returned after creation")
                return None
            group_id = result.data[0]["id"]

            # Owner membership first; the tag and member inserts below depend on it under RLS
            self.groups.add_member(group_id, user_id, is_admin=True, joined_by_quiz=True)
        except Exception as e:
            logger.error(f"Failed to create fallback group: {e}")
            return None

        try:
            others = self.tags.find_users_sharing_tags(
                tag_ids, user_id, limit=settings.fallback_max_extra_members
            )
            if others:
                added = self.groups.add_members(group_id, others, joined_by_quiz=True)
                logger.info(f"Added {len(added)} users with similar interests to {group_id}")
        except Exception as e:
            logger.error(f"Error adding other users to group {group_id}: {e}")

        try:
            self.tags.add_group_tags(group_id, tag_ids)
        except Exception as e:
            logger.error(f"Error adding tags to group {group_id}: {e}")

        try:
            self.groups.insert_default_questions(group_id)
        except Exception as e:
            logger.error(f"Error adding default questions to {group_id}: {e}")

        logger.info(f"Created fallback group {group_id} for user {user_id}")
        return group_id

    def search_groups(self, tag_ids: List[str]) -> List[GroupSearchResult]:
        tag_ids = dedupe(tag_ids)
        if not tag_ids:
            raise HTTPException(status_code=400, detail="Please select at least one tag to search")
        unknown = validate_tags(tag_ids)
        if unknown:
            raise HTTPException(status_code=400, detail=f"Unknown interest tags: {', '.join(unknown)}")
        try:
            rows = call_rpc(self.supabase, "search_groups_by_tags", {"search_tags": tag_ids}) or []
        except Exception as e:
            logger.error(f"Error searching groups: {e}")
            raise HTTPException(status_code=502, detail="Error searching for groups. Please try again.")
        return [
            GroupSearchResult(
                group_id=str(row["group_id"]),
                name=row.get("name") or "",
                description=row.get("description"),
                match_percentage=round(float(row.get("match_percentage") or 0)),
            )
            for row in rows
        ]

    def match_by_quiz(self, user_id: str, responses: List[Dict[str, Any]]) -> MatchResult:
        if not responses:
            raise HTTPException(status_code=400, detail="Please answer the quiz first")
        try:
            data = call_rpc(self.supabase, "create_or_join_group", {
                "user_uuid": user_id,
                "responses": responses,
            })
        except Exception as e:
            logger.error(f"create_or_join_group failed for {user_id}: {e}")
            raise HTTPException(status_code=502, detail="Group matching failed. Please try again.")
        group_id = rpc_group_id(data)
        if not group_id:
            raise HTTPException(status_code=404, detail="No group matched")
        return MatchResult(group_id=group_id, matched_by="rpc")
