from datetime import datetime, timezone
from supabase import Client
from app.modules.calls.schemas import CallResponse, CallEndResponse
from app.modules.messages.service import MessageService
from app.modules.auth.service import display_name
from typing import Dict, Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CallService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.messages = MessageService(supabase)

    def get_call(self, call_id: str) -> Dict:
        try:
            result = self.supabase.table("call_sessions")\
                .select("*")\
                .eq("id", call_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Call not found")
        return result.data

    def get_active_call(self, group_id: str) -> Optional[CallResponse]:
        try:
            result = self.supabase.table("call_sessions")\
                .select("*")\
                .eq("group_id", group_id)\
                .eq("is_active", True)\
                .order("started_at", desc=True)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            return None
        return CallResponse(**result.data[0])

    def start_call(self, group_id: str, user_data: Dict) -> CallResponse:
        """Open a call session for the group with the caller as first participant"""
        if self.get_active_call(group_id):
            raise HTTPException(status_code=409, detail="A call is already active in this group")

        user_id = user_data["id"]
        started_at = _now()
        try:
            result = self.supabase.table("call_sessions").insert({
                "group_id": group_id,
                "started_by": user_id,
                "is_active": True,
                "started_at": started_at,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to start voice call")
            call = result.data[0]

            self.supabase.table("call_participants").insert({
                "call_id": call["id"],
                "user_id": user_id,
                "joined_at": started_at,
            }).execute()
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error starting call in {group_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to start voice call")

        self.messages.post_system_message(group_id, user_id, f"{display_name(user_data)} started a voice call")
        logger.info(f"User {user_id} started call {call['id']} in group {group_id}")
        return CallResponse(**call)

    def join_call(self, call_id: str, user_id: str) -> Dict:
        """Record participation; rejoining clears left_at"""
        call = self.get_call(call_id)
        if not call.get("is_active"):
            raise HTTPException(status_code=409, detail="This call has ended")
        try:
            existing = self.supabase.table("call_participants")\
                .select("*")\
                .eq("call_id", call_id)\
                .eq("user_id", user_id)\
                .execute()
            if existing.data:
                result = self.supabase.table("call_participants")\
                    .update({"joined_at": _now(), "left_at": None})\
                    .eq("call_id", call_id)\
                    .eq("user_id", user_id)\
                    .execute()
            else:
                result = self.supabase.table("call_participants").insert({
                    "call_id": call_id,
                    "user_id": user_id,
                    "joined_at": _now(),
                }).execute()
        except Exception as e:
            logger.error(f"Error joining call {call_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to join voice call")
        return result.data[0] if result.data else {"call_id": call_id, "user_id": user_id}

    def end_call(self, call_id: str, user_data: Dict) -> CallEndResponse:
        """The starter ends the call for everyone; anyone else just leaves"""
        call = self.get_call(call_id)
        user_id = user_data["id"]
        name = display_name(user_data)
        ended_for_everyone = call.get("started_by") == user_id
        try:
            if ended_for_everyone:
                self.supabase.table("call_sessions")\
                    .update({"is_active": False, "ended_at": _now()})\
                    .eq("id", call_id)\
                    .execute()
                notice = f"{name} ended the voice call"
            else:
                self.supabase.table("call_participants")\
                    .update({"left_at": _now()})\
                    .eq("call_id", call_id)\
                    .eq("user_id", user_id)\
                    .execute()
                notice = f"{name} left the voice call"
        except Exception as e:
            logger.error(f"Error ending call {call_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to end call")

        self.messages.post_system_message(call["group_id"], user_id, notice)
        return CallEndResponse(call_id=call_id, ended_for_everyone=ended_for_everyone)
