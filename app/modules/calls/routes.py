from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from app.config import settings
from app.database.supabase_client import get_supabase
from app.modules.calls.schemas import CallResponse, CallEndResponse, IceServersResponse
from app.modules.calls.service import CallService
from app.modules.calls.signaling import SignalingHub, get_signaling_hub
from app.modules.auth.service import AuthService, display_name
from app.core.dependencies import get_auth_service, get_current_user_id, check_group_member, get_membership
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calls"])


def get_call_service(supabase: Client = Depends(get_supabase)) -> CallService:
    return CallService(supabase)


def _require_call_member(call: Dict, user_id: str, supabase: Client) -> None:
    if not get_membership(call["group_id"], user_id, supabase):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You must be a member of this group"
        )


@router.get("/calls/ice-servers", response_model=IceServersResponse)
async def get_ice_servers(user_data: Dict = Depends(get_current_user_id)):
    """STUN servers peers should configure on their RTCPeerConnection"""
    return IceServersResponse(ice_servers=settings.get_ice_servers())


@router.post("/groups/{group_id}/calls", response_model=CallResponse, status_code=201)
async def start_call(
    group_id: str,
    user_data: Dict = Depends(check_group_member),
    service: CallService = Depends(get_call_service)
):
    """Start a voice call in the group"""
    return service.start_call(group_id, user_data)


@router.get("/groups/{group_id}/calls/active", response_model=Optional[CallResponse])
async def get_active_call(
    group_id: str,
    user_data: Dict = Depends(check_group_member),
    service: CallService = Depends(get_call_service)
):
    return service.get_active_call(group_id)


@router.post("/calls/{call_id}/join")
async def join_call(
    call_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: CallService = Depends(get_call_service),
    supabase: Client = Depends(get_supabase)
):
    _require_call_member(service.get_call(call_id), user_data["id"], supabase)
    return service.join_call(call_id, user_data["id"])


@router.post("/calls/{call_id}/end", response_model=CallEndResponse)
async def end_call(
    call_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: CallService = Depends(get_call_service),
    supabase: Client = Depends(get_supabase)
):
    """End the call (starter) or leave it (everyone else)"""
    _require_call_member(service.get_call(call_id), user_data["id"], supabase)
    return service.end_call(call_id, user_data)


@router.websocket("/calls/{call_id}/signal")
async def signaling_socket(
    websocket: WebSocket,
    call_id: str,
    token: str = Query(...),
    auth_service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase),
    hub: SignalingHub = Depends(get_signaling_hub)
):
    """Relay offers, answers and ICE candidates between the participants of one call"""
    try:
        user_data = auth_service.get_current_user(token)
        call = CallService(supabase).get_call(call_id)
        if not call.get("is_active"):
            raise HTTPException(status_code=409, detail="This call has ended")
        _require_call_member(call, user_data["id"], supabase)
    except HTTPException as e:
        logger.info(f"Rejected signaling connection to call {call_id}: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user_id = user_data["id"]
    await websocket.accept()
    await hub.connect(call_id, user_id, display_name(user_data), websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            await hub.relay(call_id, user_id, raw)
    except WebSocketDisconnect:
        pass
    finally:
        await hub.disconnect(call_id, user_id, websocket)
