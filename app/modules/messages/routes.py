from fastapi import APIRouter, Depends, UploadFile, File
from app.database.supabase_client import get_supabase
from app.modules.messages.schemas import MessageCreate, MessageResponse
from app.modules.messages.service import MessageService
from app.core.dependencies import check_group_admin, check_group_member
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/groups/{group_id}/messages", tags=["messages"])


def get_message_service(supabase: Client = Depends(get_supabase)) -> MessageService:
    return MessageService(supabase)


@router.get("", response_model=List[MessageResponse])
async def list_messages(
    group_id: str,
    limit: int = 200,
    user_data: Dict = Depends(check_group_member),
    service: MessageService = Depends(get_message_service)
):
    return service.list_messages(group_id, limit=limit)


@router.post("", response_model=MessageResponse, status_code=201)
async def send_message(
    group_id: str,
    payload: MessageCreate,
    user_data: Dict = Depends(check_group_member),
    service: MessageService = Depends(get_message_service)
):
    return service.send_message(group_id, user_data["id"], payload.content)


@router.post("/media", response_model=MessageResponse, status_code=201)
async def send_media(
    group_id: str,
    file: UploadFile = File(...),
    user_data: Dict = Depends(check_group_member),
    service: MessageService = Depends(get_message_service)
):
    """Upload an image/meme into the chat"""
    content = await file.read()
    return service.send_media(
        group_id,
        user_data["id"],
        file.filename or "upload",
        content,
        file.content_type or "application/octet-stream",
    )


@router.delete("/{message_id}", status_code=204)
async def delete_message(
    group_id: str,
    message_id: str,
    user_data: Dict = Depends(check_group_admin),
    service: MessageService = Depends(get_message_service)
):
    """Delete a message (admin only)"""
    service.delete_message(group_id, message_id)
    return None
