from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.groups.schemas import (
    GroupCreate, GroupResponse, GroupMemberResponse,
    QuizResponse, QuizSubmission, QuizResult
)
from app.modules.groups.service import GroupService
from app.core.dependencies import get_current_user_id, check_group_admin, check_group_member
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(supabase: Client = Depends(get_supabase)) -> GroupService:
    return GroupService(supabase)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    user_data: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Create a new quiz-gated group; the caller becomes its admin"""
    return service.create_group(group_data, user_data["id"])


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    limit: int = 50,
    offset: int = 0,
    user_data: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """List groups the user is a member of"""
    return service.list_groups_for_user(user_data["id"], limit=limit, offset=offset)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    user_data: Dict = Depends(check_group_member),
    service: GroupService = Depends(get_group_service)
):
    """Get group by ID (only if user is a member)"""
    return service.get_group_by_id(group_id)


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    user_data: Dict = Depends(check_group_admin),
    service: GroupService = Depends(get_group_service)
):
    """Delete group with its members, messages, puzzles, answers and calls (admin only)"""
    service.delete_group(group_id)
    return None


@router.get("/{group_id}/members", response_model=List[GroupMemberResponse])
async def list_members(
    group_id: str,
    user_data: Dict = Depends(check_group_member),
    service: GroupService = Depends(get_group_service)
):
    """List all members of a group (only if user is a member)"""
    return service.list_members(group_id)


@router.delete("/{group_id}/members/{user_id}", status_code=204)
async def remove_member(
    group_id: str,
    user_id: str,
    user_data: Dict = Depends(check_group_admin),
    service: GroupService = Depends(get_group_service)
):
    """Remove a member from the group (admin only)"""
    service.remove_member(group_id, user_id)
    return None


@router.get("/{group_id}/quiz", response_model=QuizResponse)
async def get_quiz(
    group_id: str,
    user_data: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Entry quiz for a group the caller has not joined yet"""
    return service.get_quiz(group_id, user_data["id"])


@router.post("/{group_id}/quiz", response_model=QuizResult)
async def submit_quiz(
    group_id: str,
    submission: QuizSubmission,
    user_data: Dict = Depends(get_current_user_id),
    service: GroupService = Depends(get_group_service)
):
    """Submit quiz answers; joins the group on pass"""
    return service.submit_quiz(group_id, user_data["id"], submission)
