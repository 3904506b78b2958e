from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.matching.schemas import (
    InterestMatchRequest, MatchResult, GroupSearchRequest, GroupSearchResult, QuizMatchRequest
)
from app.modules.matching.service import MatchingService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/matching", tags=["matching"])


def get_matching_service(supabase: Client = Depends(get_supabase)) -> MatchingService:
    return MatchingService(supabase)


@router.post("/interests", response_model=MatchResult)
async def match_by_interests(
    payload: InterestMatchRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service)
):
    """Save interests and place the caller into a matching group"""
    return service.match_by_interests(user_data["id"], payload.tag_ids)


@router.post("/search", response_model=List[GroupSearchResult])
async def search_groups(
    payload: GroupSearchRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service)
):
    """Groups ranked by overlap with the given tags"""
    return service.search_groups(payload.tag_ids)


@router.post("/quiz", response_model=MatchResult)
async def match_by_quiz(
    payload: QuizMatchRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: MatchingService = Depends(get_matching_service)
):
    """Place the caller into a group from free-form quiz responses"""
    return service.match_by_quiz(user_data["id"], payload.responses)
