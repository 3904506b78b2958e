from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.config.interest_tags import INTEREST_CATEGORIES, calculate_match_score, filter_options
from app.modules.tags.schemas import (
    TagCategory, TagOption, UserTagsUpdate, UserTagsResponse,
    MatchScoreRequest, MatchScoreResponse
)
from app.modules.tags.service import TagService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict, List

router = APIRouter(prefix="/tags", tags=["tags"])


def get_tag_service(supabase: Client = Depends(get_supabase)) -> TagService:
    return TagService(supabase)


@router.get("/catalog", response_model=List[TagCategory])
async def get_catalog():
    """Static interest taxonomy"""
    return INTEREST_CATEGORIES


@router.get("/catalog/{category_id}", response_model=List[TagOption])
async def search_catalog(category_id: str, q: str = ""):
    """Options of one category filtered by name"""
    return filter_options(category_id, q)


@router.get("/me", response_model=UserTagsResponse)
async def get_my_tags(
    user_data: Dict = Depends(get_current_user_id),
    service: TagService = Depends(get_tag_service)
):
    return UserTagsResponse(user_id=user_data["id"], tag_ids=service.get_user_tags(user_data["id"]))


@router.put("/me", response_model=UserTagsResponse)
async def replace_my_tags(
    payload: UserTagsUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: TagService = Depends(get_tag_service)
):
    """Replace the caller's interest selection"""
    saved = service.replace_user_tags(user_data["id"], payload.tag_ids)
    return UserTagsResponse(user_id=user_data["id"], tag_ids=saved)


@router.post("/match-score", response_model=MatchScoreResponse)
async def match_score(payload: MatchScoreRequest):
    return calculate_match_score(payload.interests_a, payload.interests_b)
