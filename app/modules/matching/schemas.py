from pydantic import BaseModel
from typing import Optional, List, Dict, Any


class InterestMatchRequest(BaseModel):
    tag_ids: List[str]


class MatchResult(BaseModel):
    group_id: str
    matched_by: str  # "rpc" | "fallback"


class GroupSearchRequest(BaseModel):
    tag_ids: List[str]


class GroupSearchResult(BaseModel):
    group_id: str
    name: str
    description: Optional[str] = None
    match_percentage: float


class QuizMatchRequest(BaseModel):
    responses: List[Dict[str, Any]]
