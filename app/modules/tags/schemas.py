from pydantic import BaseModel
from typing import List


class TagOption(BaseModel):
    id: str
    name: str


class TagCategory(BaseModel):
    id: str
    name: str
    options: List[TagOption]


class UserTagsUpdate(BaseModel):
    tag_ids: List[str]


class UserTagsResponse(BaseModel):
    user_id: str
    tag_ids: List[str]


class MatchScoreRequest(BaseModel):
    interests_a: List[str]
    interests_b: List[str]


class MatchScoreResponse(BaseModel):
    score: int
    max_possible: int
    percentage: float
