from pydantic import BaseModel, Field
from typing import Optional, List


class GeneratedQuestion(BaseModel):
    category: str
    question: str
    options: Optional[List[str]] = None


class GenerateQuestionsRequest(BaseModel):
    categories: Optional[List[str]] = None
    count: int = Field(8, ge=1, le=20)


class GenerateQuestionsResponse(BaseModel):
    questions: List[GeneratedQuestion]
    source: str  # "ai" | "fallback"
