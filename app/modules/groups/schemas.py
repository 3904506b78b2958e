from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


class QuestionCreate(BaseModel):
    question: str
    options: List[str] = Field(..., min_length=2)
    correct_answer: int = 0


class GroupCreate(BaseModel):
    name: str
    description: Optional[str] = None
    questions: List[QuestionCreate]
    min_correct_answers: int = 1


class GroupResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    created_by: str
    min_correct_answers: int
    total_questions: int
    is_interest_based: bool = False
    last_message_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GroupMemberResponse(BaseModel):
    group_id: str
    user_id: str
    is_admin: bool = False
    joined_by_quiz: bool = False
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class QuizQuestion(BaseModel):
    id: str
    question: str
    options: List[str]


class QuizResponse(BaseModel):
    group_id: str
    group_name: str
    min_correct_answers: int
    questions: List[QuizQuestion]


class QuizSubmission(BaseModel):
    answers: Dict[str, int]


class QuizResult(BaseModel):
    score: int
    total: int
    required: int
    passed: bool
