from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class MessageCreate(BaseModel):
    content: str


class MessageResponse(BaseModel):
    id: str
    group_id: str
    user_id: str
    content: str
    is_meme: bool = False
    media_url: Optional[str] = None
    is_system_message: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
