from pydantic import BaseModel
from typing import Optional, List, Literal, Any
from datetime import datetime


class CallResponse(BaseModel):
    id: str
    group_id: str
    started_by: str
    is_active: bool
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CallEndResponse(BaseModel):
    call_id: str
    ended_for_everyone: bool


class IceServer(BaseModel):
    urls: str


class IceServersResponse(BaseModel):
    ice_servers: List[IceServer]


class SignalMessage(BaseModel):
    """Frame a peer sends over the signaling socket; 'from' is stamped by the relay"""
    type: Literal["offer", "answer", "ice-candidate"]
    to: str
    sdp: Optional[Any] = None
    candidate: Optional[Any] = None
