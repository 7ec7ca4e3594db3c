"""
Chat schemas - conversation log with the robot's assistant.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ChatRequest(BaseModel):
    """
    Example request body:
    {
        "message": "Hello!",
        "session_id": "session_1733140000000"
    }
    """
    message: str = Field(..., min_length=1, max_length=4000)
    session_id: Optional[str] = Field(None, min_length=1, max_length=64)


class ChatMessageOut(BaseModel):
    id: uuid.UUID
    device_id: str
    session_id: str
    message_type: str
    message: str
    timestamp: datetime
    tokens_used: int
    response_time: int
    model_name: Optional[str]

    class Config:
        from_attributes = True
        protected_namespaces = ()


class ChatResponse(BaseModel):
    success: bool = True
    session_id: str
    messages: list[ChatMessageOut]
    response: str


class MessageListResponse(BaseModel):
    success: bool = True
    messages: list[ChatMessageOut]


class ChatSessionSummary(BaseModel):
    session_id: str
    message_count: int
    first_message: Optional[datetime]
    last_message: Optional[datetime]
    total_tokens: int


class ChatSessionListResponse(BaseModel):
    success: bool = True
    sessions: list[ChatSessionSummary]


class ChatStats(BaseModel):
    total_messages: int
    total_tokens: int
    avg_response_time: int
    total_sessions: int


class ChatStatsResponse(BaseModel):
    success: bool = True
    stats: ChatStats


class ExportedMessage(BaseModel):
    type: str
    message: str
    timestamp: datetime
    tokens_used: int


class ChatExport(BaseModel):
    session_id: str
    device_id: str
    export_date: datetime
    messages: list[ExportedMessage]


class ChatDeleteResponse(BaseModel):
    success: bool = True
    message: str
    deleted_count: int
