"""
Chat router - conversation log with the robot's assistant.

Mounted under /gemini for compatibility with existing app builds; replies
come from the local keyword responder in lacr.services.chat.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.schemas.chat import (
    ChatDeleteResponse,
    ChatExport,
    ChatMessageOut,
    ChatRequest,
    ChatResponse,
    ChatSessionListResponse,
    ChatSessionSummary,
    ChatStats,
    ChatStatsResponse,
    MessageListResponse,
)
from lacr.services.chat import chat_service

router = APIRouter(prefix="/gemini", tags=["chat"])


def _messages(messages) -> list[ChatMessageOut]:
    return [ChatMessageOut.model_validate(m) for m in messages]


# ---------------------------------------------------------------------------
# CONVERSATION
# ---------------------------------------------------------------------------

@router.post("/{device_id}/chat", response_model=ChatResponse)
def send_message(device_id: str, payload: ChatRequest, db: Session = Depends(get_db)):
    """
    Send a message and get the assistant's reply.

    Both the message and the reply are stored under the session; omit
    session_id to start a new one.
    """
    session_id, messages, reply = chat_service.send(db, device_id, payload.message, payload.session_id)
    return ChatResponse(session_id=session_id, messages=_messages(messages), response=reply)


@router.get("/{device_id}/sessions", response_model=ChatSessionListResponse)
def list_sessions(device_id: str, db: Session = Depends(get_db)):
    sessions = chat_service.sessions(db, device_id)
    return ChatSessionListResponse(sessions=[ChatSessionSummary(**s) for s in sessions])


@router.get("/{device_id}/session/{session_id}", response_model=MessageListResponse)
def session_history(
    device_id: str,
    session_id: str,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    messages = chat_service.history(db, device_id, session_id, limit=limit, offset=offset)
    return MessageListResponse(messages=_messages(messages))


@router.delete("/{device_id}/session/{session_id}", response_model=ChatDeleteResponse)
def delete_session(device_id: str, session_id: str, db: Session = Depends(get_db)):
    deleted = chat_service.delete_session(db, device_id, session_id)
    return ChatDeleteResponse(message="Session deleted successfully", deleted_count=deleted)


@router.get("/{device_id}/session/{session_id}/export", response_model=ChatExport)
def export_session(device_id: str, session_id: str, db: Session = Depends(get_db)):
    return ChatExport(**chat_service.export(db, device_id, session_id))


@router.delete("/{device_id}/history", response_model=ChatDeleteResponse)
def clear_history(device_id: str, db: Session = Depends(get_db)):
    deleted = chat_service.clear_history(db, device_id)
    return ChatDeleteResponse(message="Chat history cleared", deleted_count=deleted)


# ---------------------------------------------------------------------------
# LOOKUPS
# ---------------------------------------------------------------------------

@router.get("/{device_id}/stats", response_model=ChatStatsResponse)
def chat_stats(device_id: str, db: Session = Depends(get_db)):
    return ChatStatsResponse(stats=ChatStats(**chat_service.stats(db, device_id)))


@router.get("/{device_id}/search", response_model=MessageListResponse)
def search_messages(
    device_id: str,
    query: Optional[str] = None,
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Case-insensitive substring search. Errors: 400 without a query."""
    return MessageListResponse(messages=_messages(chat_service.search(db, device_id, query, limit)))


@router.get("/{device_id}/recent", response_model=MessageListResponse)
def recent_conversations(
    device_id: str,
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return MessageListResponse(messages=_messages(chat_service.recent(db, device_id, limit)))
