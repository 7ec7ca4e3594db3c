"""
Chat service - stores conversations between a device and its assistant.

The assistant itself is a keyword responder standing in for a real model
integration; everything around it (sessions, stats, export, search) is real.
"""

import logging
import random
import re
import time
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lacr.core.clock import as_utc, epoch_ms, utcnow
from lacr.core.errors import ValidationError
from lacr.models.chat_message import ChatMessage

logger = logging.getLogger("lacr.services.chat")

RESPONDER_MODEL = "gemini-pro"
RESPONDER_TEMPERATURE = 0.7
RESPONDER_MAX_TOKENS = 2048

# ---------------------------------------------------------------------------
# KEYWORD RESPONDER
# ---------------------------------------------------------------------------
# First matching rule wins; otherwise a generic follow-up is picked at random
KEYWORD_REPLIES = [
    (re.compile(r"\b(hello|hi)\b"),
     "Hello! How are you doing today? I'm here to chat and help with anything you need."),
    (re.compile(r"\bhow are you\b"),
     "I'm doing well, thank you for asking! I'm here and ready to have a great conversation with you."),
    (re.compile(r"\b(thank you|thanks)\b"),
     "You're very welcome! I'm glad I could help. Is there anything else you'd like to talk about?"),
    (re.compile(r"\b(bye|goodbye)\b"),
     "Goodbye! It was great chatting with you. Feel free to come back anytime!"),
    (re.compile(r"\bhelp\b"),
     "I'm here to help! I can chat about almost anything - your thoughts, feelings, ideas, "
     "or just about life in general. What would you like to talk about?"),
]

FALLBACK_REPLIES = [
    "That's an interesting point! Can you tell me more about that?",
    "I understand what you're saying. How does that make you feel?",
    "That's a great question. Let me think about that for a moment.",
    "I see your perspective. Have you considered looking at it from another angle?",
    "That's fascinating! What led you to that conclusion?",
    "I appreciate you sharing that with me. What's your next step?",
    "That's a complex topic. What aspect interests you most?",
    "I hear what you're saying. How can I help you with that?",
    "That's a thoughtful observation. What do you think might happen next?",
    "I understand. Is there anything specific you'd like to explore further?",
]


def generate_reply(message: str) -> str:
    lowered = message.lower()
    for pattern, reply in KEYWORD_REPLIES:
        if pattern.search(lowered):
            return reply
    return random.choice(FALLBACK_REPLIES)


def estimate_tokens(text: str) -> int:
    # ~4 characters per token
    return len(text) // 4


class ChatService:

    def send(self, db: Session, device_id: str, message: str, session_id: Optional[str] = None) -> tuple[str, list[ChatMessage], str]:
        """Store the user's message and the assistant's reply; returns (session_id, messages, reply)."""
        session_id = session_id or f"session_{epoch_ms()}"

        user_message = ChatMessage(
            device_id=device_id,
            session_id=session_id,
            message_type="user",
            message=message,
            tokens_used=estimate_tokens(message),
            response_time=0,
            timestamp=utcnow(),
        )
        db.add(user_message)

        started = time.perf_counter()
        reply = generate_reply(message)
        elapsed_ms = int((time.perf_counter() - started) * 1000)

        assistant_message = ChatMessage(
            device_id=device_id,
            session_id=session_id,
            message_type="assistant",
            message=reply,
            tokens_used=estimate_tokens(reply),
            response_time=elapsed_ms,
            model_name=RESPONDER_MODEL,
            temperature=RESPONDER_TEMPERATURE,
            max_tokens=RESPONDER_MAX_TOKENS,
            timestamp=utcnow(),
        )
        db.add(assistant_message)
        db.commit()
        db.refresh(user_message)
        db.refresh(assistant_message)
        return session_id, [user_message, assistant_message], reply

    def sessions(self, db: Session, device_id: str) -> list[dict]:
        rows = (
            db.query(
                ChatMessage.session_id,
                func.count(ChatMessage.id),
                func.min(ChatMessage.timestamp),
                func.max(ChatMessage.timestamp),
                func.coalesce(func.sum(ChatMessage.tokens_used), 0),
            )
            .filter(ChatMessage.device_id == device_id)
            .group_by(ChatMessage.session_id)
            .all()
        )
        sessions = [
            {
                "session_id": session_id,
                "message_count": count,
                "first_message": as_utc(first),
                "last_message": as_utc(last),
                "total_tokens": int(tokens),
            }
            for session_id, count, first, last, tokens in rows
        ]
        sessions.sort(key=lambda s: s["last_message"], reverse=True)
        return sessions

    def history(self, db: Session, device_id: str, session_id: str, limit: int = 50, offset: int = 0) -> list[ChatMessage]:
        return (
            db.query(ChatMessage)
            .filter(ChatMessage.device_id == device_id, ChatMessage.session_id == session_id)
            .order_by(ChatMessage.timestamp, ChatMessage.message_type.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def delete_session(self, db: Session, device_id: str, session_id: str) -> int:
        deleted = (
            db.query(ChatMessage)
            .filter(ChatMessage.device_id == device_id, ChatMessage.session_id == session_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    def clear_history(self, db: Session, device_id: str) -> int:
        deleted = (
            db.query(ChatMessage)
            .filter(ChatMessage.device_id == device_id)
            .delete(synchronize_session=False)
        )
        db.commit()
        logger.info(f"Cleared {deleted} chat messages for device {device_id}")
        return deleted

    def stats(self, db: Session, device_id: str) -> dict:
        total, tokens, avg_response, sessions = (
            db.query(
                func.count(ChatMessage.id),
                func.coalesce(func.sum(ChatMessage.tokens_used), 0),
                func.avg(ChatMessage.response_time),
                func.count(func.distinct(ChatMessage.session_id)),
            )
            .filter(ChatMessage.device_id == device_id)
            .one()
        )
        return {
            "total_messages": total,
            "total_tokens": int(tokens),
            "avg_response_time": int(round(float(avg_response))) if avg_response is not None else 0,
            "total_sessions": sessions,
        }

    def export(self, db: Session, device_id: str, session_id: str) -> dict:
        messages = self.history(db, device_id, session_id, limit=10_000)
        return {
            "session_id": session_id,
            "device_id": device_id,
            "export_date": utcnow(),
            "messages": [
                {
                    "type": m.message_type,
                    "message": m.message,
                    "timestamp": m.timestamp,
                    "tokens_used": m.tokens_used,
                }
                for m in messages
            ],
        }

    def search(self, db: Session, device_id: str, query: Optional[str], limit: int = 20) -> list[ChatMessage]:
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        return (
            db.query(ChatMessage)
            .filter(
                ChatMessage.device_id == device_id,
                ChatMessage.message.icontains(query.strip(), autoescape=True),
            )
            .order_by(ChatMessage.timestamp.desc())
            .limit(limit)
            .all()
        )

    def recent(self, db: Session, device_id: str, limit: int = 10) -> list[ChatMessage]:
        """Latest message of each session found among the newest `limit` messages."""
        newest = (
            db.query(ChatMessage)
            .filter(ChatMessage.device_id == device_id)
            .order_by(ChatMessage.timestamp.desc(), ChatMessage.message_type)
            .limit(limit)
            .all()
        )
        latest_per_session: dict[str, ChatMessage] = {}
        for message in newest:
            latest_per_session.setdefault(message.session_id, message)
        return list(latest_per_session.values())


# Global instance
chat_service = ChatService()
