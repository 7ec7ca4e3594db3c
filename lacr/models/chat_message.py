"""
ChatMessage model - one turn of a conversation with the robot's assistant.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Integer, Text, Float
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from lacr.db.base import Base

MESSAGE_TYPES = ("user", "assistant")


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    device_id: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    session_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)

    # message_type: "user" or "assistant"
    message_type: Mapped[str] = mapped_column(String(10), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), index=True, default=lambda: datetime.now(timezone.utc)
    )

    # Usage metadata; only filled for assistant replies
    tokens_used: Mapped[int] = mapped_column(Integer, default=0)
    response_time: Mapped[int] = mapped_column(Integer, default=0)  # milliseconds
    model_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_tokens: Mapped[int | None] = mapped_column(Integer, nullable=True)
