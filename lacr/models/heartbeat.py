"""
HeartbeatReading model - one heart-rate sample from the robot's pulse sensor.

Not to be confused with the ESP32 status heartbeat, which only updates
Robot.last_seen.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from lacr.db.base import Base

READING_QUALITIES = ("poor", "fair", "good", "excellent")


class HeartbeatReading(Base):
    __tablename__ = "heartbeat_readings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    device_id: Mapped[str] = mapped_column(String(100), index=True, nullable=False)

    # bpm: beats per minute, 40-200
    bpm: Mapped[int] = mapped_column(Integer, nullable=False)

    # session_id: groups readings from one monitoring session ("session_<epoch ms>")
    session_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)

    quality: Mapped[str] = mapped_column(String(10), default="good")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), index=True, default=lambda: datetime.now(timezone.utc)
    )
