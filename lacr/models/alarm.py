"""
Alarm model - an alarm clock entry on a device.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON, Integer, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from lacr.db.base import Base

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def no_repeat() -> dict:
    return {day: False for day in WEEKDAYS}


class Alarm(Base):
    """
    SQLAlchemy ORM model for the 'alarms' table.

    An alarm with no weekday set in `repeat` is a one-shot alarm.
    """

    __tablename__ = "alarms"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # device_id: robot_id of the device the alarm rings on (advisory reference)
    device_id: Mapped[str] = mapped_column(String(100), index=True, nullable=False)

    label: Mapped[str] = mapped_column(String(100), default="Alarm")
    hour: Mapped[int] = mapped_column(Integer, nullable=False)
    minute: Mapped[int] = mapped_column(Integer, nullable=False)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    # repeat: {"monday": true, ..., "sunday": false}
    repeat: Mapped[dict] = mapped_column(JSON, default=no_repeat)

    snooze_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    snooze_duration: Mapped[int] = mapped_column(Integer, default=5)  # minutes
    sound_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    vibration_enabled: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def repeat_days(self) -> list[int]:
        """Weekday numbers (Monday=0) the alarm repeats on."""
        repeat = self.repeat or {}
        return [index for index, day in enumerate(WEEKDAYS) if repeat.get(day)]
