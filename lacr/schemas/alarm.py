"""
Alarm schemas.

Times travel as {"hour": 7, "minute": 30}; repeat as one boolean per weekday.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from lacr.models.alarm import Alarm


class AlarmTime(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    minute: int = Field(..., ge=0, le=59)


class AlarmRepeat(BaseModel):
    monday: bool = False
    tuesday: bool = False
    wednesday: bool = False
    thursday: bool = False
    friday: bool = False
    saturday: bool = False
    sunday: bool = False


class AlarmCreate(BaseModel):
    """
    Example request body:
    {
        "label": "Wake up",
        "time": {"hour": 7, "minute": 30},
        "repeat": {"monday": true, "friday": true}
    }
    """
    label: str = Field("Alarm", min_length=1, max_length=100)
    time: AlarmTime
    enabled: bool = True
    repeat: AlarmRepeat = Field(default_factory=AlarmRepeat)
    snooze_enabled: bool = True
    snooze_duration: int = Field(5, ge=1, le=60)
    sound_enabled: bool = True
    vibration_enabled: bool = False


class AlarmUpdate(BaseModel):
    """All fields optional - only provided fields are updated."""
    label: Optional[str] = Field(None, min_length=1, max_length=100)
    time: Optional[AlarmTime] = None
    enabled: Optional[bool] = None
    repeat: Optional[AlarmRepeat] = None
    snooze_enabled: Optional[bool] = None
    snooze_duration: Optional[int] = Field(None, ge=1, le=60)
    sound_enabled: Optional[bool] = None
    vibration_enabled: Optional[bool] = None


class AlarmOut(BaseModel):
    id: uuid.UUID
    device_id: str
    label: str
    time: AlarmTime
    enabled: bool
    repeat: AlarmRepeat
    snooze_enabled: bool
    snooze_duration: int
    sound_enabled: bool
    vibration_enabled: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, alarm: Alarm) -> "AlarmOut":
        return cls(
            id=alarm.id,
            device_id=alarm.device_id,
            label=alarm.label,
            time=AlarmTime(hour=alarm.hour, minute=alarm.minute),
            enabled=alarm.enabled,
            repeat=AlarmRepeat(**(alarm.repeat or {})),
            snooze_enabled=alarm.snooze_enabled,
            snooze_duration=alarm.snooze_duration,
            sound_enabled=alarm.sound_enabled,
            vibration_enabled=alarm.vibration_enabled,
            created_at=alarm.created_at,
            updated_at=alarm.updated_at,
        )


class AlarmResponse(BaseModel):
    success: bool = True
    alarm: AlarmOut


class AlarmListResponse(BaseModel):
    success: bool = True
    alarms: list[AlarmOut]


class NextAlarmResponse(BaseModel):
    """
    time_until is in milliseconds. Both fields are null when no enabled
    alarm will ring in the next week.
    """
    success: bool = True
    next_alarm: Optional[AlarmOut]
    fires_at: Optional[datetime]
    time_until: Optional[int]
