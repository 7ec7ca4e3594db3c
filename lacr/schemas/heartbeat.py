"""
Heartbeat telemetry schemas (heart-rate readings, not the ESP32 status ping).
"""

import uuid
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Quality = Literal["poor", "fair", "good", "excellent"]


class ReadingCreate(BaseModel):
    """
    Example request body:
    {
        "bpm": 72,
        "session_id": "session_1733140000000",
        "quality": "good"
    }
    """
    bpm: int = Field(..., ge=40, le=200, description="Beats per minute (40-200)")
    session_id: Optional[str] = Field(None, min_length=1, max_length=64)
    quality: Quality = "good"
    notes: Optional[str] = Field(None, max_length=500)


class ReadingOut(BaseModel):
    id: uuid.UUID
    device_id: str
    bpm: int
    session_id: str
    quality: str
    notes: Optional[str]
    timestamp: datetime

    class Config:
        from_attributes = True


class ReadingResponse(BaseModel):
    success: bool = True
    reading: ReadingOut


class ReadingListResponse(BaseModel):
    success: bool = True
    readings: list[ReadingOut]


class HeartRateZone(BaseModel):
    min: int
    max: int
    percentage: float


class HeartbeatStats(BaseModel):
    period: str
    count: int
    avg_bpm: float
    min_bpm: int
    max_bpm: int
    latest_reading: Optional[datetime]
    zones: Optional[dict[str, HeartRateZone]] = None


class StatsResponse(BaseModel):
    success: bool = True
    stats: HeartbeatStats


class SessionSummary(BaseModel):
    session_id: str
    reading_count: int
    avg_bpm: float
    min_bpm: int
    max_bpm: int
    start_time: Optional[datetime]
    end_time: Optional[datetime]
    duration: int  # milliseconds


class SessionListResponse(BaseModel):
    success: bool = True
    sessions: list[SessionSummary]


class DailyTrend(BaseModel):
    date: str  # YYYY-MM-DD (UTC)
    avg_bpm: float
    min_bpm: int
    max_bpm: int
    count: int


class TrendsResponse(BaseModel):
    success: bool = True
    trends: list[DailyTrend]


class SessionStopRequest(BaseModel):
    session_id: Optional[str] = None


class SessionStartResponse(BaseModel):
    success: bool = True
    message: str = "Heartbeat monitoring session started"
    session_id: str
    start_time: datetime


class SessionStopResponse(BaseModel):
    success: bool = True
    message: str = "Heartbeat monitoring session stopped"
    session_id: str
    stats: SessionSummary


class DeleteReadingsResponse(BaseModel):
    success: bool = True
    message: str
    deleted_count: int
