"""
Heartbeat router - heart-rate readings measured by the robot's sensor.

Not to be confused with /esp32/heartbeat, the robot's status ping.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.schemas.heartbeat import (
    DeleteReadingsResponse,
    HeartbeatStats,
    ReadingCreate,
    ReadingListResponse,
    ReadingOut,
    ReadingResponse,
    SessionListResponse,
    SessionStartResponse,
    SessionStopRequest,
    SessionStopResponse,
    SessionSummary,
    StatsResponse,
    TrendsResponse,
)
from lacr.services.heartbeat import heartbeat_service

router = APIRouter(prefix="/heartbeat", tags=["heartbeat"])


# ---------------------------------------------------------------------------
# READINGS
# ---------------------------------------------------------------------------

@router.get("/{device_id}", response_model=ReadingListResponse)
def list_readings(
    device_id: str,
    limit: int = Query(50, ge=1, le=1000),
    session_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    readings = heartbeat_service.list_readings(db, device_id, limit=limit, session_id=session_id)
    return ReadingListResponse(readings=[ReadingOut.model_validate(r) for r in readings])


@router.post("/{device_id}", response_model=ReadingResponse, status_code=status.HTTP_201_CREATED)
def record_reading(device_id: str, payload: ReadingCreate, db: Session = Depends(get_db)):
    """
    Store one reading. Without a session_id the reading starts a session
    of its own.

    Errors:
        400: bpm outside 40-200
    """
    reading = heartbeat_service.record(db, device_id, payload)
    return ReadingResponse(reading=ReadingOut.model_validate(reading))


@router.delete("/{device_id}", response_model=DeleteReadingsResponse)
def delete_readings(
    device_id: str,
    session_id: Optional[str] = None,
    before: Optional[datetime] = None,
    db: Session = Depends(get_db),
):
    """Delete readings, optionally only one session and/or those older than `before`."""
    deleted = heartbeat_service.delete(db, device_id, session_id=session_id, before=before)
    return DeleteReadingsResponse(message=f"Deleted {deleted} readings", deleted_count=deleted)


@router.get("/{device_id}/latest", response_model=ReadingResponse)
def latest_reading(device_id: str, db: Session = Depends(get_db)):
    reading = heartbeat_service.latest(db, device_id)
    return ReadingResponse(reading=ReadingOut.model_validate(reading))


# ---------------------------------------------------------------------------
# AGGREGATES
# ---------------------------------------------------------------------------

@router.get("/{device_id}/stats", response_model=StatsResponse)
def reading_stats(device_id: str, period: str = "24h", db: Session = Depends(get_db)):
    stats = heartbeat_service.stats(db, device_id, period)
    return StatsResponse(stats=HeartbeatStats(**stats))


@router.get("/{device_id}/sessions", response_model=SessionListResponse)
def list_sessions(device_id: str, db: Session = Depends(get_db)):
    sessions = heartbeat_service.sessions(db, device_id)
    return SessionListResponse(sessions=[SessionSummary(**s) for s in sessions])


@router.get("/{device_id}/trends", response_model=TrendsResponse)
def reading_trends(
    device_id: str,
    days: int = Query(7, ge=1, le=365),
    db: Session = Depends(get_db),
):
    return TrendsResponse(trends=heartbeat_service.trends(db, device_id, days))


# ---------------------------------------------------------------------------
# MONITORING SESSIONS
# ---------------------------------------------------------------------------

@router.post("/{device_id}/session/start", response_model=SessionStartResponse)
def start_session(device_id: str):
    session_id, start_time = heartbeat_service.start_session(device_id)
    return SessionStartResponse(session_id=session_id, start_time=start_time)


@router.post("/{device_id}/session/stop", response_model=SessionStopResponse)
def stop_session(
    device_id: str,
    payload: Optional[SessionStopRequest] = None,
    db: Session = Depends(get_db),
):
    """Summarize a monitoring session. Errors: 400 without session_id."""
    session_id = payload.session_id if payload else None
    summary = heartbeat_service.stop_session(db, device_id, session_id)
    return SessionStopResponse(session_id=summary["session_id"], stats=SessionSummary(**summary))
