"""
Heartbeat telemetry service - heart-rate readings, statistics and sessions.

A "session" is just the session_id readings share; starting one only
hands out a fresh id, stopping one summarizes the readings that used it.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from lacr.core.clock import as_utc, epoch_ms, utcnow
from lacr.core.errors import NotFound, ValidationError
from lacr.models.heartbeat import HeartbeatReading
from lacr.schemas.heartbeat import ReadingCreate

logger = logging.getLogger("lacr.services.heartbeat")

PERIODS = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}

# Simplified heart-rate zones, reported as how far the average sits into each band
ZONES = {
    "fat_burn": (50, 69),
    "cardio": (70, 85),
    "peak": (85, 100),
}


def new_session_id() -> str:
    return f"session_{epoch_ms()}"


def zone_percentages(avg_bpm: float) -> dict[str, dict]:
    zones = {}
    for name, (low, high) in ZONES.items():
        share = (avg_bpm - low) / (high - low) * 100
        zones[name] = {
            "min": low,
            "max": high,
            "percentage": round(min(100.0, max(0.0, share)), 1),
        }
    return zones


def _summarize(session_id: str, count: int, avg, low, high, start, end) -> dict:
    start, end = as_utc(start), as_utc(end)
    return {
        "session_id": session_id,
        "reading_count": count or 0,
        "avg_bpm": round(float(avg), 1) if avg is not None else 0.0,
        "min_bpm": low or 0,
        "max_bpm": high or 0,
        "start_time": start,
        "end_time": end,
        "duration": int((end - start).total_seconds() * 1000) if start and end else 0,
    }


class HeartbeatService:

    def record(self, db: Session, device_id: str, payload: ReadingCreate) -> HeartbeatReading:
        reading = HeartbeatReading(
            device_id=device_id,
            bpm=payload.bpm,
            session_id=payload.session_id or new_session_id(),
            quality=payload.quality,
            notes=payload.notes,
        )
        db.add(reading)
        db.commit()
        db.refresh(reading)
        return reading

    def list_readings(
        self,
        db: Session,
        device_id: str,
        limit: int = 50,
        session_id: Optional[str] = None,
    ) -> list[HeartbeatReading]:
        query = db.query(HeartbeatReading).filter(HeartbeatReading.device_id == device_id)
        if session_id:
            query = query.filter(HeartbeatReading.session_id == session_id)
        return query.order_by(HeartbeatReading.timestamp.desc()).limit(limit).all()

    def latest(self, db: Session, device_id: str) -> HeartbeatReading:
        reading = (
            db.query(HeartbeatReading)
            .filter(HeartbeatReading.device_id == device_id)
            .order_by(HeartbeatReading.timestamp.desc())
            .first()
        )
        if reading is None:
            raise NotFound("No heartbeat readings found")
        return reading

    def stats(self, db: Session, device_id: str, period: str = "24h") -> dict:
        """Aggregate readings from the last `period` (24h, 7d or 30d)."""
        if period not in PERIODS:
            raise ValidationError(f"Unknown period '{period}', expected one of {', '.join(PERIODS)}")
        since = utcnow() - PERIODS[period]

        count, avg, low, high, latest = (
            db.query(
                func.count(HeartbeatReading.id),
                func.avg(HeartbeatReading.bpm),
                func.min(HeartbeatReading.bpm),
                func.max(HeartbeatReading.bpm),
                func.max(HeartbeatReading.timestamp),
            )
            .filter(HeartbeatReading.device_id == device_id, HeartbeatReading.timestamp >= since)
            .one()
        )

        avg_bpm = round(float(avg), 1) if avg is not None else 0.0
        stats = {
            "period": period,
            "count": count or 0,
            "avg_bpm": avg_bpm,
            "min_bpm": low or 0,
            "max_bpm": high or 0,
            "latest_reading": as_utc(latest),
            "zones": zone_percentages(avg_bpm) if avg_bpm > 0 else None,
        }
        return stats

    def sessions(self, db: Session, device_id: str) -> list[dict]:
        """One summary per session, most recent first."""
        rows = (
            db.query(
                HeartbeatReading.session_id,
                func.count(HeartbeatReading.id),
                func.avg(HeartbeatReading.bpm),
                func.min(HeartbeatReading.bpm),
                func.max(HeartbeatReading.bpm),
                func.min(HeartbeatReading.timestamp),
                func.max(HeartbeatReading.timestamp),
            )
            .filter(HeartbeatReading.device_id == device_id)
            .group_by(HeartbeatReading.session_id)
            .all()
        )
        summaries = [_summarize(*row) for row in rows]
        summaries.sort(key=lambda s: s["start_time"], reverse=True)
        return summaries

    def trends(self, db: Session, device_id: str, days: int = 7) -> list[dict]:
        """Daily (UTC) aggregates over the last `days` days, oldest day first."""
        since = utcnow() - timedelta(days=days)
        readings = (
            db.query(HeartbeatReading.bpm, HeartbeatReading.timestamp)
            .filter(HeartbeatReading.device_id == device_id, HeartbeatReading.timestamp >= since)
            .all()
        )

        by_day: dict[str, list[int]] = {}
        for bpm, timestamp in readings:
            by_day.setdefault(as_utc(timestamp).strftime("%Y-%m-%d"), []).append(bpm)

        return [
            {
                "date": day,
                "avg_bpm": round(sum(values) / len(values), 1),
                "min_bpm": min(values),
                "max_bpm": max(values),
                "count": len(values),
            }
            for day, values in sorted(by_day.items())
        ]

    def delete(
        self,
        db: Session,
        device_id: str,
        session_id: Optional[str] = None,
        before: Optional[datetime] = None,
    ) -> int:
        query = db.query(HeartbeatReading).filter(HeartbeatReading.device_id == device_id)
        if session_id:
            query = query.filter(HeartbeatReading.session_id == session_id)
        if before is not None:
            query = query.filter(HeartbeatReading.timestamp < as_utc(before))
        deleted = query.delete(synchronize_session=False)
        db.commit()
        logger.info(f"Deleted {deleted} heartbeat readings for device {device_id}")
        return deleted

    def start_session(self, device_id: str) -> tuple[str, datetime]:
        session_id = new_session_id()
        logger.info(f"Heartbeat session {session_id} started on device {device_id}")
        return session_id, utcnow()

    def stop_session(self, db: Session, device_id: str, session_id: Optional[str]) -> dict:
        if not session_id:
            raise ValidationError("Session ID is required")

        row = (
            db.query(
                func.count(HeartbeatReading.id),
                func.avg(HeartbeatReading.bpm),
                func.min(HeartbeatReading.bpm),
                func.max(HeartbeatReading.bpm),
                func.min(HeartbeatReading.timestamp),
                func.max(HeartbeatReading.timestamp),
            )
            .filter(HeartbeatReading.device_id == device_id, HeartbeatReading.session_id == session_id)
            .one()
        )
        return _summarize(session_id, *row)


# Global instance
heartbeat_service = HeartbeatService()
