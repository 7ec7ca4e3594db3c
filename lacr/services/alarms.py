"""
Alarm service - CRUD for device alarms and next-alarm computation.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from lacr.core.errors import NotFound
from lacr.models.alarm import Alarm
from lacr.schemas.alarm import AlarmCreate, AlarmUpdate

logger = logging.getLogger("lacr.services.alarms")


def next_occurrence(alarm: Alarm, now: datetime) -> Optional[datetime]:
    """
    When `alarm` rings next, strictly after `now` (same tzinfo as `now`).

    - disabled: never
    - one-shot (no repeat day): today if the time is still ahead, else never
    - repeating: first matching weekday, looking at most a week ahead, so a
      weekly alarm whose time already passed today rings in seven days
    """
    if not alarm.enabled:
        return None

    today_at = now.replace(hour=alarm.hour, minute=alarm.minute, second=0, microsecond=0)
    days = alarm.repeat_days

    if not days:
        return today_at if today_at > now else None

    for offset in range(8):
        candidate = today_at + timedelta(days=offset)
        if candidate.weekday() in days and candidate > now:
            return candidate
    return None


def next_alarm(alarms: Iterable[Alarm], now: datetime) -> tuple[Optional[Alarm], Optional[datetime]]:
    """Earliest (alarm, fires_at) among `alarms`, or (None, None)."""
    best: tuple[Optional[Alarm], Optional[datetime]] = (None, None)
    for alarm in alarms:
        fires_at = next_occurrence(alarm, now)
        if fires_at is not None and (best[1] is None or fires_at < best[1]):
            best = (alarm, fires_at)
    return best


class AlarmService:

    def list_for_device(self, db: Session, device_id: str) -> list[Alarm]:
        return (
            db.query(Alarm)
            .filter(Alarm.device_id == device_id)
            .order_by(Alarm.hour, Alarm.minute)
            .all()
        )

    def get_or_404(self, db: Session, device_id: str, alarm_id: uuid.UUID) -> Alarm:
        alarm = db.query(Alarm).filter(
            Alarm.id == alarm_id,
            Alarm.device_id == device_id,
        ).first()
        if alarm is None:
            raise NotFound("Alarm not found")
        return alarm

    def create(self, db: Session, device_id: str, payload: AlarmCreate) -> Alarm:
        alarm = Alarm(
            device_id=device_id,
            label=payload.label,
            hour=payload.time.hour,
            minute=payload.time.minute,
            enabled=payload.enabled,
            repeat=payload.repeat.model_dump(),
            snooze_enabled=payload.snooze_enabled,
            snooze_duration=payload.snooze_duration,
            sound_enabled=payload.sound_enabled,
            vibration_enabled=payload.vibration_enabled,
        )
        db.add(alarm)
        db.commit()
        db.refresh(alarm)
        logger.info(f"Alarm {alarm.id} created for device {device_id} at {alarm.hour:02d}:{alarm.minute:02d}")
        return alarm

    def update(self, db: Session, device_id: str, alarm_id: uuid.UUID, payload: AlarmUpdate) -> Alarm:
        alarm = self.get_or_404(db, device_id, alarm_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("time") is not None:
            alarm.hour = payload.time.hour
            alarm.minute = payload.time.minute
        if changes.get("repeat") is not None:
            alarm.repeat = payload.repeat.model_dump()
        for field in ("label", "enabled", "snooze_enabled", "snooze_duration",
                      "sound_enabled", "vibration_enabled"):
            if changes.get(field) is not None:
                setattr(alarm, field, changes[field])

        db.commit()
        db.refresh(alarm)
        return alarm

    def delete(self, db: Session, device_id: str, alarm_id: uuid.UUID) -> None:
        alarm = self.get_or_404(db, device_id, alarm_id)
        db.delete(alarm)
        db.commit()

    def toggle(self, db: Session, device_id: str, alarm_id: uuid.UUID) -> Alarm:
        alarm = self.get_or_404(db, device_id, alarm_id)
        alarm.enabled = not alarm.enabled
        db.commit()
        db.refresh(alarm)
        return alarm

    def find_next(self, db: Session, device_id: str, now: datetime) -> tuple[Optional[Alarm], Optional[datetime]]:
        enabled = (
            db.query(Alarm)
            .filter(Alarm.device_id == device_id, Alarm.enabled.is_(True))
            .all()
        )
        return next_alarm(enabled, now)


# Global instance
alarm_service = AlarmService()
