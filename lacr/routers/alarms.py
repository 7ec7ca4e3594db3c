"""
Alarms router - per-device alarm clock.

Device-scoped routes take no bearer token; the robot and the app both
address alarms by device_id.
"""

import uuid
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from lacr.core.errors import ValidationError
from lacr.db.session import get_db
from lacr.schemas.alarm import (
    AlarmCreate,
    AlarmListResponse,
    AlarmOut,
    AlarmResponse,
    AlarmUpdate,
    NextAlarmResponse,
)
from lacr.schemas.robot import MessageResponse
from lacr.services.alarms import alarm_service

router = APIRouter(prefix="/alarms", tags=["alarms"])


def _zone(tz: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(f"Unknown time zone '{tz}'")


@router.get("/{device_id}", response_model=AlarmListResponse)
def list_alarms(device_id: str, db: Session = Depends(get_db)):
    alarms = alarm_service.list_for_device(db, device_id)
    return AlarmListResponse(alarms=[AlarmOut.from_model(a) for a in alarms])


@router.post("/{device_id}", response_model=AlarmResponse, status_code=status.HTTP_201_CREATED)
def create_alarm(device_id: str, payload: AlarmCreate, db: Session = Depends(get_db)):
    alarm = alarm_service.create(db, device_id, payload)
    return AlarmResponse(alarm=AlarmOut.from_model(alarm))


@router.get("/{device_id}/next", response_model=NextAlarmResponse)
def get_next_alarm(
    device_id: str,
    tz: str = Query("UTC", description="IANA time zone the alarm times are in"),
    db: Session = Depends(get_db),
):
    """
    The enabled alarm that rings soonest.

    Alarm hours are wall-clock times in `tz`, so "07:30" means 07:30 where
    the device is. time_until is in milliseconds.
    """
    now = datetime.now(_zone(tz))
    alarm, fires_at = alarm_service.find_next(db, device_id, now)
    if alarm is None:
        return NextAlarmResponse(next_alarm=None, fires_at=None, time_until=None)
    return NextAlarmResponse(
        next_alarm=AlarmOut.from_model(alarm),
        fires_at=fires_at,
        time_until=int((fires_at - now).total_seconds() * 1000),
    )


@router.put("/{device_id}/{alarm_id}", response_model=AlarmResponse)
def update_alarm(
    device_id: str,
    alarm_id: uuid.UUID,
    payload: AlarmUpdate,
    db: Session = Depends(get_db),
):
    alarm = alarm_service.update(db, device_id, alarm_id, payload)
    return AlarmResponse(alarm=AlarmOut.from_model(alarm))


@router.delete("/{device_id}/{alarm_id}", response_model=MessageResponse)
def delete_alarm(device_id: str, alarm_id: uuid.UUID, db: Session = Depends(get_db)):
    alarm_service.delete(db, device_id, alarm_id)
    return MessageResponse(message="Alarm deleted successfully")


@router.patch("/{device_id}/{alarm_id}/toggle", response_model=AlarmResponse)
def toggle_alarm(device_id: str, alarm_id: uuid.UUID, db: Session = Depends(get_db)):
    alarm = alarm_service.toggle(db, device_id, alarm_id)
    return AlarmResponse(alarm=AlarmOut.from_model(alarm))
