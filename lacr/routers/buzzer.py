"""
Buzzer router - sound settings, playback and custom patterns.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.models.device_settings import SettingsKind
from lacr.schemas.settings import (
    BuzzerPlayRequest,
    BuzzerSettingsResponse,
    BuzzerSettingsUpdate,
    BuzzerTestRequest,
    CustomPatternCreate,
    VolumeRequest,
)
from lacr.services.device_settings import device_settings_service

router = APIRouter(prefix="/buzzer", tags=["buzzer"])


# ---------------------------------------------------------------------------
# SETTINGS
# ---------------------------------------------------------------------------

@router.get("/{device_id}/settings", response_model=BuzzerSettingsResponse)
def get_buzzer_settings(device_id: str, db: Session = Depends(get_db)):
    settings = device_settings_service.load(db, device_id, SettingsKind.BUZZER)
    return BuzzerSettingsResponse(settings=settings)


@router.post("/{device_id}/settings", response_model=BuzzerSettingsResponse)
def update_buzzer_settings(device_id: str, payload: BuzzerSettingsUpdate, db: Session = Depends(get_db)):
    changes = payload.model_dump(mode="json", exclude_none=True)
    settings = device_settings_service.update_buzzer(db, device_id, changes)
    return BuzzerSettingsResponse(settings=settings)


@router.post("/{device_id}/volume", response_model=BuzzerSettingsResponse)
def set_volume(device_id: str, payload: VolumeRequest, db: Session = Depends(get_db)):
    settings = device_settings_service.set_volume(db, device_id, payload.volume)
    return BuzzerSettingsResponse(settings=settings)


@router.get("/{device_id}/status")
def buzzer_status(device_id: str, db: Session = Depends(get_db)):
    return {"success": True, "status": device_settings_service.buzzer_status(db, device_id)}


# ---------------------------------------------------------------------------
# PLAYBACK
# ---------------------------------------------------------------------------

@router.post("/{device_id}/play")
def play(device_id: str, payload: BuzzerPlayRequest, db: Session = Depends(get_db)):
    """
    Play a named pattern (built-in or custom) or an ad-hoc tone.

    Send either `pattern`, or `custom_frequency` + `custom_duration`
    (and optionally `custom_repeat`). The robot enters alarm mode until
    /stop is called.
    """
    command = device_settings_service.play(
        db,
        device_id,
        pattern=payload.pattern,
        custom_frequency=payload.custom_frequency,
        custom_duration=payload.custom_duration,
        custom_repeat=payload.custom_repeat,
    )
    return {"success": True, "message": "Buzzer command sent", "command": command}


@router.post("/{device_id}/stop")
def stop(device_id: str, db: Session = Depends(get_db)):
    device_settings_service.stop(db, device_id)
    return {"success": True, "message": "Buzzer stopped"}


@router.post("/{device_id}/test")
def test_tone(device_id: str, payload: BuzzerTestRequest, db: Session = Depends(get_db)):
    command = device_settings_service.test_tone(db, device_id, payload.frequency, payload.duration)
    return {"success": True, "message": "Test tone sent", "command": command}


# ---------------------------------------------------------------------------
# PATTERNS
# ---------------------------------------------------------------------------

@router.get("/{device_id}/patterns")
def list_patterns(device_id: str, db: Session = Depends(get_db)):
    return {"success": True, "patterns": device_settings_service.list_patterns(db, device_id)}


@router.post("/{device_id}/patterns", status_code=status.HTTP_201_CREATED)
def create_pattern(device_id: str, payload: CustomPatternCreate, db: Session = Depends(get_db)):
    """Store a custom pattern; names must not clash with built-ins or other custom patterns."""
    pattern = device_settings_service.create_pattern(db, device_id, payload)
    return {
        "success": True,
        "message": "Custom pattern created",
        "pattern": pattern.model_dump(mode="json"),
    }
