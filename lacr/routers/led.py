"""
LED router - lamp settings, direct control, animations and presets.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.models.device_settings import SettingsKind
from lacr.schemas.settings import (
    LedAnimationRequest,
    LedControlRequest,
    LedPresetListResponse,
    LedSettingsResponse,
    LedSettingsUpdate,
)
from lacr.services.device_settings import device_settings_service

router = APIRouter(prefix="/led", tags=["led"])


# ---------------------------------------------------------------------------
# SETTINGS
# ---------------------------------------------------------------------------

@router.get("/{device_id}/settings", response_model=LedSettingsResponse)
def get_led_settings(device_id: str, db: Session = Depends(get_db)):
    settings = device_settings_service.load(db, device_id, SettingsKind.LED)
    return LedSettingsResponse(settings=settings)


@router.post("/{device_id}/settings", response_model=LedSettingsResponse)
def update_led_settings(device_id: str, payload: LedSettingsUpdate, db: Session = Depends(get_db)):
    """Partial update; puts the robot in lamp mode."""
    changes = payload.model_dump(mode="json", exclude_none=True)
    settings = device_settings_service.update_led(db, device_id, changes)
    return LedSettingsResponse(settings=settings)


# ---------------------------------------------------------------------------
# CONTROL
# ---------------------------------------------------------------------------

@router.post("/{device_id}/control")
def control_led(device_id: str, payload: LedControlRequest, db: Session = Depends(get_db)):
    """
    Direct lamp control.

    action:
        on          - enable, brightness defaults to 100
        off         - disable, robot returns to idle
        brightness  - set brightness (default 50)
        color       - set color (default white)
    """
    result = device_settings_service.control_led(
        db, device_id, payload.action, brightness=payload.brightness, color=payload.color
    )
    return {"success": True, "message": f"LED {payload.action} command sent", **result}


@router.post("/{device_id}/animation", response_model=LedSettingsResponse)
def set_animation(device_id: str, payload: LedAnimationRequest, db: Session = Depends(get_db)):
    settings = device_settings_service.set_animation(db, device_id, payload.animation, payload.speed)
    return LedSettingsResponse(settings=settings)


# ---------------------------------------------------------------------------
# PRESETS
# ---------------------------------------------------------------------------

@router.get("/{device_id}/presets", response_model=LedPresetListResponse)
def list_presets(device_id: str, db: Session = Depends(get_db)):
    device_settings_service.get_device(db, device_id)
    return LedPresetListResponse(presets=device_settings_service.presets())


@router.post("/{device_id}/preset/{preset_id}")
def apply_preset(device_id: str, preset_id: str, db: Session = Depends(get_db)):
    preset, settings = device_settings_service.apply_preset(db, device_id, preset_id)
    return {
        "success": True,
        "message": f"Preset '{preset.name}' applied",
        "preset": preset.model_dump(),
        "settings": settings.model_dump(mode="json"),
    }
