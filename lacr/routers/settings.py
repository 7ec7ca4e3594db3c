"""
Settings router - general device settings, device info, reset and firmware.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.models.device_settings import SettingsKind
from lacr.schemas.robot import RobotSummary
from lacr.schemas.settings import (
    FirmwareUpdateRequest,
    GeneralSettingsResponse,
    GeneralSettingsUpdate,
)
from lacr.services.device_settings import device_settings_service

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/{device_id}", response_model=GeneralSettingsResponse)
def get_settings(device_id: str, db: Session = Depends(get_db)):
    """General settings; created from defaults (device_name = model) on first read."""
    settings = device_settings_service.load(db, device_id, SettingsKind.GENERAL)
    return GeneralSettingsResponse(settings=settings)


@router.put("/{device_id}", response_model=GeneralSettingsResponse)
def update_settings(device_id: str, payload: GeneralSettingsUpdate, db: Session = Depends(get_db)):
    changes = payload.model_dump(mode="json", exclude_none=True)
    settings = device_settings_service.save(db, device_id, SettingsKind.GENERAL, changes)
    return GeneralSettingsResponse(settings=settings)


@router.post("/{device_id}/factory-reset")
def factory_reset(device_id: str, db: Session = Depends(get_db)):
    """
    Restore every settings document to its defaults and reset the robot's
    runtime state (offline, idle, no WiFi). Ownership is not touched.
    """
    robot = device_settings_service.factory_reset(db, device_id)
    return {
        "success": True,
        "message": "Factory reset completed",
        "robot": RobotSummary.model_validate(robot).model_dump(mode="json"),
    }


@router.get("/{device_id}/info")
def device_info(device_id: str, db: Session = Depends(get_db)):
    return {"success": True, "info": device_settings_service.device_info(db, device_id)}


@router.post("/{device_id}/firmware")
def request_firmware_update(device_id: str, payload: FirmwareUpdateRequest, db: Session = Depends(get_db)):
    """Errors: 400 without firmware_url, 404 unknown device."""
    update = device_settings_service.request_firmware_update(
        db, device_id, payload.firmware_url, payload.version
    )
    return {"success": True, "message": "Firmware update initiated", "update": update}


@router.get("/{device_id}/firmware/status")
def firmware_status(device_id: str, db: Session = Depends(get_db)):
    """"downloading" until the robot's heartbeat reports the new version, then "idle"."""
    return {"success": True, "update": device_settings_service.firmware_status(db, device_id)}
