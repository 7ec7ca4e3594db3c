"""
WiFi router - the network the robot should join, as reported by the robot.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.schemas.settings import WifiConfigRequest, WifiStatus, WifiStatusResponse
from lacr.services.device_settings import device_settings_service

router = APIRouter(prefix="/wifi", tags=["wifi"])


@router.get("/{device_id}/config", response_model=WifiStatusResponse)
def get_wifi_config(device_id: str, db: Session = Depends(get_db)):
    robot = device_settings_service.get_device(db, device_id)
    return WifiStatusResponse(wifi=WifiStatus(**device_settings_service.wifi_status(robot)))


@router.post("/{device_id}/config", response_model=WifiStatusResponse)
def configure_wifi(device_id: str, payload: WifiConfigRequest, db: Session = Depends(get_db)):
    """
    Point the robot at a new network.

    Only the SSID is kept; the password is passed through to nobody. The
    robot reports `wifi_connected` in its next /esp32/heartbeat once it has joined.
    """
    robot = device_settings_service.configure_wifi(db, device_id, payload.ssid)
    return WifiStatusResponse(wifi=WifiStatus(**device_settings_service.wifi_status(robot)))


@router.post("/{device_id}/disconnect", response_model=WifiStatusResponse)
def disconnect_wifi(device_id: str, db: Session = Depends(get_db)):
    robot = device_settings_service.disconnect_wifi(db, device_id)
    return WifiStatusResponse(wifi=WifiStatus(**device_settings_service.wifi_status(robot)))
