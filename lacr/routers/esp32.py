"""
ESP32 router - endpoints called by the robot firmware itself.

None of these take a bearer token: the robot proves itself with its
pairing password (authenticate) or is simply identified by robot_id
(setup, heartbeat, command, status).
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.schemas.robot import (
    CommandAck,
    DeviceAuthenticateRequest,
    DeviceCommandRequest,
    DeviceHeartbeatRequest,
    DeviceSetupRequest,
    DeviceSetupResponse,
    HeartbeatAck,
    RobotResponse,
    RobotSummary,
)
from lacr.services.provisioning import robot_registry

router = APIRouter(prefix="/esp32", tags=["esp32"])


# ---------------------------------------------------------------------------
# SETUP (AP MODE SELF-REGISTRATION)
# ---------------------------------------------------------------------------

@router.post("/setup", response_model=DeviceSetupResponse, status_code=status.HTTP_201_CREATED)
def setup_device(payload: DeviceSetupRequest, db: Session = Depends(get_db)):
    """
    Register a robot from its own setup portal.

    The robot is created unclaimed, in AP mode, with the setup password
    hashed. An owner then claims it from the app with the same password.

    Errors:
        400: missing field or unknown model
        409: robot_id already registered (by either path)
    """
    robot = robot_registry.setup_device(
        db,
        robot_id=payload.robot_id,
        model=payload.model,
        local_ip=payload.local_ip,
        password=payload.password,
    )
    return DeviceSetupResponse(
        message="Robot registered, waiting to be claimed",
        robot=RobotSummary.model_validate(robot),
        setup_complete=False,
    )


# ---------------------------------------------------------------------------
# AUTHENTICATE (JOIN HOME NETWORK)
# ---------------------------------------------------------------------------

@router.post("/authenticate", response_model=RobotResponse)
def authenticate_device(payload: DeviceAuthenticateRequest, db: Session = Depends(get_db)):
    """
    STA-mode login. On success the robot's network_mode becomes STA.

    Errors:
        404: unknown robot
        403: robot not claimed yet
        401: wrong password (or none set)
    """
    robot = robot_registry.authenticate_device(db, payload.robot_id, payload.password)
    return RobotResponse(
        message="Authentication successful",
        robot=RobotSummary.model_validate(robot),
    )


# ---------------------------------------------------------------------------
# HEARTBEAT / COMMANDS / STATUS
# ---------------------------------------------------------------------------

@router.post("/heartbeat", response_model=HeartbeatAck)
def heartbeat(payload: DeviceHeartbeatRequest, db: Session = Depends(get_db)):
    """
    Status report. Never changes network_mode; unknown robots get 404.

    Reported WiFi state is what /wifi/{device_id}/config shows, and a report
    of new firmware ends a pending firmware update.
    """
    timestamp = robot_registry.record_heartbeat(
        db,
        payload.robot_id,
        status=payload.status,
        battery_level=payload.battery_level,
        firmware_version=payload.firmware_version,
        wifi_connected=payload.wifi_connected,
        wifi_ssid=payload.wifi_ssid,
        wifi_signal_strength=payload.wifi_signal_strength,
    )
    return HeartbeatAck(robot_id=payload.robot_id, timestamp=timestamp)


@router.post("/command", response_model=CommandAck)
def send_command(payload: DeviceCommandRequest, db: Session = Depends(get_db)):
    result = robot_registry.queue_command(db, payload.robot_id, payload.command, payload.parameters)
    return CommandAck(**result)


@router.get("/status/{robot_id}", response_model=RobotResponse)
def device_status(robot_id: str, db: Session = Depends(get_db)):
    robot = robot_registry.get_or_404(db, robot_id)
    return RobotResponse(message="Robot status", robot=RobotSummary.model_validate(robot))
