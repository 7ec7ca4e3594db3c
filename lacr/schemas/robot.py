"""
Robot schemas - request/response formats for ESP32 provisioning and
owner-side robot management.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from lacr.models.robot import RobotModel, RobotStatus


# ---------------------------------------------------------------------------
# DEVICE-SIDE REQUESTS (sent by the ESP32, no bearer token)
# ---------------------------------------------------------------------------

class DeviceSetupRequest(BaseModel):
    """
    Self-registration while the robot is in AP mode.

    Example request body:
    {
        "robot_id": "R1",
        "model": "GEM",
        "local_ip": "10.0.0.5",
        "password": "abc123"
    }
    """
    robot_id: str = Field(..., min_length=1, max_length=100)
    model: RobotModel
    local_ip: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class DeviceAuthenticateRequest(BaseModel):
    robot_id: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class DeviceHeartbeatRequest(BaseModel):
    """
    Periodic status report. Only robot_id is required.

    Example request body:
    {
        "robot_id": "R1",
        "status": "online",
        "battery_level": 87,
        "firmware_version": "1.4.2",
        "wifi_connected": true,
        "wifi_ssid": "HomeNet",
        "wifi_signal_strength": -52
    }
    """
    robot_id: str = Field(..., min_length=1, max_length=100)
    status: Optional[RobotStatus] = None
    battery_level: Optional[int] = Field(None, ge=0, le=100)
    firmware_version: Optional[str] = Field(None, max_length=50)
    wifi_connected: Optional[bool] = None
    wifi_ssid: Optional[str] = Field(None, min_length=1, max_length=64)
    # RSSI in dBm
    wifi_signal_strength: Optional[int] = Field(None, ge=-120, le=0)


class DeviceCommandRequest(BaseModel):
    robot_id: str = Field(..., min_length=1, max_length=100)
    command: str = Field(..., min_length=1, max_length=100)
    parameters: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# OWNER-SIDE REQUESTS (bearer token)
# ---------------------------------------------------------------------------

class RobotRegisterRequest(BaseModel):
    robot_id: str = Field(..., min_length=1, max_length=100)
    model: RobotModel
    local_ip: str = Field(..., min_length=1, max_length=64)


class RobotClaimRequest(BaseModel):
    """Claim a self-registered robot by proving its setup password."""
    robot_id: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class SetPasswordRequest(BaseModel):
    robot_id: str = Field(..., min_length=1, max_length=100)
    new_password: str = Field(..., min_length=1, max_length=128)


class VerifyPasswordRequest(BaseModel):
    robot_id: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class UpdateIpRequest(BaseModel):
    robot_id: str = Field(..., min_length=1, max_length=100)
    new_ip: str = Field(..., min_length=1, max_length=64)


class RobotDeleteRequest(BaseModel):
    robot_id: str = Field(..., min_length=1, max_length=100)


class GemStatusConfig(BaseModel):
    """What the GEM shows on its status screen."""
    battery_level: bool = True
    signal_strength: bool = True
    alert_message: str = Field("", max_length=200)


class GemStatusUpdate(BaseModel):
    battery_level: Optional[bool] = None
    signal_strength: Optional[bool] = None
    alert_message: Optional[str] = Field(None, max_length=200)


# ---------------------------------------------------------------------------
# RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class RobotSummary(BaseModel):
    """
    Public view of a robot. The password hash is never part of it;
    has_password only says whether one is set.
    """
    robot_id: str
    model: str
    local_ip: Optional[str]
    network_mode: str
    owner_uid: Optional[str]
    state: str
    has_password: bool
    status: str
    current_mode: str
    battery_level: Optional[int]
    firmware_version: Optional[str]
    last_seen: Optional[datetime]
    created_at: datetime

    class Config:
        from_attributes = True


class RobotResponse(BaseModel):
    success: bool = True
    message: str
    robot: RobotSummary


class DeviceSetupResponse(RobotResponse):
    setup_complete: bool = False


class RobotListResponse(BaseModel):
    success: bool = True
    robots: list[RobotSummary]


class DashboardResponse(BaseModel):
    success: bool = True
    robot: Optional[RobotSummary]
    gem_status_config: Optional[GemStatusConfig] = None


class GemStatusResponse(BaseModel):
    success: bool = True
    robot_id: str
    gem_status_config: GemStatusConfig


class HeartbeatAck(BaseModel):
    success: bool = True
    message: str = "Heartbeat received"
    robot_id: str
    timestamp: datetime


class CommandAck(BaseModel):
    success: bool = True
    message: str = "Command queued"
    command_id: str
    robot_id: str
    command: str
    parameters: dict[str, Any]
    queued_at: datetime


class MessageResponse(BaseModel):
    success: bool = True
    message: str
