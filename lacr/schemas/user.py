"""
User schemas - profile, token verification and dashboard lock payloads.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from lacr.models.robot import RobotModel
from lacr.schemas.robot import RobotSummary


class UserOut(BaseModel):
    """
    Schema for user data in API responses.

    dashboard_pin_hash is NOT included; has_dashboard_pin says whether one is set.
    """
    id: uuid.UUID
    firebase_uid: str
    email: str
    name: Optional[str]
    photo_url: Optional[str]
    has_robot: bool
    robot_id: Optional[str]
    models: list[str]
    active_model: Optional[str]
    dashboard_lock_enabled: bool
    has_dashboard_pin: bool
    created_at: datetime
    last_login: Optional[datetime]

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """All fields optional - only provided fields are updated."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    photo_url: Optional[str] = Field(None, max_length=1024)
    active_model: Optional[RobotModel] = None


class ProfileResponse(BaseModel):
    success: bool = True
    user: UserOut


class VerifyResponse(BaseModel):
    """Response of POST /auth/verify: the resolved user plus their robots."""
    success: bool = True
    message: str = "Token verified"
    user: UserOut
    robots: list[RobotSummary]


class DashboardPinRequest(BaseModel):
    # Optional at the schema level so a missing PIN gets the service's message
    pin: Optional[str] = Field(None, max_length=64)


class DashboardLockToggleRequest(BaseModel):
    enabled: bool


class DashboardLockResponse(BaseModel):
    success: bool = True
    message: str
    dashboard_lock_enabled: bool
    has_dashboard_pin: bool
