"""
Authentication router - Firebase token verification and dashboard lock.

Sign-in itself happens in the app against Firebase; this backend never
issues tokens. /auth/verify is the call the app makes right after sign-in
to create or merge the local account.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.deps import get_current_user
from lacr.models.user import User
from lacr.schemas.robot import MessageResponse, RobotSummary
from lacr.schemas.user import (
    DashboardLockResponse,
    DashboardLockToggleRequest,
    DashboardPinRequest,
    UserOut,
    VerifyResponse,
)
from lacr.services.accounts import account_service
from lacr.services.provisioning import robot_registry

logger = logging.getLogger("lacr.routers.auth")

router = APIRouter(prefix="/auth", tags=["authentication"])


# ---------------------------------------------------------------------------
# TOKEN VERIFICATION
# ---------------------------------------------------------------------------

@router.post("/verify", response_model=VerifyResponse)
def verify_token(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Resolve the bearer token to a local account.

    First call for a Firebase user creates the account. If an account with
    the same email already exists under another uid it is rebound to this
    one, keeping its robots and settings.

    Returns:
        The user profile and the robots they own.
    """
    robots = robot_registry.list_for_owner(db, current_user)
    return VerifyResponse(
        user=UserOut.model_validate(current_user),
        robots=[RobotSummary.model_validate(r) for r in robots],
    )


@router.post("/login", response_model=MessageResponse)
def login():
    """Informational: sign-in is done client-side with the Firebase SDK."""
    return MessageResponse(
        message="Sign in with Firebase in the app, then call /auth/verify with the ID token"
    )


@router.post("/logout", response_model=MessageResponse)
def logout(current_user: User = Depends(get_current_user)):
    # Firebase sessions end on the client; nothing is held server-side
    logger.info(f"User {current_user.id} logged out")
    return MessageResponse(message="Logged out successfully")


# ---------------------------------------------------------------------------
# DASHBOARD LOCK
# ---------------------------------------------------------------------------

def _lock_response(user: User, message: str) -> DashboardLockResponse:
    return DashboardLockResponse(
        message=message,
        dashboard_lock_enabled=user.dashboard_lock_enabled,
        has_dashboard_pin=user.has_dashboard_pin,
    )


@router.post("/dashboard-lock/set", response_model=DashboardLockResponse)
def set_dashboard_pin(
    payload: DashboardPinRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Set or replace the dashboard PIN. Setting a PIN also enables the lock."""
    user = account_service.set_dashboard_pin(db, current_user, payload.pin)
    return _lock_response(user, "Dashboard PIN set successfully")


@router.post("/dashboard-lock/validate", response_model=DashboardLockResponse)
def validate_dashboard_pin(
    payload: DashboardPinRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Errors:
        400: PIN missing
        401: wrong PIN
        404: no PIN set yet
    """
    account_service.validate_dashboard_pin(db, current_user, payload.pin)
    return _lock_response(current_user, "PIN validated successfully")


@router.post("/dashboard-lock/toggle", response_model=DashboardLockResponse)
def toggle_dashboard_lock(
    payload: DashboardLockToggleRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = account_service.toggle_dashboard_lock(db, current_user, payload.enabled)
    state = "enabled" if user.dashboard_lock_enabled else "disabled"
    return _lock_response(user, f"Dashboard lock {state}")
