"""
Robot router - owner-side robot management from the app.

All endpoints require a Firebase bearer token. Robots that exist but
belong to someone else are reported as 404, exactly like unknown ones.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from lacr.db.session import get_db
from lacr.deps import get_current_user
from lacr.models.user import User
from lacr.schemas.robot import (
    DashboardResponse,
    GemStatusConfig,
    GemStatusResponse,
    GemStatusUpdate,
    MessageResponse,
    RobotClaimRequest,
    RobotDeleteRequest,
    RobotListResponse,
    RobotRegisterRequest,
    RobotResponse,
    RobotSummary,
    SetPasswordRequest,
    UpdateIpRequest,
    VerifyPasswordRequest,
)
from lacr.services.provisioning import robot_registry

router = APIRouter(prefix="/robot", tags=["robot"])


# ---------------------------------------------------------------------------
# REGISTER / CLAIM
# ---------------------------------------------------------------------------

@router.post("/register", response_model=RobotResponse, status_code=status.HTTP_201_CREATED)
def register_robot(
    payload: RobotRegisterRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Register a robot the caller owns before the device has set itself up.

    The robot starts without a password; set one with /robot/set-password
    before the device can authenticate.
    """
    robot = robot_registry.register_for_user(
        db, current_user, payload.robot_id, payload.model, payload.local_ip
    )
    return RobotResponse(message="Robot registered successfully", robot=RobotSummary.model_validate(robot))


@router.post("/claim", response_model=RobotResponse)
def claim_robot(
    payload: RobotClaimRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Claim a robot that registered itself through /esp32/setup.

    The caller proves physical access with the setup password shown by the
    robot. Claiming your own robot again is a no-op.

    Errors:
        401: wrong setup password
        404: unknown robot
        409: already claimed by another account
    """
    robot = robot_registry.claim(db, current_user, payload.robot_id, payload.password)
    return RobotResponse(message="Robot claimed successfully", robot=RobotSummary.model_validate(robot))


# ---------------------------------------------------------------------------
# PASSWORD
# ---------------------------------------------------------------------------

@router.post("/set-password", response_model=RobotResponse)
def set_password(
    payload: SetPasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    robot = robot_registry.set_password(db, current_user, payload.robot_id, payload.new_password)
    return RobotResponse(message="Password set successfully", robot=RobotSummary.model_validate(robot))


def _check_password(payload: VerifyPasswordRequest, db: Session, current_user: User) -> RobotResponse:
    robot = robot_registry.verify_password(db, current_user, payload.robot_id, payload.password)
    return RobotResponse(message="Password verified", robot=RobotSummary.model_validate(robot))


@router.post("/verify-password", response_model=RobotResponse)
def verify_password(
    payload: VerifyPasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Check the robot's password before opening its local dashboard.

    Errors:
        400: robot has no password yet
        401: wrong password
        404: not the caller's robot
    """
    return _check_password(payload, db, current_user)


@router.post("/validate-password", response_model=RobotResponse)
def validate_password(
    payload: VerifyPasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Alias of /robot/verify-password kept for older app builds."""
    return _check_password(payload, db, current_user)


# ---------------------------------------------------------------------------
# VIEWS
# ---------------------------------------------------------------------------

@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """The caller's primary robot (first registered), or null."""
    robot = robot_registry.dashboard(db, current_user)
    if robot is None:
        return DashboardResponse(robot=None)

    gem_config = None
    if robot.is_gem:
        gem_config = GemStatusConfig(**robot_registry.get_gem_status(db, current_user, robot.robot_id))
    return DashboardResponse(robot=RobotSummary.model_validate(robot), gem_status_config=gem_config)


@router.get("/list", response_model=RobotListResponse)
def list_robots(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    robots = robot_registry.list_for_owner(db, current_user)
    return RobotListResponse(robots=[RobotSummary.model_validate(r) for r in robots])


# ---------------------------------------------------------------------------
# MAINTENANCE
# ---------------------------------------------------------------------------

@router.put("/update-ip", response_model=RobotResponse)
def update_ip(
    payload: UpdateIpRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    robot = robot_registry.update_ip(db, current_user, payload.robot_id, payload.new_ip)
    return RobotResponse(message="IP address updated", robot=RobotSummary.model_validate(robot))


@router.get("/gem-status/{robot_id}", response_model=GemStatusResponse)
def get_gem_status(
    robot_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    config = robot_registry.get_gem_status(db, current_user, robot_id)
    return GemStatusResponse(robot_id=robot_id, gem_status_config=GemStatusConfig(**config))


@router.put("/gem-status/{robot_id}", response_model=GemStatusResponse)
def update_gem_status(
    robot_id: str,
    payload: GemStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = payload.model_dump(exclude_none=True)
    config = robot_registry.update_gem_status(db, current_user, robot_id, changes)
    return GemStatusResponse(robot_id=robot_id, gem_status_config=GemStatusConfig(**config))


@router.post("/delete", response_model=MessageResponse)
def delete_robot(
    payload: RobotDeleteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Permanently remove one of the caller's robots."""
    robot_registry.delete(db, current_user, payload.robot_id)
    return MessageResponse(message="Robot deleted successfully")
