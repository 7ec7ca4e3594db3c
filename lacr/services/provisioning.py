"""
Robot registry - provisioning and ownership of LAC-R / GEM robots.

Provisioning flow:
1. The ESP32 boots in AP mode and self-registers with a setup password
   (POST /esp32/setup) → robot is UNCLAIMED
2. The owner signs in to the app and claims it with that password
   (POST /robot/claim) → CLAIMED_ACTIVE
   - Alternatively the owner registers the robot first (POST /robot/register,
     no password) → CLAIMED_NO_PASSWORD, then sets one (POST /robot/set-password)
3. The ESP32 joins the home network and authenticates with the password
   (POST /esp32/authenticate) → network_mode flips AP → STA
4. The ESP32 keeps reporting status (POST /esp32/heartbeat)

robot_id is a single global namespace: whichever registration path comes
second gets Conflict, including the loser of a concurrent insert.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lacr.core.errors import Conflict, Forbidden, NotFound, Unauthorized, ValidationError
from lacr.core.security import burn_verify_time, hash_secret, verify_secret
from lacr.models.robot import NetworkMode, Robot, RobotMode, RobotModel, RobotStatus
from lacr.models.user import User

logger = logging.getLogger("lacr.services.provisioning")

DEFAULT_GEM_STATUS = {
    "battery_level": True,
    "signal_strength": True,
    "alert_message": "",
}


class RobotRegistry:
    """
    All reads and writes of the robots table go through here.

    Stateless: every method takes the request's Session, so one global
    instance is shared by all routers.
    """

    # ---------------------------------------------------------------------------
    # LOOKUPS
    # ---------------------------------------------------------------------------

    def get(self, db: Session, robot_id: str) -> Optional[Robot]:
        return db.query(Robot).filter(Robot.robot_id == robot_id).first()

    def get_or_404(self, db: Session, robot_id: str) -> Robot:
        robot = self.get(db, robot_id)
        if robot is None:
            raise NotFound("Robot not found")
        return robot

    def get_owned(self, db: Session, user: User, robot_id: str) -> Robot:
        """
        Get a robot owned by `user`.

        A robot that exists but belongs to someone else is reported exactly
        like an unknown one (404), so callers cannot probe for robot ids.
        """
        robot = db.query(Robot).filter(
            Robot.robot_id == robot_id,
            Robot.owner_uid == str(user.id),
        ).first()
        if robot is None:
            raise NotFound("Robot not found")
        return robot

    def list_for_owner(self, db: Session, user: User) -> list[Robot]:
        """Robots owned by `user`, oldest registration first."""
        return (
            db.query(Robot)
            .filter(Robot.owner_uid == str(user.id))
            .order_by(Robot.created_at, Robot.id)
            .all()
        )

    def sync_owner(self, db: Session, user: User) -> bool:
        """
        Recompute the user's derived robot fields from the registry.

        Sets has_robot, robot_id (first owned robot) and models; repairs
        active_model if it no longer matches an owned product line.
        Returns True if anything changed. Does not commit.
        """
        robots = self.list_for_owner(db, user)

        models: list[str] = []
        for robot in robots:
            if robot.model not in models:
                models.append(robot.model)

        has_robot = bool(robots)
        primary = robots[0].robot_id if robots else None
        active_model = user.active_model
        if active_model not in models:
            active_model = models[0] if models else None

        changed = (
            user.has_robot != has_robot
            or user.robot_id != primary
            or list(user.models or []) != models
            or user.active_model != active_model
        )
        if changed:
            user.has_robot = has_robot
            user.robot_id = primary
            user.models = models
            user.active_model = active_model
        return changed

    # ---------------------------------------------------------------------------
    # REGISTRATION (both paths)
    # ---------------------------------------------------------------------------

    def _insert(self, db: Session, robot: Robot) -> Robot:
        """
        Insert a new robot, mapping a duplicate robot_id to Conflict.

        The pre-read gives a friendly error in the common case; the unique
        constraint decides the race when two inserts overlap.
        """
        if self.get(db, robot.robot_id) is not None:
            raise Conflict("Robot ID already registered")

        db.add(robot)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(f"Concurrent registration lost for robot {robot.robot_id}")
            raise Conflict("Robot ID already registered")
        db.refresh(robot)
        return robot

    def setup_device(
        self,
        db: Session,
        robot_id: str,
        model: RobotModel,
        local_ip: str,
        password: str,
    ) -> Robot:
        """Device-initiated registration: unclaimed, AP mode, setup password hashed."""
        robot = Robot(
            robot_id=robot_id,
            model=RobotModel(model).value,
            local_ip=local_ip,
            owner_uid=None,
            password_hash=hash_secret(password),
            network_mode=NetworkMode.AP.value,
            gem_status_config=dict(DEFAULT_GEM_STATUS) if RobotModel(model) == RobotModel.GEM else None,
        )
        robot = self._insert(db, robot)
        logger.info(f"Robot {robot_id} ({robot.model}) self-registered in AP mode")
        return robot

    def register_for_user(
        self,
        db: Session,
        user: User,
        robot_id: str,
        model: RobotModel,
        local_ip: str,
    ) -> Robot:
        """User-initiated registration: owned by the caller, no password yet."""
        robot = Robot(
            robot_id=robot_id,
            model=RobotModel(model).value,
            local_ip=local_ip,
            owner_uid=str(user.id),
            password_hash=None,
            network_mode=NetworkMode.AP.value,
            gem_status_config=dict(DEFAULT_GEM_STATUS) if RobotModel(model) == RobotModel.GEM else None,
        )
        robot = self._insert(db, robot)

        if self.sync_owner(db, user):
            db.commit()
        logger.info(f"Robot {robot_id} registered by user {user.id}")
        return robot

    # ---------------------------------------------------------------------------
    # OWNERSHIP
    # ---------------------------------------------------------------------------

    def claim(self, db: Session, user: User, robot_id: str, password: str) -> Robot:
        """
        Claim a self-registered robot by proving its setup password.

        Idempotent for the current owner. The owner is assigned with a
        conditional UPDATE (only while owner_uid is still NULL), so two users
        claiming at once cannot both win.

        Raises:
            NotFound: unknown robot_id
            Conflict: robot already owned by another user
            Unauthorized: setup password does not match
        """
        robot = self.get(db, robot_id)
        if robot is None:
            burn_verify_time()
            raise NotFound("Robot not found")

        owner = str(user.id)
        if robot.owner_uid == owner:
            return robot
        if robot.owner_uid is not None:
            raise Conflict("Robot is already claimed by another account")

        if not verify_secret(password, robot.password_hash):
            raise Unauthorized("Invalid password")

        updated = (
            db.query(Robot)
            .filter(Robot.id == robot.id, Robot.owner_uid.is_(None))
            .update({Robot.owner_uid: owner}, synchronize_session=False)
        )
        if updated == 0:
            db.rollback()
            raise Conflict("Robot is already claimed by another account")

        db.commit()
        db.refresh(robot)

        if self.sync_owner(db, user):
            db.commit()
        logger.info(f"Robot {robot_id} claimed by user {user.id}")
        return robot

    def set_password(self, db: Session, user: User, robot_id: str, new_password: str) -> Robot:
        """Set or rotate the pairing password. Only the owner may do this."""
        robot = self.get_owned(db, user, robot_id)
        robot.password_hash = hash_secret(new_password)
        db.commit()
        db.refresh(robot)
        logger.info(f"Password set for robot {robot_id}")
        return robot

    def verify_password(self, db: Session, user: User, robot_id: str, password: str) -> Robot:
        """
        Owner-side check of the pairing password (used by the app before
        showing the robot's local dashboard).
        """
        robot = self.get_owned(db, user, robot_id)
        if robot.password_hash is None:
            raise ValidationError("No password set for this robot")
        if not verify_secret(password, robot.password_hash):
            raise Unauthorized("Invalid password")
        return robot

    # ---------------------------------------------------------------------------
    # DEVICE-SIDE OPERATIONS
    # ---------------------------------------------------------------------------

    def authenticate_device(self, db: Session, robot_id: str, password: str) -> Robot:
        """
        STA-mode login of the ESP32. The only place network_mode becomes STA.

        Order of checks matters: an unclaimed robot is Forbidden even when
        the password would match.
        """
        robot = self.get(db, robot_id)
        if robot is None:
            burn_verify_time()
            raise NotFound("Robot not found")

        if robot.owner_uid is None:
            raise Forbidden("Robot has not been claimed yet")

        if not verify_secret(password, robot.password_hash):
            logger.warning(f"Failed authentication for robot {robot_id}")
            raise Unauthorized("Invalid password")

        robot.network_mode = NetworkMode.STA.value
        robot.status = RobotStatus.ONLINE.value
        robot.last_seen = datetime.now(timezone.utc)
        db.commit()
        db.refresh(robot)
        logger.info(f"Robot {robot_id} authenticated, now in STA mode")
        return robot

    def record_heartbeat(
        self,
        db: Session,
        robot_id: str,
        status: Optional[RobotStatus] = None,
        battery_level: Optional[int] = None,
        firmware_version: Optional[str] = None,
        wifi_connected: Optional[bool] = None,
        wifi_ssid: Optional[str] = None,
        wifi_signal_strength: Optional[int] = None,
    ) -> datetime:
        """
        Update last-seen and whatever runtime fields were reported.

        The heartbeat is also how pending device actions complete:
        - a robot in "updating" mode that reports new firmware goes back to idle
        - a robot in "wifi_setup" mode that reports a connection goes back to idle
        """
        robot = self.get_or_404(db, robot_id)

        now = datetime.now(timezone.utc)
        robot.last_seen = now
        robot.status = RobotStatus(status).value if status else RobotStatus.ONLINE.value
        if battery_level is not None:
            robot.battery_level = battery_level

        if firmware_version is not None:
            if robot.current_mode == RobotMode.UPDATING.value and \
                    self._firmware_update_done(robot, firmware_version):
                logger.info(f"Robot {robot_id} finished firmware update to {firmware_version}")
                robot.current_mode = RobotMode.IDLE.value
                robot.firmware_target = None
            robot.firmware_version = firmware_version

        if wifi_ssid is not None:
            robot.wifi_ssid = wifi_ssid
        if wifi_connected is not None:
            robot.wifi_connected = wifi_connected
            if not wifi_connected:
                robot.wifi_signal_strength = None
            elif robot.current_mode == RobotMode.WIFI_SETUP.value:
                robot.current_mode = RobotMode.IDLE.value
        if wifi_signal_strength is not None and robot.wifi_connected:
            robot.wifi_signal_strength = wifi_signal_strength

        db.commit()
        return now

    def _firmware_update_done(self, robot: Robot, reported_version: str) -> bool:
        """A named target must be reached exactly; "latest" means any version change."""
        target = robot.firmware_target
        if target and target != "latest":
            return reported_version == target
        return reported_version != robot.firmware_version

    def queue_command(
        self,
        db: Session,
        robot_id: str,
        command: str,
        parameters: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Accept a command for a known robot.

        There is no delivery channel to the device yet; the robot picks up
        its state on the next heartbeat, so this only validates and acks.
        """
        self.get_or_404(db, robot_id)
        command_id = f"cmd_{uuid.uuid4().hex[:12]}"
        logger.info(f"Command {command} queued for robot {robot_id} as {command_id}")
        return {
            "command_id": command_id,
            "robot_id": robot_id,
            "command": command,
            "parameters": parameters,
            "queued_at": datetime.now(timezone.utc),
        }

    # ---------------------------------------------------------------------------
    # OWNER-SIDE MAINTENANCE
    # ---------------------------------------------------------------------------

    def update_ip(self, db: Session, user: User, robot_id: str, new_ip: str) -> Robot:
        robot = self.get_owned(db, user, robot_id)
        robot.local_ip = new_ip
        db.commit()
        db.refresh(robot)
        return robot

    def delete(self, db: Session, user: User, robot_id: str) -> None:
        """Hard delete. Non-owners get 404, never 403."""
        robot = self.get_owned(db, user, robot_id)
        db.delete(robot)
        db.commit()

        if self.sync_owner(db, user):
            db.commit()
        logger.info(f"Robot {robot_id} deleted by user {user.id}")

    def dashboard(self, db: Session, user: User) -> Optional[Robot]:
        robots = self.list_for_owner(db, user)
        return robots[0] if robots else None

    def get_gem_status(self, db: Session, user: User, robot_id: str) -> dict:
        robot = self.get_owned(db, user, robot_id)
        if not robot.is_gem:
            raise ValidationError("Status configuration is only available for GEM robots")
        return {**DEFAULT_GEM_STATUS, **(robot.gem_status_config or {})}

    def update_gem_status(self, db: Session, user: User, robot_id: str, changes: dict) -> dict:
        robot = self.get_owned(db, user, robot_id)
        if not robot.is_gem:
            raise ValidationError("Status configuration is only available for GEM robots")

        config = {**DEFAULT_GEM_STATUS, **(robot.gem_status_config or {}), **changes}
        # Reassign so SQLAlchemy sees the JSON column change
        robot.gem_status_config = config
        db.commit()
        return config


# Global instance
robot_registry = RobotRegistry()
