"""
Robot model - a LAC-R or GEM device known to the registry.

A robot is created either by the ESP32 itself during AP-mode setup
(unclaimed, with a setup password) or by a signed-in user from the app
(claimed, no password yet). It moves to STA mode only when the device
authenticates with its password.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON, Integer, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from lacr.db.base import Base


class RobotModel(str, enum.Enum):
    """Supported product lines."""
    LAC_R = "LAC-R"
    GEM = "GEM"


class NetworkMode(str, enum.Enum):
    """AP = robot broadcasts its own setup network; STA = joined the home network."""
    AP = "AP"
    STA = "STA"


class RobotStatus(str, enum.Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    MAINTENANCE = "maintenance"
    ERROR = "error"


class RobotMode(str, enum.Enum):
    """What the robot is currently doing, as reported or requested."""
    IDLE = "idle"
    HEARTBEAT = "heartbeat"
    LAMP = "lamp"
    ALARM = "alarm"
    WIFI_SETUP = "wifi_setup"
    GEMINI = "gemini"
    UPDATING = "updating"


class ProvisioningState(str, enum.Enum):
    UNCLAIMED = "UNCLAIMED"
    CLAIMED_NO_PASSWORD = "CLAIMED_NO_PASSWORD"
    CLAIMED_ACTIVE = "CLAIMED_ACTIVE"


class Robot(Base):
    """
    SQLAlchemy ORM model for the 'robots' table.

    Invariants kept by RobotRegistry:
    - robot_id is unique across the whole table (both registration paths)
    - password_hash is only ever compared, never returned
    - network_mode == STA implies owner_uid and password_hash are set
    """

    __tablename__ = "robots"

    # ---------------------------------------------------------------------------
    # IDENTITY
    # ---------------------------------------------------------------------------
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # robot_id: Identifier chosen by the device firmware (e.g. "LACR-8F2A")
    # - unique=True: a single global namespace for both registration paths;
    #   a concurrent duplicate insert fails here with IntegrityError
    robot_id: Mapped[str] = mapped_column(String(100), unique=True, index=True, nullable=False)

    # owner_uid: String form of the owning User.id, null while unclaimed
    # - No foreign key: the reference is advisory
    owner_uid: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)

    model: Mapped[str] = mapped_column(String(10), nullable=False)
    local_ip: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # ---------------------------------------------------------------------------
    # PROVISIONING
    # ---------------------------------------------------------------------------
    # password_hash: bcrypt hash of the pairing password, null until one is set
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    network_mode: Mapped[str] = mapped_column(String(3), default=NetworkMode.AP.value, nullable=False)

    # ---------------------------------------------------------------------------
    # RUNTIME STATUS (reported by the ESP32)
    # ---------------------------------------------------------------------------
    status: Mapped[str] = mapped_column(String(20), default=RobotStatus.OFFLINE.value, nullable=False)
    battery_level: Mapped[int | None] = mapped_column(Integer, nullable=True)
    firmware_version: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # firmware_target: version requested by the last firmware update, cleared
    # once the robot reports it is running new firmware
    firmware_target: Mapped[str | None] = mapped_column(String(50), nullable=True)
    current_mode: Mapped[str] = mapped_column(String(20), default=RobotMode.IDLE.value, nullable=False)
    last_seen: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # WiFi client status; the WiFi password itself is never stored
    wifi_ssid: Mapped[str | None] = mapped_column(String(64), nullable=True)
    wifi_connected: Mapped[bool] = mapped_column(Boolean, default=False)
    wifi_signal_strength: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # gem_status_config: GEM-only display settings
    # Example: {"battery_level": true, "signal_strength": true, "alert_message": "Low battery"}
    gem_status_config: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def state(self) -> ProvisioningState:
        if self.owner_uid is None:
            return ProvisioningState.UNCLAIMED
        if self.password_hash is None:
            return ProvisioningState.CLAIMED_NO_PASSWORD
        return ProvisioningState.CLAIMED_ACTIVE

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None

    @property
    def is_gem(self) -> bool:
        return self.model == RobotModel.GEM.value
