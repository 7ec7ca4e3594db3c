"""
DeviceSettings model - a persisted, versioned settings document per device.

One row per (device_id, kind). `values` is always validated against the
pydantic schema registered for `kind` before it is written.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON, Integer, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from lacr.db.base import Base


class SettingsKind(str, enum.Enum):
    GENERAL = "general"
    LED = "led"
    BUZZER = "buzzer"


class DeviceSettings(Base):
    __tablename__ = "device_settings"
    __table_args__ = (
        UniqueConstraint("device_id", "kind", name="uq_device_settings_device_kind"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    device_id: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)

    # schema_version: bumped whenever the shape of `values` changes
    schema_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    values: Mapped[dict] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
