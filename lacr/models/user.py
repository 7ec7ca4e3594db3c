"""
User model - an app user authenticated through Firebase.

The Firebase uid is attached to the record, not the record's identity:
email is the durable key, and a new uid for an existing email is rebound
onto the same row (see AccountService.resolve).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, JSON, Boolean
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from lacr.db.base import Base


class User(Base):
    """
    SQLAlchemy ORM model for the 'users' table.

    has_robot / robot_id / models are derived from the robot registry and
    refreshed every time the user is resolved from a token.
    """

    __tablename__ = "users"

    # ---------------------------------------------------------------------------
    # PRIMARY KEY
    # ---------------------------------------------------------------------------
    # id: Internal identifier; robots reference it through Robot.owner_uid,
    # so rebinding firebase_uid never orphans a robot
    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    # ---------------------------------------------------------------------------
    # IDENTITY
    # ---------------------------------------------------------------------------
    # firebase_uid: Current external identity (rebindable)
    firebase_uid: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)

    # email: Stored lowercased; the merge key for identity changes
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)

    # ---------------------------------------------------------------------------
    # PROFILE
    # ---------------------------------------------------------------------------
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    photo_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # models: Product lines the user owns robots of, e.g. ["LAC-R", "GEM"]
    models: Mapped[list] = mapped_column(JSON, default=list)

    # active_model: Which product line the app is currently showing
    active_model: Mapped[str | None] = mapped_column(String(10), nullable=True)

    # ---------------------------------------------------------------------------
    # DASHBOARD LOCK
    # ---------------------------------------------------------------------------
    # Optional PIN gating the local dashboard, independent of the Firebase token
    dashboard_lock_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    dashboard_pin_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # ---------------------------------------------------------------------------
    # DERIVED ROBOT ASSOCIATION
    # ---------------------------------------------------------------------------
    has_robot: Mapped[bool] = mapped_column(Boolean, default=False)
    robot_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # ---------------------------------------------------------------------------
    # TIMESTAMPS
    # ---------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    last_login: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    @property
    def has_dashboard_pin(self) -> bool:
        return self.dashboard_pin_hash is not None
