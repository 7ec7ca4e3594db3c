"""
Account service - maps verified identities to User rows and manages
profile and dashboard-lock state.

Identity resolution order:
1. firebase_uid match → same user
2. email match → same user, firebase_uid rebound to the new uid
   (e.g. the account was deleted and recreated in Firebase, or a new
   sign-in provider was linked)
3. neither → new user

Email is the durable merge key; the Firebase uid is just the currently
attached identity.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from lacr.core.errors import NotFound, Unauthorized, ValidationError
from lacr.core.identity import VerifiedIdentity
from lacr.core.security import hash_secret, verify_secret
from lacr.models.robot import RobotModel
from lacr.models.user import User
from lacr.services.provisioning import robot_registry

logger = logging.getLogger("lacr.services.accounts")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountService:

    # ---------------------------------------------------------------------------
    # IDENTITY RESOLUTION
    # ---------------------------------------------------------------------------

    def resolve(self, db: Session, identity: VerifiedIdentity) -> User:
        """
        Find or create the User for a verified identity, then refresh its
        derived robot fields from the registry.
        """
        if not identity.email:
            raise ValidationError("Verified token does not carry an email address")

        user = self._find_or_create(db, identity)

        robot_registry.sync_owner(db, user)
        db.commit()
        db.refresh(user)
        return user

    def _find_or_create(self, db: Session, identity: VerifiedIdentity, retry: bool = True) -> User:
        email = normalize_email(identity.email)
        now = datetime.now(timezone.utc)

        # Step 1: known identity
        user = db.query(User).filter(User.firebase_uid == identity.uid).first()
        if user is not None:
            user.last_login = now
            return user

        # Step 2: known email under a different identity → merge
        user = db.query(User).filter(User.email == email).first()
        if user is not None:
            logger.info(f"Rebinding user {user.id} from uid {user.firebase_uid} to {identity.uid}")
            user.firebase_uid = identity.uid
            if not user.name and identity.name:
                user.name = identity.name
            if not user.photo_url and identity.picture:
                user.photo_url = identity.picture
            user.last_login = now
            return user

        # Step 3: first sign-in
        user = User(
            firebase_uid=identity.uid,
            email=email,
            name=identity.name or email.split("@")[0],
            photo_url=identity.picture,
            has_robot=False,
            robot_id=None,
            models=[],
            dashboard_pin_hash=None,
            last_login=now,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Two first requests of the same user raced; the other one won
            db.rollback()
            if not retry:
                raise
            return self._find_or_create(db, identity, retry=False)

        db.refresh(user)
        logger.info(f"Created user {user.id} for {email}")
        return user

    # ---------------------------------------------------------------------------
    # PROFILE
    # ---------------------------------------------------------------------------

    def update_profile(
        self,
        db: Session,
        user: User,
        name: Optional[str] = None,
        photo_url: Optional[str] = None,
        active_model: Optional[RobotModel] = None,
    ) -> User:
        if name is not None:
            if not name.strip():
                raise ValidationError("Name cannot be empty")
            user.name = name.strip()
        if photo_url is not None:
            user.photo_url = photo_url or None
        if active_model is not None:
            value = RobotModel(active_model).value
            if value not in (user.models or []):
                raise ValidationError(f"You do not own a {value} robot")
            user.active_model = value
        db.commit()
        db.refresh(user)
        return user

    # ---------------------------------------------------------------------------
    # DASHBOARD LOCK
    # ---------------------------------------------------------------------------

    def set_dashboard_pin(self, db: Session, user: User, pin: Optional[str]) -> User:
        if pin is None or not pin.strip():
            raise ValidationError("PIN is required")
        user.dashboard_pin_hash = hash_secret(pin)
        user.dashboard_lock_enabled = True
        db.commit()
        db.refresh(user)
        return user

    def validate_dashboard_pin(self, db: Session, user: User, pin: Optional[str]) -> None:
        if pin is None or not pin.strip():
            raise ValidationError("PIN is required")
        if user.dashboard_pin_hash is None:
            raise NotFound("Dashboard PIN has not been set")
        if not verify_secret(pin, user.dashboard_pin_hash):
            raise Unauthorized("Invalid PIN")

    def toggle_dashboard_lock(self, db: Session, user: User, enabled: bool) -> User:
        if enabled and user.dashboard_pin_hash is None:
            raise NotFound("Dashboard PIN has not been set")
        user.dashboard_lock_enabled = enabled
        db.commit()
        db.refresh(user)
        return user


# Global instance
account_service = AccountService()
