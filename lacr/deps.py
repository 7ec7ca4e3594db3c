"""
Dependencies module - reusable FastAPI dependencies for route handlers.

get_current_user verifies the Firebase ID token and resolves it to a User
row (creating or merging the account on the way).
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lacr.core.errors import Unauthorized
from lacr.core.identity import VerifiedIdentity, identity_verifier
from lacr.db.session import get_db
from lacr.models.user import User
from lacr.services.accounts import account_service

# ---------------------------------------------------------------------------
# SECURITY SCHEME
# ---------------------------------------------------------------------------
# auto_error=False: a missing header reaches us as None, so the 401 uses the
# same JSON error shape as every other failure
security = HTTPBearer(auto_error=False)


def get_verified_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> VerifiedIdentity:
    """
    Verify "Authorization: Bearer <Firebase ID token>".

    Raises:
        401 Unauthorized: header missing, not a bearer token, or token rejected
    """
    if credentials is None or not credentials.credentials:
        raise Unauthorized("No token provided or invalid format")
    return identity_verifier.verify(credentials.credentials)


def get_current_user(
    identity: VerifiedIdentity = Depends(get_verified_identity),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the verified identity to a User.

    Usage:
        def my_route(current_user: User = Depends(get_current_user)): ...
    """
    return account_service.resolve(db, identity)
