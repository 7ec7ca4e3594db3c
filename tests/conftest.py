"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Test client (FastAPI TestClient)
- A fake identity provider (bearer token -> fixed Firebase identity)
- Robot factories for both registration paths
"""

import os

# Must be set before anything under lacr is imported: settings and the
# password hashing context read them at import time.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lacr.core.errors import Unauthorized
from lacr.core.identity import VerifiedIdentity, identity_verifier
from lacr.db.base import Base
from lacr.db.session import get_db
from lacr.main import app
from lacr.models.robot import Robot, RobotModel
from lacr.models.user import User
from lacr.services.accounts import account_service
from lacr.services.provisioning import robot_registry


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# StaticPool keeps the single in-memory connection alive across sessions

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# FAKE IDENTITY PROVIDER
# ---------------------------------------------------------------------------
# Bearer tokens the fake verifier accepts, and who they belong to.

IDENTITIES = {
    "token-alice": VerifiedIdentity(
        uid="uid-alice", email="alice@example.com", name="Alice", email_verified=True
    ),
    "token-bob": VerifiedIdentity(
        uid="uid-bob", email="bob@example.com", name="Bob", email_verified=True
    ),
    # Alice after her Firebase account was recreated: new uid, same email
    "token-alice-relinked": VerifiedIdentity(
        uid="uid-alice-2", email="Alice@Example.com", name="Alice Again"
    ),
    "token-no-email": VerifiedIdentity(uid="uid-phone-only"),
}


def fake_verify(token: str) -> VerifiedIdentity:
    identity = IDENTITIES.get(token)
    if identity is None:
        raise Unauthorized("Invalid token")
    return identity


# ---------------------------------------------------------------------------
# DATABASE / CLIENT FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test function.

    - Creates all tables
    - Yields a session for the test
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session, monkeypatch) -> Generator[TestClient, None, None]:
    """
    Test client wired to the test database and the fake identity provider.

    Only identity_verifier.verify is replaced, so the real bearer parsing
    and account resolution in lacr.deps still run.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setattr(identity_verifier, "verify", fake_verify)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# AUTH FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def alice_headers() -> dict:
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def bob_headers() -> dict:
    return {"Authorization": "Bearer token-bob"}


@pytest.fixture
def alice(db: Session) -> User:
    """Alice's account, as the first /auth/verify would create it."""
    return account_service.resolve(db, IDENTITIES["token-alice"])


@pytest.fixture
def bob(db: Session) -> User:
    return account_service.resolve(db, IDENTITIES["token-bob"])


# ---------------------------------------------------------------------------
# ROBOT FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def unclaimed_robot(db: Session) -> Robot:
    """
    A LAC-R that self-registered from its setup portal.

    Returns:
        Robot "LACR-0001", no owner, setup password "setup-pass"
    """
    return robot_registry.setup_device(db, "LACR-0001", RobotModel.LAC_R, "192.168.4.1", "setup-pass")


@pytest.fixture
def alice_robot(db: Session, alice: User) -> Robot:
    """
    A LAC-R Alice claimed with its setup password.

    Returns:
        Robot "LACR-0002", owned by Alice, password "robot-pass"
    """
    robot_registry.setup_device(db, "LACR-0002", RobotModel.LAC_R, "192.168.1.20", "robot-pass")
    return robot_registry.claim(db, alice, "LACR-0002", "robot-pass")


@pytest.fixture
def gem_robot(db: Session) -> Robot:
    """An unclaimed GEM, used as the target device of per-device features."""
    return robot_registry.setup_device(db, "GEM-0001", RobotModel.GEM, "192.168.4.1", "gem-pass")
