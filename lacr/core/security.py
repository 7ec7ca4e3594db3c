"""
Security utilities - hashing and verification of robot passwords and dashboard PINs.

Plaintext secrets only ever pass through these functions; nothing else in the
codebase stores, returns, or logs them.
"""

from passlib.context import CryptContext  # Password hashing library

from lacr.core.config import settings

# ---------------------------------------------------------------------------
# PASSWORD HASHING CONTEXT
# ---------------------------------------------------------------------------
# CryptContext: Passlib's high-level interface for password hashing
# - schemes=["bcrypt"]: salted, deliberately slow one-way hash
# - deprecated="auto": older schemes keep verifying if we ever add new ones
# - bcrypt__rounds: cost factor from settings (lowered in tests)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_secret(secret: str) -> str:
    """
    Hash a robot password or dashboard PIN.

    Returns a bcrypt string (e.g. "$2b$12$..."). The salt is random per call,
    so hashing the same secret twice gives two different strings.
    """
    return pwd_context.hash(secret)


def verify_secret(secret: str, hashed: str | None) -> bool:
    """
    Check a plaintext secret against a stored hash.

    Comparison is constant-time (passlib). A missing or malformed hash is
    simply a mismatch: this function never raises for bad stored data.
    """
    if not hashed or secret is None:
        return False
    try:
        return pwd_context.verify(secret, hashed)
    except (ValueError, TypeError):
        return False


def burn_verify_time() -> None:
    """
    Spend the same time a real verification would.

    Called when the robot is unknown, so "no such robot" and "wrong password"
    cannot be told apart by latency.
    """
    pwd_context.dummy_verify()
