"""
Password hashing and verification.

Uses bcrypt with automatic salting. The work factor comes from
``BCRYPT_ROUNDS`` (default 10).
"""

from __future__ import annotations

from functools import lru_cache

import bcrypt

from .config import settings
from .exceptions import HashingError

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt using a fresh random salt."""
    try:
        salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("ascii")
    except (ValueError, TypeError, OSError) as exc:
        # Never include the plaintext in the error
        raise HashingError(f"Password hashing failed: {type(exc).__name__}") from None


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison against a bcrypt hash."""
    secret = password.encode("utf-8")
    # Older bcrypt releases truncate instead of rejecting
    if len(secret) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(secret, password_hash.encode("ascii"))
    except (ValueError, TypeError, UnicodeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("studypath-timing-equalizer")


def warm_up() -> None:
    """Build the dummy hash before the first request needs it."""
    _dummy_hash()


def verify_against_dummy(password: str) -> bool:
    """
    Spend the same time as a real verification and report failure.

    Used when no account matches the email so that response timing does not
    reveal whether the account exists.
    """
    verify_password(password, _dummy_hash())
    return False
