"""
auth/passwords.py -- bcrypt password hashing.

Bcrypt is the right choice for low-entropy secrets (passwords) because its
cost factor makes brute-force expensive. The cost factor comes from
Settings.bcrypt_rounds and is baked into every digest, so changing it never
breaks verification of existing hashes.

bcrypt only reads the first 72 bytes of a secret, and current releases
refuse anything longer. MAX_PASSWORD_BYTES is that limit; callers validate
against it before hashing so an over-long password is an input error.

DUMMY_HASH enables timing equalization in auth.credentials.authenticate() so
response time does not reveal whether a username exists.

Layer rule: no imports from api/ or shipments/.
"""

from __future__ import annotations

import bcrypt

from core.config import get_settings

_settings = get_settings()

MAX_PASSWORD_BYTES = 72


def password_fits(plain: str) -> bool:
    """Return True if the password is within bcrypt's input limit."""
    return len(plain.encode("utf-8")) <= MAX_PASSWORD_BYTES


def hash_password(plain: str, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    A fresh salt is generated on every call, so hashing the same password
    twice yields two different digests.

    Raises ValueError if the UTF-8 encoding is longer than
    MAX_PASSWORD_BYTES. Nothing is ever truncated.
    """
    if not password_fits(plain):
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded.")
    salt = bcrypt.gensalt(rounds=rounds or _settings.bcrypt_rounds)
    return bcrypt.hashpw(plain.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash.

    bcrypt.checkpw compares in constant time. A malformed or empty digest is
    a failed verification, not an error. So is a password over the byte
    limit.
    """
    if not password_fits(plain):
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
DUMMY_HASH: str = hash_password("courierdesk_timing_dummy")
