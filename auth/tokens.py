"""
auth/tokens.py -- Stateless session tokens (JWT, HS256).

Security design decisions:
  JWT: python-jose with HS256. Tokens carry user_id, username (as the "sub"
       claim), role, iat, and exp. There is no server-side session table --
       a token with a valid signature and an unexpired exp IS the session.

  Secret: TokenCodec receives the signing key at construction and never
       looks at configuration again. The app lifespan builds exactly one codec
       from Settings and stores it on app.state. Rotating SECRET_KEY (and
       restarting) invalidates every outstanding token.

  Revocation: none. Deactivating or demoting a user does not affect tokens
       already issued; they stay valid until exp. Instant revocation would need
       a denylist keyed by a token id, which this service does not keep.

  Errors: verify() raises TokenMissing / TokenExpired / TokenInvalid from
       core.errors so the access-control dependency can let them propagate
       straight to the exception handler.

Layer rule: no imports from api/ or shipments/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from auth.models import ROLES, Principal
from core.errors import TokenExpired, TokenInvalid, TokenMissing

logger = logging.getLogger("courierdesk.auth")

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 24 * 60 * 60


class TokenCodec:
    """Issue and verify signed, time-bounded session tokens.

    Usage:
        codec = TokenCodec(settings.secret_key)
        token = codec.issue(user.id, user.username, user.role)
        principal = codec.verify(token)
    """

    __slots__ = ("_secret_key", "_ttl")

    def __init__(self, secret_key: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        if not secret_key:
            raise ValueError("TokenCodec requires a non-empty secret key")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._secret_key = secret_key
        self._ttl = timedelta(seconds=ttl_seconds)

    @property
    def ttl_seconds(self) -> int:
        return int(self._ttl.total_seconds())

    def issue(self, user_id: int, username: str, role: str, issued_at: datetime | None = None) -> str:
        """Encode a signed JWT for the given identity.

        issued_at defaults to now. Passing an earlier time produces a token
        whose expiry is already in the past, which is how the tests exercise
        the expired path without sleeping.
        """
        iat = (issued_at or datetime.now(timezone.utc)).replace(microsecond=0)
        payload = {
            "sub": username,
            "user_id": user_id,
            "role": role,
            "iat": iat,
            "exp": iat + self._ttl,
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str | None) -> Principal:
        """Check signature and expiry; return the embedded claims as a Principal.

        The claims are trusted as-is for the rest of the request. The user
        store is not consulted.
        """
        if not token:
            raise TokenMissing()
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM])
        except ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except JWTError as exc:
            logger.debug("Rejected token: %s", exc)
            raise TokenInvalid() from exc
        return _payload_to_principal(payload)


def _payload_to_principal(payload: dict) -> Principal:
    """Validate claim shapes. A correctly signed but malformed payload is invalid."""
    user_id = payload.get("user_id")
    username = payload.get("sub")
    role = payload.get("role")
    iat = payload.get("iat")
    exp = payload.get("exp")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise TokenInvalid()
    if not isinstance(username, str) or not username:
        raise TokenInvalid()
    if role not in ROLES:
        raise TokenInvalid()
    if not isinstance(iat, (int, float)) or not isinstance(exp, (int, float)):
        raise TokenInvalid()
    return Principal(
        user_id=user_id,
        username=username,
        role=role,
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )
