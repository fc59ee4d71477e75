"""
auth/dependencies.py -- FastAPI Depends() helpers for access control.

Two stages, applied per route:
  1. get_principal() -- authentication. Extracts the bearer token from the
     Authorization header, verifies it with the app's TokenCodec, and attaches
     the resulting Principal to request.state.principal.
  2. require_admin() -- authorization. Wraps get_principal() and rejects any
     principal whose role claim is not "admin".

Both raise ServiceError subclasses. FastAPI resolves dependencies before the
route body runs, so a raised error short-circuits the request and the
handler is never invoked; the app-level exception handler renders it.

Layer rule: no imports from shipments/.
  auth/dependencies.py may import from fastapi (for Depends/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Depends, Request

from auth.models import Principal
from auth.policy import ensure_admin
from auth.tokens import TokenCodec
from core.errors import TokenInvalid, TokenMissing


def extract_bearer_token(request: Request) -> str:
    """Return the raw token from "Authorization: Bearer <token>".

    No header, or the scheme with nothing after it -> TokenMissing.
    Any other scheme (Basic, Digest, ...) -> TokenInvalid.
    """
    auth_header = request.headers.get("Authorization", "").strip()
    if not auth_header:
        raise TokenMissing()
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer":
        raise TokenInvalid()
    token = token.strip()
    if not token:
        raise TokenMissing()
    return token


def get_principal(request: Request) -> Principal:
    """Require a valid session token. Raises TokenMissing / TokenInvalid / TokenExpired.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(principal: Principal = Depends(get_principal)): ...
    """
    codec: TokenCodec = request.app.state.token_codec
    principal = codec.verify(extract_bearer_token(request))
    request.state.principal = principal
    return principal


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    """Require the admin role claim. Raises Forbidden otherwise.

    Use as a FastAPI dependency:
        @router.get("/admin-only")
        def route(principal: Principal = Depends(require_admin)): ...
    """
    ensure_admin(principal)
    return principal
