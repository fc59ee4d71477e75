"""
api/routes/auth.py -- Login and own-profile endpoints.

Routes:
  POST /api/login    -- password login; returns a bearer token and the user
  GET  /api/profile  -- the authenticated principal's own record

Security:
  authenticate() provides enumeration resistance and timing equalization --
  use it, never inline the store lookup and password check.
  Cache-Control: no-store on login responses (success and failure) so the
  token never lands in an intermediary cache.
  login() is a plain def so bcrypt runs in FastAPI's thread pool, off the
  event loop.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response

from api.models import LoginRequest, LoginResponse, ProfileResponse, UserOut
from auth.credentials import authenticate
from auth.dependencies import get_principal
from auth.directory import DirectoryService
from auth.models import Principal
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.errors import ServiceError

# Auth policy:
# - POST /api/login:   public -- login endpoint must be unauthenticated
# - GET  /api/profile: requires auth (get_principal)
router = APIRouter()

logger = logging.getLogger("courierdesk.api")


@router.post("/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest, response: Response) -> LoginResponse:
    """Authenticate with username and password; return a signed session token.

    Unknown username and wrong password produce the identical 401 body.
    """
    response.headers["Cache-Control"] = "no-store"
    user_store: UserStore = request.app.state.user_store
    codec: TokenCodec = request.app.state.token_codec

    try:
        user = authenticate(user_store, body.username, body.password)
    except ServiceError as exc:
        # The exception handler builds a fresh response, so the header set
        # above would be lost; carry it on the exception instead.
        exc.headers = {"Cache-Control": "no-store"}
        raise

    token = codec.issue(user.id, user.username, user.role)
    logger.info("Login succeeded for account id=%s role=%s", user.id, user.role)
    return LoginResponse(
        token=token,
        expires_in=codec.ttl_seconds,
        user=UserOut.from_user(user),
    )


@router.get("/profile", response_model=ProfileResponse)
def profile(request: Request, principal: Principal = Depends(get_principal)) -> ProfileResponse:
    """Return the authenticated principal's own user record."""
    directory = DirectoryService(request.app.state.user_store)
    return ProfileResponse(user=UserOut.from_user(directory.get_profile(principal)))
