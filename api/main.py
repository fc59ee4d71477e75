"""
api/main.py -- FastAPI application entry point for CourierDesk.

Run with:      python main.py serve
               uvicorn api.main:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. log_requests          -- one access-log line per request

Lifespan handles startup (settings, stores, token codec, default users) and
shutdown (close DB engines) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.statistics import router as statistics_router
from api.routes.users import router as users_router
from auth.seed import seed_default_users
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import get_settings
from core.errors import ServiceError
from shipments.store import ShipmentStore

VERSION = "1.0.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("courierdesk.api")


# ---------------------------------------------------------------------------
# Lifespan -- modern startup / shutdown pattern (replaces @app.on_event)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown. The token codec is built here from the settings snapshot and
    is immutable afterwards -- no handler reads SECRET_KEY directly.
    """
    logger.info("CourierDesk API starting up")
    if _settings.uses_insecure_secret:
        logger.warning("Running with the placeholder SECRET_KEY -- do not use this deployment in production")
    app.state.token_codec = TokenCodec(_settings.secret_key, _settings.token_expire_seconds)
    app.state.user_store = UserStore(_settings.database_url)
    app.state.shipment_store = ShipmentStore(_settings.database_url)
    logger.info("Stores initialized")
    if _settings.seed_default_users:
        created = seed_default_users(app.state.user_store)
        logger.info("Default user seeding done (%d created)", len(created))

    yield

    app.state.shipment_store.close()
    app.state.user_store.close()
    logger.info("CourierDesk API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="CourierDesk API",
    description="Staff authentication, user directory, and shipment statistics for the delivery desk.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=_settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["Users"])
app.include_router(statistics_router, prefix="/api", tags=["Statistics"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            message=message,
            error=ErrorDetail(code=code, message=message, detail=detail),
        ).model_dump(exclude_none=True),
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render any typed service error with its own status, code and message.

    5xx service errors are logged by the component that raised them; the
    client only ever sees the generic message.
    """
    response = _error_response(exc.status_code, exc.code, exc.message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 invalid_input when the body, path or query fails validation.

    Rejected values are left out of the detail so a password is never echoed.
    """
    errors = [{k: v for k, v in err.items() if k != "input"} for err in exc.errors()]
    return _error_response(400, "invalid_input", "Request validation failed.", detail=str(errors))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Structured errors for framework-raised HTTP errors (unknown route, bad method)."""
    if exc.status_code == 404:
        return _error_response(404, "not_found", "Endpoint not found.")
    if exc.status_code == 405:
        return _error_response(405, "method_not_allowed", "Method not allowed.")
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health and index endpoints
#
# Defined directly in main.py (not in a router) so they are always reachable
# regardless of router registration state. No authentication.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, current time, version and database reachability."""
    try:
        request.app.state.user_store.ping()
        database = "ok"
    except Exception:
        logger.exception("Health check database ping failed")
        database = "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})


@app.get("/", include_in_schema=False)
async def index() -> dict:
    """Describe the service and list its endpoints."""
    return {
        "success": True,
        "message": "CourierDesk API Server",
        "version": VERSION,
        "endpoints": {
            "auth": {"login": "POST /api/login"},
            "user": {
                "profile": "GET /api/profile",
                "users": "GET /api/users",
                "userById": "GET /api/users/:id",
                "updateUser": "PUT /api/users/:id",
            },
            "stats": {"statistics": "GET /api/statistics"},
            "health": "GET /api/health",
        },
    }
