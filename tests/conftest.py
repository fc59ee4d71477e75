"""
tests/conftest.py -- Shared test fixtures for CourierDesk tests.

This module provides:
  - make_principal(): build a Principal without going through a token
  - user_store / shipment_store: fresh file-backed stores per test
  - _make_test_stores(): one isolated SQLite file for the API client
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - api_client: TestClient plus admin / courier accounts and their tokens

Design: Each store fixture gets its own SQLite file under pytest's tmp_path.
File databases (unlike plain :memory:) are visible from every thread, which
matters because TestClient runs sync route handlers in a thread pool and the
statistics aggregator reads from worker threads. The API client's user and
shipment stores share one file, as they share one DATABASE_URL in production.

Environment variables must be set before any core/auth import because
Settings is read once and cached.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import NamedTuple

# CRITICAL: configure before importing anything that calls get_settings().
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SEED_DEFAULT_USERS", "false")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import ROLE_ADMIN, ROLE_COURIER, STATUS_INACTIVE, Principal, User
from auth.passwords import hash_password
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import get_settings
from shipments.store import ShipmentStore

ADMIN_PASSWORD = "testpass123"
COURIER_PASSWORD = "courierpass1"
INACTIVE_PASSWORD = "retiredpass1"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_principal(user_id: int, role: str = ROLE_COURIER, username: str = "someone") -> Principal:
    now = datetime.now(timezone.utc)
    return Principal(
        user_id=user_id,
        username=username,
        role=role,
        issued_at=now,
        expires_at=now + timedelta(hours=24),
    )


def make_user(username: str, password: str = "password1", role: str = ROLE_COURIER, **fields) -> User:
    return User(username=username, hashed_password=hash_password(password), role=role, **fields)


def sqlite_url(directory) -> str:
    return f"sqlite:///{directory / f'courierdesk_{uuid.uuid4().hex}.db'}"


def build_codec() -> TokenCodec:
    settings = get_settings()
    return TokenCodec(settings.secret_key, settings.token_expire_seconds)


# ---------------------------------------------------------------------------
# Unit-level store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def user_store(tmp_path) -> Generator[UserStore, None, None]:
    store = UserStore(sqlite_url(tmp_path))
    yield store
    store.close()


@pytest.fixture
def shipment_store(tmp_path) -> Generator[ShipmentStore, None, None]:
    store = ShipmentStore(sqlite_url(tmp_path))
    yield store
    store.close()


# ---------------------------------------------------------------------------
# API client helpers
# ---------------------------------------------------------------------------


def _make_test_stores(directory) -> tuple[UserStore, ShipmentStore]:
    """Create a user store and a shipment store backed by one fresh SQLite file."""
    url = sqlite_url(directory)
    return UserStore(db_url=url), ShipmentStore(db_url=url)


def _patch_lifespan(user_store: UserStore, shipment_store: ShipmentStore, codec: TokenCodec):
    """Return an async context manager that replaces the real lifespan.

    Wires pre-created test stores into app.state so TestClient routes see
    isolated test DBs rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.shipment_store = shipment_store
        app.state.token_codec = codec
        yield

    return test_lifespan


class ApiContext(NamedTuple):
    client: TestClient
    codec: TokenCodec
    user_store: UserStore
    shipment_store: ShipmentStore
    admin_id: int
    admin_token: str
    courier_id: int
    courier_token: str
    inactive_id: int


# ---------------------------------------------------------------------------
# Module-scoped fixture -- one TestClient per test module for speed
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def api_client(tmp_path_factory) -> Generator[ApiContext, None, None]:
    """Yield an ApiContext for API integration tests.

    Accounts created before the client starts:
      testadmin   / testpass123   admin, active
      testcourier / courierpass1  courier, active
      retired     / retiredpass1  courier, inactive
    """
    user_store, shipment_store = _make_test_stores(tmp_path_factory.mktemp("api"))
    codec = build_codec()

    admin_id = user_store.create_user(
        make_user("testadmin", ADMIN_PASSWORD, ROLE_ADMIN, full_name="Test Admin", email="admin@example.com")
    )
    courier_id = user_store.create_user(
        make_user("testcourier", COURIER_PASSWORD, ROLE_COURIER, full_name="Test Courier", phone="0800")
    )
    inactive_id = user_store.create_user(
        make_user("retired", INACTIVE_PASSWORD, ROLE_COURIER, full_name="Retired Courier", status=STATUS_INACTIVE)
    )

    app.router.lifespan_context = _patch_lifespan(user_store, shipment_store, codec)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(
            client=client,
            codec=codec,
            user_store=user_store,
            shipment_store=shipment_store,
            admin_id=admin_id,
            admin_token=codec.issue(admin_id, "testadmin", ROLE_ADMIN),
            courier_id=courier_id,
            courier_token=codec.issue(courier_id, "testcourier", ROLE_COURIER),
            inactive_id=inactive_id,
        )

    shipment_store.close()
    user_store.close()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
