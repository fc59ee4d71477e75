"""
auth/seed.py -- Default staff accounts for a fresh database.

Creates one administrator and two couriers if (and only if) their usernames
are not taken yet. Safe to run on every startup.

The default passwords are public. Change them, or disable seeding with
SEED_DEFAULT_USERS=false, before exposing the service.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import ROLE_ADMIN, ROLE_COURIER, User
from auth.passwords import hash_password
from auth.store import UserStore

logger = logging.getLogger("courierdesk.seed")

DEFAULT_USERS: tuple[dict, ...] = (
    {
        "username": "admin",
        "password": "admin123",
        "role": ROLE_ADMIN,
        "full_name": "Administrator",
        "email": "admin@delivery.com",
        "phone": "081234567890",
    },
    {
        "username": "courier1",
        "password": "courier123",
        "role": ROLE_COURIER,
        "full_name": "Courier One",
        "email": "courier1@delivery.com",
        "phone": "081234567891",
    },
    {
        "username": "courier2",
        "password": "courier123",
        "role": ROLE_COURIER,
        "full_name": "Courier Two",
        "email": "courier2@delivery.com",
        "phone": "081234567892",
    },
)


def seed_default_users(store: UserStore, defaults: tuple[dict, ...] = DEFAULT_USERS) -> list[str]:
    """Insert any missing default accounts. Returns the usernames created."""
    created: list[str] = []
    for entry in defaults:
        if store.get_by_username(entry["username"]) is not None:
            continue
        user = User(
            username=entry["username"],
            hashed_password=hash_password(entry["password"]),
            role=entry["role"],
            full_name=entry["full_name"],
            email=entry.get("email"),
            phone=entry.get("phone"),
        )
        try:
            store.create_user(user)
        except IntegrityError:
            # Another worker seeded the same account between the check and the insert.
            continue
        created.append(user.username)
        logger.warning("Default user created: %s (%s) -- change its password", user.username, user.role)
    return created
