"""
auth/directory.py -- Role-scoped read/update operations over the user store.

Pattern: Service layer. Routes translate HTTP into calls on DirectoryService
and translate the returned User dataclasses back into response models. The
service owns the authorization rule for each operation (via auth/policy.py)
so it stays correct even when called from somewhere other than a route,
e.g. the CLI or a test.

Layer rule: no imports from api/ or shipments/.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from auth.models import ROLES, Principal, User
from auth.passwords import MAX_PASSWORD_BYTES, hash_password, password_fits
from auth.policy import ensure_admin, ensure_self_or_admin
from auth.store import UserStore
from core.errors import InvalidInput, NoChanges, NotFound

logger = logging.getLogger("courierdesk.auth")

# Profile fields a principal may change through update_user(). Maps the
# request-level name to the store column.
UPDATABLE_FIELDS: dict[str, str] = {
    "full_name": "full_name",
    "email": "email",
    "phone": "phone",
    "password": "hashed_password",
}


class DirectoryService:
    """User directory with role-scoped visibility.

    Usage:
        directory = DirectoryService(user_store)
        me = directory.get_profile(principal)
        couriers = directory.list_users(principal, role="courier")
    """

    def __init__(self, store: UserStore) -> None:
        self._store = store

    def get_profile(self, principal: Principal) -> User:
        """Return the principal's own record. Any authenticated principal may call this."""
        user = self._store.get_by_id(principal.user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    def list_users(self, principal: Principal, role: str | None = None) -> list[User]:
        """Return all users, newest first. Admin only."""
        ensure_admin(principal)
        if role is not None and role not in ROLES:
            raise InvalidInput(f"Unknown role filter. Expected one of: {', '.join(ROLES)}.")
        return self._store.list_users(role=role)

    def get_user(self, principal: Principal, user_id: int) -> User:
        """Return one user by id. Admin only."""
        ensure_admin(principal)
        user = self._store.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    def update_user(self, principal: Principal, target_id: int, fields: Mapping[str, str | None]) -> None:
        """Change profile fields on target_id. Admins may update anyone; others only themselves.

        Only non-empty values for full_name, email, phone and password are
        applied. Nothing to apply raises NoChanges before the store is
        touched. A new password is re-hashed before it is stored. All
        changes land in a single UPDATE together with updated_at.
        """
        ensure_self_or_admin(principal, target_id)

        changes: dict[str, str] = {}
        for name, column in UPDATABLE_FIELDS.items():
            value = fields.get(name)
            if value:
                changes[column] = value
        if not changes:
            raise NoChanges()

        if "hashed_password" in changes:
            if not password_fits(changes["hashed_password"]):
                raise InvalidInput(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
            changes["hashed_password"] = hash_password(changes["hashed_password"])

        if not self._store.update_user(target_id, **changes):
            raise NotFound("User not found.")
        logger.info(
            "User id=%s updated by id=%s (fields=%s)",
            target_id,
            principal.user_id,
            ",".join(name for name in UPDATABLE_FIELDS if fields.get(name)),
        )
