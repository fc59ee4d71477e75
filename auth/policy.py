"""
auth/policy.py -- Role-based authorization rules.

Pure functions over a Principal. Every decision is made from the token's
role claim, never from a fresh store read, so a demoted admin keeps admin
rights until their current token expires.

Used by auth/dependencies.py (route-level gate) and auth/directory.py
(operation-level gate) so both apply the identical rule.
"""

from __future__ import annotations

from auth.models import Principal
from core.errors import Forbidden


def ensure_admin(principal: Principal) -> None:
    """Raise Forbidden unless the principal holds the admin role."""
    if not principal.is_admin:
        raise Forbidden("Access denied. Administrator role required.")


def ensure_self_or_admin(principal: Principal, target_user_id: int) -> None:
    """Raise Forbidden unless the principal is an admin or is the target user."""
    if principal.is_admin or principal.user_id == target_user_id:
        return
    raise Forbidden("You do not have permission to modify this user.")
