"""
auth/credentials.py -- Username/password verification for the login flow.

authenticate() is the only place login checks happen. Do NOT inline
get_by_username() + verify_password() in a route -- that re-introduces the
enumeration leaks this function closes:

  - Unknown username and wrong password raise the same InvalidCredentials
    with the same message.
  - bcrypt always runs, against DUMMY_HASH when the username does not exist,
    so response time does not reveal whether the account exists.

Inactive accounts are reported as AccountInactive regardless of whether the
password was right. That tells the caller the username exists; it matches the
behaviour staff already rely on ("contact an administrator").

Layer rule: no imports from api/ or shipments/.
"""

from __future__ import annotations

import logging

from auth.models import User
from auth.passwords import DUMMY_HASH, verify_password
from auth.store import UserStore
from core.errors import AccountInactive, InvalidCredentials, InvalidInput

logger = logging.getLogger("courierdesk.auth")


def authenticate(store: UserStore, username: str | None, password: str | None) -> User:
    """Return the User for a valid active login, or raise a ServiceError.

    Raises:
        InvalidInput:       username or password is empty.
        InvalidCredentials: no such user, or the password does not match.
        AccountInactive:    the account exists but its status is not active.
    """
    if not username or not password:
        raise InvalidInput("Username and password are required.")

    user = store.get_by_username(username)
    if user is None:
        # Equalize timing -- do NOT return early before running bcrypt
        verify_password(password, DUMMY_HASH)
        logger.info("Login failed for unknown username")
        raise InvalidCredentials()

    password_ok = verify_password(password, user.hashed_password)
    if not user.is_active:
        logger.info("Login refused for inactive account id=%s", user.id)
        raise AccountInactive()
    if not password_ok:
        logger.info("Login failed for account id=%s", user.id)
        raise InvalidCredentials()
    return user
