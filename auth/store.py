"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper (same as shipments/store.py).
UserStore is the repository; _row_to_user is the mapper.
Services and route code never touch SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

Integrity:
  username uniqueness is a UNIQUE constraint; role and status are CHECK
  constraints, so the fixed enumerations hold even for rows written by
  other tools. create_user() validates both up front to fail with a clear
  ValueError rather than an IntegrityError.

  update_user() issues exactly one UPDATE statement that sets every changed
  column and updated_at together. No reader can observe a half-applied
  profile change.

Layer rule: no imports from api/ or shipments/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
    select,
)
from sqlalchemy.engine import Engine

from auth.models import ROLE_COURIER, ROLES, STATUS_ACTIVE, STATUSES, User
from core.config import get_settings
from core.db import make_engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(20), nullable=False),
    Column("full_name", String(255), nullable=False, server_default=""),
    Column("email", String(255)),
    Column("phone", String(50)),
    Column("status", String(20), nullable=False, server_default=STATUS_ACTIVE),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    CheckConstraint("role IN ('admin', 'courier')", name="ck_users_role"),
    CheckConstraint("status IN ('active', 'inactive')", name="ck_users_status"),
)

# Columns update_user() may touch. id, username, created_at are immutable.
# role and status are never passed by DirectoryService; the HTTP API can only
# change profile columns and the password.
_MUTABLE_FIELDS = frozenset({"full_name", "email", "phone", "hashed_password", "role", "status"})


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore()
        store.create_user(User(username="admin", role="admin", hashed_password=hash_password("secret")))
        user = store.get_by_username("admin")
        store.close()
    """

    def __init__(self, db_url: str | None = None) -> None:
        self.engine: Engine = make_engine(db_url or get_settings().database_url)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: int) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self, role: str | None = None) -> list[User]:
        """Return users newest first, optionally restricted to one role.

        ISO 8601 UTC strings sort chronologically as text. id breaks ties for
        rows inserted within the same microsecond.
        """
        query = _users.select()
        if role is not None:
            query = query.where(_users.c.role == role)
        query = query.order_by(_users.c.created_at.desc(), _users.c.id.desc())
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_user(r) for r in rows]

    def count_active_couriers(self) -> int:
        """Return the number of courier accounts whose status is active."""
        with self.engine.connect() as conn:
            result = conn.execute(
                select(func.count())
                .select_from(_users)
                .where((_users.c.role == ROLE_COURIER) & (_users.c.status == STATUS_ACTIVE))
            ).scalar()
        return result or 0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> int:
        """Insert a new user and return its assigned database ID.

        Raises ValueError for a role or status outside the fixed sets.
        Raises sqlalchemy.exc.IntegrityError if the username already exists.
        """
        if user.role not in ROLES:
            raise ValueError(f"Unknown role: {user.role!r}")
        if user.status not in STATUSES:
            raise ValueError(f"Unknown status: {user.status!r}")
        now = _now_iso()
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.insert().values(
                    username=user.username,
                    hashed_password=user.hashed_password,
                    role=user.role,
                    full_name=user.full_name,
                    email=user.email,
                    phone=user.phone,
                    status=user.status,
                    created_at=now,
                    updated_at=now,
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def update_user(self, user_id: int, **fields) -> bool:
        """Apply all given field changes in one statement and refresh updated_at.

        Accepted fields: full_name, email, phone, hashed_password, role, status.
        Unknown field names raise ValueError -- column names never come from
        raw user input.

        Returns True if a row was updated, False if user_id was not found.
        """
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown user fields: {sorted(unknown)!r}")
        if not fields:
            raise ValueError("update_user() called with no fields")
        with self.engine.connect() as conn:
            result = conn.execute(
                _users.update().where(_users.c.id == user_id).values(**fields, updated_at=_now_iso())
            )
            conn.commit()
        return result.rowcount > 0

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            conn.execute(select(1))
        return True

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        hashed_password=row.hashed_password,
        role=row.role,
        full_name=row.full_name or "",
        email=row.email,
        phone=row.phone,
        status=row.status,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
