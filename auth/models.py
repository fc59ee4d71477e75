"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in shipments/models.py -- dataclasses own domain shape; stores, services and
routes do the work.

Layer rule: no imports from api/ or shipments/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

ROLE_ADMIN = "admin"
ROLE_COURIER = "courier"
ROLES: tuple[str, ...] = (ROLE_ADMIN, ROLE_COURIER)

STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
STATUSES: tuple[str, ...] = (STATUS_ACTIVE, STATUS_INACTIVE)


@dataclass
class User:
    """A staff account: either an administrator or a courier.

    username is unique and case-sensitive. There is no rename operation, so
    it never changes after creation.

    hashed_password is a bcrypt digest. It never leaves the process: API
    response models are built field-by-field and do not include it.

    status governs login eligibility only. Tokens already issued to a user
    who is later deactivated stay valid until they expire.
    """

    username: str
    role: str  # "admin" | "courier"
    hashed_password: str
    full_name: str = ""
    email: str | None = None
    phone: str | None = None
    status: str = STATUS_ACTIVE  # "active" | "inactive"
    id: int | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert
    updated_at: str | None = None  # ISO 8601, refreshed on every write

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE


@dataclass(frozen=True)
class Principal:
    """The authenticated identity attached to a request.

    Built from verified token claims alone -- the store is not consulted, so
    role and identity are exactly what was true when the token was issued.
    """

    user_id: int
    username: str
    role: str
    issued_at: datetime
    expires_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
