"""
API request and response models for CourierDesk REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
shipments/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire format: JSON keys are camelCase (fullName, createdAt, ...). Models use
snake_case attributes with a camelCase alias generator; FastAPI serializes
response models by alias, and populate_by_name lets request bodies use
either spelling.

Every response carries a boolean "success" field so clients can branch on
one key regardless of status code.
"""

from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic.alias_generators import to_camel

from auth.models import User
from auth.passwords import MAX_PASSWORD_BYTES, password_fits
from shipments.models import ShipmentStatistics

_WIRE = ConfigDict(alias_generator=to_camel, populate_by_name=True)

# Profile text is trimmed. Passwords are never altered.
_Trimmed = Annotated[str, StringConstraints(strip_whitespace=True)]


def _check_password_bytes(value: Optional[str]) -> Optional[str]:
    if value is not None and not password_fits(value):
        raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes when UTF-8 encoded")
    return value


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/login.

    Both fields are optional at the schema level so a missing or empty value
    reaches authenticate() and is reported as invalid_input (400), not as a
    schema validation error.
    """

    username: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value)


class UserUpdate(BaseModel):
    """Request body for PUT /api/users/{id}. Omitted or empty fields are left unchanged."""

    model_config = _WIRE

    full_name: Optional[_Trimmed] = Field(default=None, max_length=255)
    email: Optional[_Trimmed] = Field(default=None, max_length=255)
    phone: Optional[_Trimmed] = Field(default=None, max_length=50)
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, value: Optional[str]) -> Optional[str]:
        return _check_password_bytes(value)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserOut(BaseModel):
    """Public view of a user. Never includes the password hash."""

    model_config = _WIRE

    id: int
    username: str
    role: str
    full_name: str
    email: Optional[str]
    phone: Optional[str]
    status: str
    created_at: str
    updated_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        """Build the public view from a domain User, field by field."""
        return cls(
            id=user.id,
            username=user.username,
            role=user.role,
            full_name=user.full_name,
            email=user.email,
            phone=user.phone,
            status=user.status,
            created_at=user.created_at or "",
            updated_at=user.updated_at or "",
        )


class LoginResponse(BaseModel):
    model_config = _WIRE

    success: bool = True
    message: str = "Login successful."
    token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserOut


class ProfileResponse(BaseModel):
    model_config = _WIRE

    success: bool = True
    user: UserOut


class UserListResponse(BaseModel):
    model_config = _WIRE

    success: bool = True
    data: list[UserOut]
    total: int


class UserDetailResponse(BaseModel):
    model_config = _WIRE

    success: bool = True
    data: UserOut


class MessageResponse(BaseModel):
    model_config = _WIRE

    success: bool = True
    message: str


class StatisticsOut(BaseModel):
    model_config = _WIRE

    total_shipments: int = Field(ge=0)
    active_couriers: int = Field(ge=0)
    shipments_today: int = Field(ge=0)
    completed_today: int = Field(ge=0)

    @classmethod
    def from_statistics(cls, stats: ShipmentStatistics) -> "StatisticsOut":
        return cls(
            total_shipments=stats.total_shipments,
            active_couriers=stats.active_couriers,
            shipments_today=stats.shipments_today,
            completed_today=stats.completed_today,
        )


class StatisticsResponse(BaseModel):
    model_config = _WIRE

    success: bool = True
    data: StatisticsOut


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses.

    message duplicates error.message so simple clients can show it directly.
    """

    model_config = ConfigDict(frozen=True)

    success: bool = False
    message: str
    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    success: bool = True
    status: str = "OK"
    message: str = "Server is running"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    version: str
    components: dict[str, str] = Field(default_factory=dict)
