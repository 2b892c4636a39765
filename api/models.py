"""
API request and response models for OrderDesk REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
sales/models.py, which own the internal domain representation. Conversion is
explicit and field-by-field: each response model has a from_* factory
colocated with it, and route handlers pass request fields to the services by
name.

Field rules mirror the registration and client/order validators: they are
transport checks (422). Business rules such as "order total must be greater
than zero" are enforced by the services and answered with 400.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import AuthResult, User
from sales.models import Client, Order

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Pragmatic email syntax check: one @, no whitespace, a dot in the domain.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    username and email are trimmed before their length/pattern checks.
    password is hashed exactly as sent; LoginRequest must treat it the same.
    """

    username: str = Field(min_length=3, max_length=50)
    email: str = Field(max_length=100, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6, max_length=100)

    @field_validator("username", "email", mode="before")
    @classmethod
    def strip_identity(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login. Email trimmed as on register; password untouched."""

    email: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=100)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, v: object) -> object:
        return v.strip() if isinstance(v, str) else v


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class AuthResponse(BaseModel):
    """Token plus identity echo, returned by register and login."""

    model_config = ConfigDict(frozen=True)

    token: str
    email: str
    username: str

    @classmethod
    def from_result(cls, result: AuthResult) -> "AuthResponse":
        return cls(token=result.token, email=result.email, username=result.username)


class MeResponse(BaseModel):
    """Response for GET /api/v1/auth/me."""

    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "MeResponse":
        return cls(user_id=user.id, username=user.username, email=user.email)


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------


class ClientCreate(BaseModel):
    """Request body for POST /api/v1/clients."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=100, pattern=EMAIL_PATTERN)


class ClientUpdate(BaseModel):
    """Request body for PUT /api/v1/clients/{client_id}. Full replacement."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=100, pattern=EMAIL_PATTERN)


class ClientResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    registered_at: str

    @classmethod
    def from_client(cls, client: Client) -> "ClientResponse":
        return cls(
            id=client.id,
            name=client.name,
            email=client.email,
            registered_at=client.registered_at,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderCreate(BaseModel):
    """Request body for POST /api/v1/orders.

    total_amount sign is checked by OrderService, not here, so a negative or
    zero total is answered with the invalid_amount business-rule error.
    """

    client_id: int = Field(gt=0)
    total_amount: Decimal = Field(max_digits=10, decimal_places=2)


class OrderUpdate(BaseModel):
    """Request body for PUT /api/v1/orders/{order_id}."""

    total_amount: Decimal = Field(max_digits=10, decimal_places=2)


class OrderResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    client_id: int
    total_amount: Decimal
    ordered_at: str

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            client_id=order.client_id,
            total_amount=order.total_amount,
            ordered_at=order.ordered_at,
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
