"""
API request and response models for ItemKeeper REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
items/models.py, which own the internal domain representation. Route handlers
map between the two.

No response model has a password_hash field. Account data leaves the API only
through AccountResponse / MeResponse, which are built field by field.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Account, Identity
from items.models import Item

# ---------------------------------------------------------------------------
# Shared
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

    status: str = "ok"
    version: str


# ---------------------------------------------------------------------------
# Auth -- request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/auth/register.

    Length bounds here are transport limits only. The business rules (minimum
    username/password length, password confirmation) live in
    auth.service.validate_registration so the HTML form applies the same ones.
    """

    username: str = Field(max_length=255)
    email: str = Field(max_length=255)
    password: str = Field(max_length=255)
    confirm_password: str = Field(max_length=255)


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/login."""

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Auth -- response models
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    """Public view of a freshly registered account."""

    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    email: str
    created_at: str

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            username=account.username,
            email=account.email,
            created_at=account.created_at or "",
        )


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str
    expires_in: int
    username: str


class MeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: int
    username: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "MeResponse":
        return cls(user_id=identity.id, username=identity.username)


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


class ItemWrite(BaseModel):
    """Request body for POST /api/v1/items and PUT /api/v1/items/{id}.

    Trimming, length limits, and the blank-description-to-null rule are
    applied by items.models.normalize_item_input in the route.
    """

    title: str
    description: Optional[str] = None


class ItemResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_item(cls, item: Item) -> "ItemResponse":
        """Build an ItemResponse from a domain Item. owner_id is implied by the session and not echoed."""
        return cls(
            id=item.id,
            title=item.title,
            description=item.description,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
