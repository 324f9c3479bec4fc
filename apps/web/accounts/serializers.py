"""
Pydantic schemas for authentication and user management requests.
"""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^(\d{10,15})?$"
USERNAME_PATTERN = r"^[a-zA-Z0-9]{3,50}$"

UserStatus = Literal["pending", "active", "inactive", "suspended"]


class LoginRequest(BaseModel):
    """Request body for POST /auth/login. email may also hold a username."""

    email: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, max_length=50)
    password: str = Field(..., min_length=1)
    remember_me: bool = False

    @model_validator(mode="after")
    def _identifier_required(self) -> "LoginRequest":
        if not (self.email or self.username):
            raise ValueError("email or username is required")
        return self

    @property
    def identifier(self) -> str:
        return (self.email or self.username or "").strip()


class CustomerRegisterRequest(BaseModel):
    """Request body for POST /users/register (customer accounts)."""

    full_name: str = Field(..., min_length=2, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    username: str | None = Field(default=None, pattern=USERNAME_PATTERN)
    phone: str = Field(default="", pattern=PHONE_PATTERN)


class RoleLocationPair(BaseModel):
    role: str = Field(..., max_length=50)
    location_id: UUID | None = None
    is_primary: bool = False


def _check_single_primary(pairs: list[RoleLocationPair]) -> None:
    if sum(1 for p in pairs if p.is_primary) > 1:
        raise ValueError("Only one role can be primary")


class UserCreateRequest(BaseModel):
    """Request body for POST /users (staff accounts created by an administrator)."""

    full_name: str = Field(..., min_length=2, max_length=255)
    username: str = Field(..., pattern=USERNAME_PATTERN)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    phone: str = Field(default="", pattern=PHONE_PATTERN)
    restaurant_id: UUID | None = None
    status: UserStatus = "active"
    role_location_pairs: list[RoleLocationPair] = Field(..., min_length=1)
    primary_location_id: UUID | None = None

    @model_validator(mode="after")
    def _one_primary(self) -> "UserCreateRequest":
        _check_single_primary(self.role_location_pairs)
        return self


class UserUpdateRequest(BaseModel):
    """Request body for PUT/PATCH /users/{id}. Omitted fields are unchanged."""

    full_name: str | None = Field(default=None, min_length=2, max_length=255)
    username: str | None = Field(default=None, pattern=USERNAME_PATTERN)
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(default=None, pattern=PHONE_PATTERN)
    status: UserStatus | None = None
    role_location_pairs: list[RoleLocationPair] | None = Field(
        default=None, min_length=1
    )
    primary_location_id: UUID | None = None

    @model_validator(mode="after")
    def _one_primary(self) -> "UserUpdateRequest":
        if self.role_location_pairs:
            _check_single_primary(self.role_location_pairs)
        return self


class ChangePasswordRequest(BaseModel):
    current_password: str | None = None
    new_password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str

    @model_validator(mode="after")
    def _passwords_match(self) -> "ChangePasswordRequest":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class ConfirmEmailRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=64)


class ResendConfirmationRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
