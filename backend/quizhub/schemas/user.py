"""Pydantic schemas for users and the current user."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from quizhub.core.permissions import DEFAULT_USER_PERMISSIONS, Permission


def _normalize_email(v: str | None) -> str | None:
    return v.lower().strip() if v is not None else v


def _unique_permissions(v: list[Permission] | None) -> list[Permission] | None:
    if v is not None and len(set(v)) != len(v):
        raise ValueError("permissions must be unique")
    return v


class MeCreate(BaseModel):
    """Self-registration request."""

    name: str = Field(..., min_length=2, max_length=30)
    email: EmailStr
    password: str = Field(..., min_length=5, max_length=15)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return _normalize_email(v)


class UserCreate(MeCreate):
    """Admin user creation request."""

    permissions: list[Permission] = Field(default_factory=lambda: [Permission(p) for p in DEFAULT_USER_PERMISSIONS])

    @field_validator("permissions")
    @classmethod
    def check_permissions(cls, v: list[Permission]) -> list[Permission]:
        return _unique_permissions(v)


class MeUpdate(BaseModel):
    """Partial update of the current user."""

    name: str | None = Field(default=None, min_length=2, max_length=30)
    email: EmailStr | None = None
    password: str | None = Field(default=None, min_length=5, max_length=15)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str | None) -> str | None:
        return _normalize_email(v)


class UserUpdate(MeUpdate):
    """Partial update of any user."""

    permissions: list[Permission] | None = None

    @field_validator("permissions")
    @classmethod
    def check_permissions(cls, v: list[Permission] | None) -> list[Permission] | None:
        return _unique_permissions(v)


class UserListQuery(BaseModel):
    search: str | None = None

