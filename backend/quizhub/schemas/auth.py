"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field, field_validator


class Credentials(BaseModel):
    """Email and password exchanged for an access token."""

    email: EmailStr
    password: str = Field(..., min_length=5, max_length=15)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()
