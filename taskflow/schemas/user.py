from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from .base import CamelModel

PASSWORD_MIN_LENGTH = 6


def _clean_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Name cannot be empty")
    return value


class UserCreate(CamelModel):
    name: str
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: str) -> str:
        return _clean_name(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class LoginRequest(CamelModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()


class UserUpdate(CamelModel):
    """Profile changes; at least one field must be supplied."""
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("name")
    @classmethod
    def clean_name(cls, value: Optional[str]) -> Optional[str]:
        return _clean_name(value)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value is not None else None


class UserRead(CamelModel):
    """Public view of a user; the password hash is never exposed."""
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


class AuthResponse(CamelModel):
    token: str
    token_type: str = "bearer"
    user: UserRead
