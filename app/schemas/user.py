"""
Staff user schemas.
"""

from datetime import datetime
from pydantic import EmailStr, Field

from app.models.user import UserRole
from app.schemas.base import BaseSchema


class UserCreate(BaseSchema):
    """Schema for an administrator creating a staff account."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=2, max_length=255)
    role: UserRole = UserRole.SALESPERSON


class UserUpdate(BaseSchema):
    """Schema for updating own profile."""

    full_name: str | None = Field(None, min_length=2, max_length=255)


class UserResponse(BaseSchema):
    """User response schema (public data)."""

    id: int
    email: EmailStr
    full_name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PasswordChangeRequest(BaseSchema):
    current_password: str
    new_password: str = Field(..., min_length=8)
