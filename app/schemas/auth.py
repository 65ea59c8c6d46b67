"""
Staff authentication schemas: credentials, sessions and role permissions.
"""

from datetime import datetime

from pydantic import EmailStr, Field

from app.models.user import PRIVILEGED_ROLES, UserRole
from app.schemas.base import BaseSchema
from app.schemas.user import UserResponse


class LoginRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=6)


class RegisterRequest(BaseSchema):
    """Self-registration always yields a salesperson; other roles are granted by an admin."""

    email: EmailStr
    password: str = Field(..., min_length=8, description="Minimum 8 caractères")
    full_name: str = Field(..., min_length=2, max_length=255)


class RefreshTokenRequest(BaseSchema):
    refresh_token: str


class StaffPermissions(BaseSchema):
    """What a role may do on quotations and the catalog, derived from the role."""

    change_status: bool
    grant_benefits: bool
    edit_observations: bool
    see_all_quotations: bool
    manage_catalog: bool

    @classmethod
    def for_role(cls, role: UserRole) -> "StaffPermissions":
        privileged = role in PRIVILEGED_ROLES
        return cls(
            change_status=privileged,
            grant_benefits=privileged,
            edit_observations=privileged,
            see_all_quotations=privileged,
            manage_catalog=role == UserRole.ADMIN,
        )


class StaffSession(BaseSchema):
    """Returned by login and refresh: the token pair and who it belongs to."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserResponse
    permissions: StaffPermissions


class StaffProfile(UserResponse):
    permissions: StaffPermissions
