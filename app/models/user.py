"""
User model for staff authentication.
Each user is a member of staff: administrator, supervisor or salesperson.
"""

from enum import Enum
from typing import List, TYPE_CHECKING
from sqlalchemy import String, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.client import Client
    from app.models.quote import Quote


class UserRole(str, Enum):
    """Staff roles."""
    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    SALESPERSON = "salesperson"


PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPERVISOR})


class User(BaseModel):
    """
    Staff member.

    Attributes:
        email: Unique email for authentication
        hashed_password: Bcrypt hashed password
        full_name: Name snapshotted into audit fields
        role: Staff role, drives authorization
        is_active: Whether the account is active
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(
            UserRole,
            name="user_role",
            values_callable=lambda e: [m.value for m in e],
        ),
        default=UserRole.SALESPERSON,
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Relationships
    clients: Mapped[List["Client"]] = relationship(
        "Client",
        back_populates="owner",
        lazy="raise",
    )
    quotes: Mapped[List["Quote"]] = relationship(
        "Quote",
        back_populates="owner",
        foreign_keys="Quote.owner_id",
        lazy="raise",
    )

    @property
    def is_privileged(self) -> bool:
        """Admins and supervisors may approve, reject and adjust quotations."""
        return self.role in PRIVILEGED_ROLES

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
