"""
Client model for managing customers.
Each client belongs to the salesperson who registered it.
"""

from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Text, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.user import User


class Client(BaseModel):
    """
    Client company.

    Attributes:
        owner_id: Salesperson who owns the client
        company_name: Legal or trade name
        contact_name: Person in charge at the client
        tax_document: Tax identification number
        personal_phone / company_phone: Contact phones
        personal_email / company_email: Contact e-mails
        notes: Free-text notes
    """

    __tablename__ = "clients"

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    company_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    contact_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    tax_document: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )
    personal_phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    company_phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )
    personal_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    company_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    owner: Mapped["User"] = relationship(
        "User",
        back_populates="clients",
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, company='{self.company_name}', owner_id={self.owner_id})>"
