"""
Quotation model for service contracts priced per month.
Line items are created atomically with their quotation.
"""

from typing import Optional, List, TYPE_CHECKING
from decimal import Decimal
from datetime import datetime
from enum import Enum
from sqlalchemy import (
    String,
    Text,
    ForeignKey,
    Integer,
    Numeric,
    Boolean,
    DateTime,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.models.base import BaseModel

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.client import Client
    from app.models.catalog import Service, Category, UnitOfMeasure


class QuoteStatus(str, Enum):
    """Quotation status enumeration."""
    PENDING = "pending"
    PENDING_APPROVAL = "pending_approval"
    EFFECTIVE = "effective"
    REJECTED = "rejected"


class PdfPriceType(str, Enum):
    """Which price the PDF document shows per line."""
    SALE = "sale"
    MINIMUM = "minimum"


def _enum_values(enum_cls):
    return [m.value for m in enum_cls]


class Quote(BaseModel):
    """
    Quotation.

    Attributes:
        quote_number: Human-readable number (COT-{year}-{seq})
        owner_id: Salesperson who owns the quotation
        client_id: Client the proposal is addressed to
        status: Current workflow state
        contract_months: Contract duration, uniform across line items
        total: Current contract total, adjusted by discounts/free months
        original_total: Pre-adjustment baseline, set once by the first adjustment
        discount_percentage / free_months: Active adjustments (0 when unset)
        approved_* / rejected_*: Audit of the last approval / rejection
        discount_* / free_months_*: Audit of who granted each benefit
        pdf_generated: Whether a document has been issued for the current figures
    """

    __tablename__ = "quotes"

    quote_number: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
    )
    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    client_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    status: Mapped[QuoteStatus] = mapped_column(
        SQLEnum(QuoteStatus, name="quote_status", values_callable=_enum_values),
        default=QuoteStatus.PENDING,
        nullable=False,
        index=True,
    )
    contract_months: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    # Totals
    total: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    original_total: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=True,
    )

    # Free text
    comment: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    observations: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    # Approval audit
    approved_by_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    approved_by_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    rejected_by_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    rejected_by_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    rejected_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Discount
    discount_percentage: Mapped[Decimal] = mapped_column(
        Numeric(precision=5, scale=2),
        default=Decimal("0.00"),
        nullable=False,
    )
    has_discount: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    discount_comment: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    discount_granted_by_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    discount_granted_by_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    discount_granted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # Free months
    free_months: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    has_free_months: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    free_months_comment: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    free_months_granted_by_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    free_months_granted_by_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    free_months_granted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # PDF document
    pdf_generated: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    pdf_path: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
    )
    include_contact_name: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    include_company_name: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    include_tax_document: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    include_company_phone: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    include_company_email: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    pdf_price_type: Mapped[PdfPriceType] = mapped_column(
        SQLEnum(PdfPriceType, name="pdf_price_type", values_callable=_enum_values),
        default=PdfPriceType.SALE,
        nullable=False,
    )

    # Relationships
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="quotes",
        foreign_keys=[owner_id],
        lazy="selectin",
    )
    client: Mapped["Client"] = relationship(
        "Client",
        foreign_keys=[client_id],
        lazy="selectin",
    )
    items: Mapped[List["QuoteItem"]] = relationship(
        "QuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteItem.id",
        lazy="selectin",
    )

    @property
    def salesperson_name(self) -> Optional[str]:
        return self.owner.full_name if self.owner else None

    @property
    def items_total(self) -> Decimal:
        """Sum of line subtotals, i.e. the unadjusted contract total."""
        return sum((item.subtotal for item in self.items), Decimal("0.00"))

    def __repr__(self) -> str:
        return f"<Quote(id={self.id}, number='{self.quote_number}', status='{self.status}', total={self.total})>"


class QuoteItem(BaseModel):
    """
    Quotation line: one (service, category) pairing.

    Invariant: subtotal = quantity * unit_price * duration_months.
    """

    __tablename__ = "quote_items"

    quote_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    service_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("services.id", ondelete="RESTRICT"),
        nullable=False,
    )
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=False,
    )
    unit_of_measure_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("units_of_measure.id", ondelete="RESTRICT"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(
        Integer,
        default=1,
        nullable=False,
    )
    duration_months: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
    )
    subtotal: Mapped[Decimal] = mapped_column(
        Numeric(precision=15, scale=2),
        nullable=False,
    )

    # Relationships
    quote: Mapped["Quote"] = relationship(
        "Quote",
        back_populates="items",
    )
    service: Mapped["Service"] = relationship("Service", lazy="selectin")
    category: Mapped["Category"] = relationship("Category", lazy="selectin")
    unit_of_measure: Mapped["UnitOfMeasure"] = relationship("UnitOfMeasure", lazy="selectin")

    def __repr__(self) -> str:
        return (
            f"<QuoteItem(id={self.id}, service_id={self.service_id}, "
            f"qty={self.quantity}, subtotal={self.subtotal})>"
        )


class QuoteNumberCounter(Base):
    """
    Last quote number issued for a year.

    Incremented under a row lock in the same transaction as the quotation
    it numbers, so concurrent creations queue instead of colliding and a
    rolled-back creation gives its number back.
    """

    __tablename__ = "quote_number_counters"

    year: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    last_value: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<QuoteNumberCounter(year={self.year}, last_value={self.last_value})>"
