"""
Quotation schemas for request/response validation.
"""

from datetime import datetime
from decimal import Decimal
from pydantic import Field, model_validator

from app.core.config import settings
from app.models.quote import QuoteStatus, PdfPriceType
from app.schemas.base import BaseSchema
from app.schemas.client import ClientCreate, ClientResponse


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

class CategoryQuantity(BaseSchema):
    """Quantity of a service sold in one category."""

    category_id: int
    # zero or negative quantities are skipped, not rejected
    quantity: int = 0


class ServiceRequest(BaseSchema):
    """
    One requested service.

    Either an explicit category breakdown, or the flat legacy quantity
    fields from which a single line is inferred.
    """

    service_id: int
    final_price: Decimal = Field(..., ge=0, description="Prix de vente mensuel unitaire")
    categories: list[CategoryQuantity] = Field(default_factory=list)

    servers_count: int = Field(default=0, ge=0)
    equipment_count: int = Field(default=0, ge=0)
    capacity_gb: int = Field(default=0, ge=0)
    users_count: int = Field(default=0, ge=0)
    sessions_count: int = Field(default=0, ge=0)
    time_count: int = Field(default=0, ge=0)


class PdfOptions(BaseSchema):
    """What the generated document shows."""

    include_contact_name: bool = False
    include_company_name: bool = True
    include_tax_document: bool = False
    include_company_phone: bool = False
    include_company_email: bool = False
    price_type: PdfPriceType = PdfPriceType.SALE


class QuoteCreate(BaseSchema):
    """Schema for creating a quotation."""

    client_id: int | None = None
    client: ClientCreate | None = None
    contract_months: int = Field(..., ge=1, le=settings.MAX_CONTRACT_MONTHS)
    services: list[ServiceRequest] = Field(..., min_length=1)
    pdf_options: PdfOptions = Field(default_factory=PdfOptions)
    comment: str | None = None
    observations: str | None = None

    @model_validator(mode="after")
    def check_client(self):
        if self.client_id is None and self.client is None:
            raise ValueError("client_id ou les données du client sont requis")
        return self


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class QuoteItemResponse(BaseSchema):
    """Quotation line response schema."""

    id: int
    service_id: int
    category_id: int
    unit_of_measure_id: int
    quantity: int
    duration_months: int
    unit_price: Decimal
    subtotal: Decimal


class AuditBlock(BaseSchema):
    """Who approved or rejected the quotation, and when."""

    approved_by_id: int | None = None
    approved_by_name: str | None = None
    approved_at: datetime | None = None
    rejected_by_id: int | None = None
    rejected_by_name: str | None = None
    rejected_at: datetime | None = None


class QuoteResponse(AuditBlock):
    """Full quotation response schema."""

    id: int
    quote_number: str
    owner_id: int
    salesperson_name: str | None = None
    client_id: int
    client: ClientResponse
    status: QuoteStatus
    contract_months: int
    total: Decimal
    original_total: Decimal | None
    comment: str | None
    observations: str | None

    discount_percentage: Decimal
    has_discount: bool
    discount_comment: str | None
    discount_granted_by_name: str | None
    discount_granted_at: datetime | None

    free_months: int
    has_free_months: bool
    free_months_comment: str | None
    free_months_granted_by_name: str | None
    free_months_granted_at: datetime | None

    pdf_generated: bool
    pdf_price_type: PdfPriceType
    include_contact_name: bool
    include_company_name: bool
    include_tax_document: bool
    include_company_phone: bool
    include_company_email: bool

    items: list[QuoteItemResponse]
    created_at: datetime
    updated_at: datetime


class QuoteCreateResponse(BaseSchema):
    quote: QuoteResponse
    requires_approval: bool
    message: str


class QuoteSummary(BaseSchema):
    """Quotation summary for list views."""

    id: int
    quote_number: str
    owner_id: int
    client_id: int
    status: QuoteStatus
    contract_months: int
    total: Decimal
    pdf_generated: bool
    created_at: datetime


class QuoteListResponse(BaseSchema):
    """Paginated quotation list response."""

    items: list[QuoteSummary]
    total: int
    page: int
    per_page: int
    pages: int


class QuoteStats(BaseSchema):
    counts: dict[str, int]
    total: int
    effective_value: Decimal
    approval_rate: int


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------

class StatusChangeRequest(BaseSchema):
    """Trigger a state transition (approve, reject, effective, force_reject)."""

    trigger: str = Field(..., min_length=1)
    reason: str | None = None


class TransitionResponse(BaseSchema):
    quote_id: int
    previous_status: QuoteStatus
    new_status: QuoteStatus
    changed: bool
    audit: AuditBlock


class ObservationsUpdate(BaseSchema):
    """Replace the free-text observations printed on the document."""

    observations: str | None = Field(None, max_length=5000)


class DiscountRequest(BaseSchema):
    percentage: Decimal
    comment: str | None = None


class FreeMonthsRequest(BaseSchema):
    months: int
    comment: str | None = None


class BreakdownResponse(BaseSchema):
    """Figures of the free-months then discount computation."""

    original_total: Decimal
    contract_months: int
    free_months: int
    billable_months: int
    monthly_rate: Decimal
    subtotal_after_free: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    final_total: Decimal
    savings: Decimal


class AdjustmentResponse(BaseSchema):
    quote_id: int
    total: Decimal
    breakdown: BreakdownResponse
    pdf_regenerated: bool
    pdf_status: str
    message: str
