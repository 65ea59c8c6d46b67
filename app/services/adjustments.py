"""
Adjustment engine: percentage discounts and free contract months.

Both adjustments share one formula, applied in a fixed order:

    monthly_rate        = original_total / contract_months
    billable_months     = contract_months - free_months
    subtotal_after_free = monthly_rate * billable_months
    discount_amount     = subtotal_after_free * discount_pct / 100
    final_total         = subtotal_after_free - discount_amount
    savings             = original_total - final_total

Free months first, discount second. ``original_total`` is seeded from the
current total by the first adjustment of either kind and read back,
never re-derived, by every later one.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.models.base import utcnow
from app.models.quote import Quote, QuoteStatus
from app.models.user import User
from app.services.line_items import to_money
from app.services.pdf import PDFService
from app.services.quote import full_quote_options


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdjustmentBreakdown:
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


@dataclass
class AdjustmentResult:
    quote: Quote
    breakdown: AdjustmentBreakdown
    pdf_regenerated: bool

    @property
    def pdf_status(self) -> str:
        return "regenerated" if self.pdf_regenerated else "manual_required"


def compute_breakdown(
    original_total: Decimal,
    contract_months: int,
    free_months: int = 0,
    discount_percentage: Decimal = Decimal("0"),
) -> AdjustmentBreakdown:
    """Combine free months and a percentage discount over the original total."""
    if contract_months <= 0:
        raise ValidationError("La durée du contrat doit être positive")

    original_total = Decimal(original_total)
    discount_percentage = Decimal(discount_percentage)

    monthly_rate = original_total / contract_months
    billable_months = contract_months - free_months
    subtotal_after_free = monthly_rate * billable_months
    discount_amount = subtotal_after_free * (discount_percentage / Decimal("100"))
    final_total = to_money(subtotal_after_free - discount_amount)

    return AdjustmentBreakdown(
        original_total=to_money(original_total),
        contract_months=contract_months,
        free_months=free_months,
        billable_months=billable_months,
        monthly_rate=to_money(monthly_rate),
        subtotal_after_free=to_money(subtotal_after_free),
        discount_percentage=discount_percentage,
        discount_amount=to_money(discount_amount),
        final_total=final_total,
        savings=to_money(original_total - final_total),
    )


def resolve_original_total(quote: Quote) -> Decimal:
    """The immutable baseline: stored value if set, else the current total."""
    if quote.original_total is not None:
        return Decimal(quote.original_total)
    return Decimal(quote.total)


def validate_discount_percentage(percentage: Decimal) -> Decimal:
    """Round to the stored precision (two decimals) and check 0 < p <= 100."""
    percentage = to_money(Decimal(percentage))
    if percentage <= 0 or percentage > 100:
        raise ValidationError(
            "Le pourcentage de remise doit être compris entre 0 (exclu) et 100",
            {"percentage": str(percentage)},
        )
    return percentage


def validate_free_months(months: int, contract_months: int) -> int:
    if months <= 0:
        raise ValidationError(
            "Le nombre de mois gratuits doit être positif",
            {"months": months},
        )
    # free months must leave at least one billable month
    if months >= contract_months:
        raise ValidationError(
            "Le nombre de mois gratuits doit être inférieur à la durée du contrat",
            {"months": months, "contract_months": contract_months},
        )
    return months


def _require_comment(comment: Optional[str]) -> str:
    if comment is None or not comment.strip():
        raise ValidationError("Un commentaire justificatif est requis")
    return comment.strip()


def _require_privileged(actor: User) -> None:
    if not actor.is_privileged:
        raise AuthorizationError(
            "Seuls les administrateurs et superviseurs peuvent accorder des avantages",
            {"role": actor.role.value},
        )


class AdjustmentService:
    """Applies discounts and free months to existing quotations."""

    def __init__(self, db: AsyncSession, pdf_service: Optional[PDFService] = None):
        self.db = db
        self.pdf_service = pdf_service

    async def _lock_quote(self, quote_id: int) -> Quote:
        """Load a quotation with an exclusive row lock for the read-modify-write."""
        result = await self.db.execute(
            select(Quote)
            .options(*full_quote_options())
            .where(Quote.id == quote_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        quote = result.scalar_one_or_none()
        if not quote:
            raise NotFoundError("Devis non trouvé", {"quote_id": quote_id})
        if quote.status != QuoteStatus.PENDING:
            raise ValidationError(
                "Les avantages ne peuvent être accordés qu'à un devis en attente",
                {"status": quote.status.value},
            )
        return quote

    async def apply_discount(
        self,
        quote_id: int,
        percentage: Decimal,
        comment: Optional[str],
        actor: User,
    ) -> AdjustmentResult:
        """
        Apply a percentage discount, keeping any free months already granted.
        """
        _require_privileged(actor)
        percentage = validate_discount_percentage(percentage)
        comment = _require_comment(comment)

        quote = await self._lock_quote(quote_id)
        original_total = resolve_original_total(quote)
        breakdown = compute_breakdown(
            original_total,
            quote.contract_months,
            free_months=quote.free_months or 0,
            discount_percentage=percentage,
        )

        quote.original_total = original_total
        quote.discount_percentage = percentage
        quote.total = breakdown.final_total
        quote.has_discount = True
        quote.discount_comment = comment
        quote.discount_granted_by_id = actor.id
        quote.discount_granted_by_name = actor.full_name
        quote.discount_granted_at = utcnow()

        logger.info(
            f"Devis {quote.id}: remise {percentage}% par {actor.full_name}, "
            f"total {original_total} -> {breakdown.final_total}"
        )
        return await self._commit_and_render(quote, breakdown)

    async def apply_free_months(
        self,
        quote_id: int,
        months: int,
        comment: Optional[str],
        actor: User,
    ) -> AdjustmentResult:
        """
        Grant free contract months, keeping any discount already granted.
        """
        _require_privileged(actor)
        comment = _require_comment(comment)

        quote = await self._lock_quote(quote_id)
        validate_free_months(months, quote.contract_months)
        original_total = resolve_original_total(quote)
        breakdown = compute_breakdown(
            original_total,
            quote.contract_months,
            free_months=months,
            discount_percentage=quote.discount_percentage or Decimal("0"),
        )

        quote.original_total = original_total
        quote.free_months = months
        quote.total = breakdown.final_total
        quote.has_free_months = True
        quote.free_months_comment = comment
        quote.free_months_granted_by_id = actor.id
        quote.free_months_granted_by_name = actor.full_name
        quote.free_months_granted_at = utcnow()

        logger.info(
            f"Devis {quote.id}: {months} mois gratuits par {actor.full_name}, "
            f"total {original_total} -> {breakdown.final_total}"
        )
        return await self._commit_and_render(quote, breakdown)

    async def _commit_and_render(
        self,
        quote: Quote,
        breakdown: AdjustmentBreakdown,
    ) -> AdjustmentResult:
        """
        Commit the adjustment, then try to regenerate the PDF.

        The commit releases the row lock before rendering. A rendering
        failure is logged and leaves the adjustment in place, flagged for
        manual regeneration.
        """
        await self.db.commit()

        pdf_regenerated = False
        if self.pdf_service is not None:
            try:
                quote.pdf_path = await self.pdf_service.generate_quote_pdf(quote)
                pdf_regenerated = True
            except Exception as exc:
                logger.warning(
                    f"Devis {quote.id}: régénération du PDF échouée ({exc}), génération manuelle requise"
                )

        quote.pdf_generated = pdf_regenerated
        await self.db.flush()

        return AdjustmentResult(quote=quote, breakdown=breakdown, pdf_regenerated=pdf_regenerated)
