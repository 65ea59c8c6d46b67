"""
Quote service.
Creates quotations atomically from service requests, and handles reads,
state transitions, duplication and PDF issuance.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError, ValidationError
from app.models.client import Client
from app.models.quote import Quote, QuoteItem, QuoteNumberCounter, QuoteStatus
from app.models.user import User
from app.schemas.client import ClientUpdate
from app.schemas.quote import QuoteCreate, ServiceRequest
from app.services.approval import ApprovalDecision, PriceCheck, evaluate_approval
from app.services.catalog import CatalogService
from app.services.client import ClientService
from app.services.line_items import (
    LegacyQuantities,
    LineItemDraft,
    build_breakdown_line,
    build_inferred_line,
)
from app.services.pdf import PDFService
from app.services.quote_state import TransitionResult, apply_transition


logger = logging.getLogger(__name__)


def full_quote_options():
    """Eager loads needed to render a quotation (items with catalog refs, client, owner)."""
    return (
        selectinload(Quote.items).selectinload(QuoteItem.service),
        selectinload(Quote.items).selectinload(QuoteItem.category),
        selectinload(Quote.items).selectinload(QuoteItem.unit_of_measure),
        selectinload(Quote.client),
        selectinload(Quote.owner),
    )


class QuoteService:
    """Service for quotation operations."""

    def __init__(self, db: AsyncSession, pdf_service: Optional[PDFService] = None):
        self.db = db
        self.pdf_service = pdf_service

    async def _generate_quote_number(self) -> str:
        """
        Issue the next quote number for the current year.
        Format: COT-{year}-{sequence}

        The year's counter row is locked until the transaction ends. A year
        without a counter starts after the highest number already issued.
        """
        year = date.today().year
        prefix = f"COT-{year}-"

        result = await self.db.execute(
            select(QuoteNumberCounter)
            .where(QuoteNumberCounter.year == year)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        counter = result.scalar_one_or_none()

        if counter is None:
            numbers = await self.db.scalars(
                select(Quote.quote_number).where(Quote.quote_number.like(f"{prefix}%"))
            )
            issued = [int(n[len(prefix):]) for n in numbers if n[len(prefix):].isdigit()]
            counter = QuoteNumberCounter(year=year, last_value=max(issued, default=0))
            self.db.add(counter)

        counter.last_value += 1
        await self.db.flush()

        return f"{prefix}{str(counter.last_value).zfill(5)}"

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create(self, owner: User, data: QuoteCreate) -> tuple[Quote, ApprovalDecision]:
        """
        Create a quotation and all its line items in one transaction.

        Any failure (unknown service, missing catalog data, persistence
        error on any line) rolls back the header and every line.

        Returns:
            Tuple of (created quotation, approval decision)
        """
        try:
            client = await self._resolve_client(owner, data)

            catalog = CatalogService(self.db)
            drafts: list[LineItemDraft] = []
            checks: list[PriceCheck] = []
            for requested in data.services:
                lines, check = await self._build_lines(catalog, requested, data.contract_months)
                drafts.extend(lines)
                checks.append(check)

            if not drafts:
                raise ValidationError(
                    "Le devis ne contient aucune ligne valide",
                    {"services": [s.service_id for s in data.services]},
                )

            decision = evaluate_approval(checks)
            options = data.pdf_options

            quote = Quote(
                quote_number=await self._generate_quote_number(),
                owner_id=owner.id,
                client_id=client.id,
                status=decision.initial_status,
                contract_months=data.contract_months,
                total=sum((d.subtotal for d in drafts), Decimal("0.00")),
                comment=data.comment,
                observations=data.observations,
                # the approval request document counts as issued
                pdf_generated=decision.requires_approval,
                include_contact_name=options.include_contact_name,
                include_company_name=options.include_company_name,
                include_tax_document=options.include_tax_document,
                include_company_phone=options.include_company_phone,
                include_company_email=options.include_company_email,
                pdf_price_type=options.price_type,
            )
            self.db.add(quote)
            await self.db.flush()

            for draft in drafts:
                await self._add_line_item(quote, draft)
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Devis {quote.quote_number} créé par {owner.full_name}: "
            f"{len(drafts)} lignes, total {quote.total}, statut {quote.status.value}"
        )
        if decision.requires_approval:
            logger.info(
                f"Devis {quote.quote_number}: approbation requise "
                f"(services sous le prix minimum: {[v.service_id for v in decision.violations]})"
            )

        return await self.get_or_404(quote.id), decision

    async def _resolve_client(self, owner: User, data: QuoteCreate) -> Client:
        """Existing client (updated with any inline fields) or a new one."""
        clients = ClientService(self.db)
        if data.client_id is not None:
            client = await clients.get_or_404(data.client_id, owner)
            if data.client is not None:
                inline = data.client.model_dump(exclude_unset=True)
                client = await clients.update(client, ClientUpdate(**inline))
            return client
        return await clients.create(owner, data.client)

    async def _build_lines(
        self,
        catalog: CatalogService,
        requested: ServiceRequest,
        contract_months: int,
    ) -> tuple[list[LineItemDraft], PriceCheck]:
        """Lines of one requested service, plus its price check against the minimum."""
        lines = []
        if requested.categories:
            for breakdown in requested.categories:
                entry = await catalog.lookup(requested.service_id, breakdown.category_id)
                line = build_breakdown_line(
                    entry, breakdown.quantity, requested.final_price, contract_months
                )
                if line is not None:
                    lines.append(line)
        else:
            entry = await catalog.lookup(requested.service_id)
            quantities = LegacyQuantities(
                servers=requested.servers_count,
                equipment=requested.equipment_count,
                capacity_gb=requested.capacity_gb,
                users=requested.users_count,
                sessions=requested.sessions_count,
                time=requested.time_count,
            )
            line = build_inferred_line(entry, quantities, requested.final_price, contract_months)
            logger.debug(f"Service {requested.service_id}: quantité estimée {line.explanation}")
            lines.append(line)

        check = PriceCheck(
            service_id=requested.service_id,
            final_price=requested.final_price,
            minimum_price=entry.minimum_price,
        )
        return lines, check

    async def _add_line_item(self, quote: Quote, draft: LineItemDraft) -> QuoteItem:
        item = QuoteItem(
            quote_id=quote.id,
            service_id=draft.service_id,
            category_id=draft.category_id,
            unit_of_measure_id=draft.unit_of_measure_id,
            quantity=draft.quantity,
            duration_months=draft.duration_months,
            unit_price=draft.unit_price,
            subtotal=draft.subtotal,
        )
        self.db.add(item)
        await self.db.flush()
        return item

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_id(self, quote_id: int, actor: User | None = None) -> Quote | None:
        """
        Get quotation by ID with items, client and owner loaded.

        Salespeople only see their own quotations.
        """
        query = (
            select(Quote)
            .options(*full_quote_options())
            .where(Quote.id == quote_id)
            .execution_options(populate_existing=True)
        )
        if actor is not None and not actor.is_privileged:
            query = query.where(Quote.owner_id == actor.id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_or_404(self, quote_id: int, actor: User | None = None) -> Quote:
        """Get quotation by ID or raise NotFoundError."""
        quote = await self.get_by_id(quote_id, actor)
        if not quote:
            raise NotFoundError("Devis non trouvé", {"quote_id": quote_id})
        return quote

    async def pending_approval(self) -> list[Quote]:
        """Quotations waiting for a supervisor, oldest first."""
        result = await self.db.execute(
            select(Quote)
            .where(Quote.status == QuoteStatus.PENDING_APPROVAL)
            .order_by(Quote.created_at.asc(), Quote.id.asc())
        )
        return list(result.scalars().all())

    async def get_stats(self, actor: User) -> dict:
        """Counts per status, value of effective quotations and approval rate."""
        counts_query = select(Quote.status, func.count(Quote.id)).group_by(Quote.status)
        value_query = select(func.sum(Quote.total)).where(Quote.status == QuoteStatus.EFFECTIVE)
        if not actor.is_privileged:
            counts_query = counts_query.where(Quote.owner_id == actor.id)
            value_query = value_query.where(Quote.owner_id == actor.id)

        counts = {s.value: 0 for s in QuoteStatus}
        for quote_status, count in (await self.db.execute(counts_query)).all():
            counts[QuoteStatus(quote_status).value] = count

        total = sum(counts.values())
        effective_value = (await self.db.execute(value_query)).scalar() or Decimal("0.00")
        approval_rate = round(counts[QuoteStatus.EFFECTIVE.value] * 100 / total) if total else 0

        return {
            "counts": counts,
            "total": total,
            "effective_value": Decimal(effective_value),
            "approval_rate": approval_rate,
        }

    async def list(
        self,
        actor: User,
        skip: int = 0,
        limit: int = 20,
        status: QuoteStatus | None = None,
        search: str | None = None,
    ) -> tuple[list[Quote], int]:
        """List quotations with pagination, status filter and client search."""
        query = select(Quote)
        count_query = select(func.count(Quote.id))

        if not actor.is_privileged:
            query = query.where(Quote.owner_id == actor.id)
            count_query = count_query.where(Quote.owner_id == actor.id)

        if status:
            query = query.where(Quote.status == status)
            count_query = count_query.where(Quote.status == status)

        if search:
            search_filter = f"%{search}%"
            client_ids = select(Client.id).where(
                Client.company_name.ilike(search_filter)
                | Client.contact_name.ilike(search_filter)
            )
            query = query.where(Quote.client_id.in_(client_ids))
            count_query = count_query.where(Quote.client_id.in_(client_ids))

        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query
            .order_by(Quote.created_at.desc(), Quote.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(query)
        quotes = list(result.scalars().all())

        return quotes, total

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    async def change_status(
        self,
        quote_id: int,
        trigger: str,
        actor: User,
        reason: str | None = None,
    ) -> tuple[Quote, TransitionResult]:
        """Lock the quotation row and drive it through one transition."""
        query = (
            select(Quote)
            .where(Quote.id == quote_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        quote = (await self.db.execute(query)).scalar_one_or_none()
        if not quote:
            raise NotFoundError("Devis non trouvé", {"quote_id": quote_id})

        result = apply_transition(quote, trigger, actor, reason)
        await self.db.flush()

        return quote, result

    async def update_observations(
        self,
        quote_id: int,
        observations: str | None,
        actor: User,
    ) -> Quote:
        """Replace the observations; status, totals and adjustments are untouched."""
        quote = await self.get_or_404(quote_id, actor)
        quote.observations = observations or None
        await self.db.flush()

        logger.info(f"Devis {quote.quote_number}: observations mises à jour par {actor.full_name}")
        return quote

    async def duplicate(self, quote_id: int, actor: User) -> Quote:
        """
        Copy a quotation and its lines into a new pending quotation.

        Line quantities, prices and duration are copied verbatim; discounts,
        free months and the PDF flag are reset. Approval is not re-evaluated
        against the current catalog.
        """
        source = await self.get_or_404(quote_id, actor)

        try:
            copy = Quote(
                quote_number=await self._generate_quote_number(),
                owner_id=source.owner_id,
                client_id=source.client_id,
                status=QuoteStatus.PENDING,
                contract_months=source.contract_months,
                total=source.items_total,
                original_total=None,
                comment=f"Copie du devis #{source.id}",
                observations=source.observations,
                discount_percentage=Decimal("0.00"),
                has_discount=False,
                free_months=0,
                has_free_months=False,
                pdf_generated=False,
                include_contact_name=source.include_contact_name,
                include_company_name=source.include_company_name,
                include_tax_document=source.include_tax_document,
                include_company_phone=source.include_company_phone,
                include_company_email=source.include_company_email,
                pdf_price_type=source.pdf_price_type,
            )
            self.db.add(copy)
            await self.db.flush()

            for item in source.items:
                self.db.add(QuoteItem(
                    quote_id=copy.id,
                    service_id=item.service_id,
                    category_id=item.category_id,
                    unit_of_measure_id=item.unit_of_measure_id,
                    quantity=item.quantity,
                    duration_months=item.duration_months,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                ))
            await self.db.flush()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Devis {source.quote_number} dupliqué en {copy.quote_number} par {actor.full_name}")
        return await self.get_or_404(copy.id)

    # ------------------------------------------------------------------
    # PDF
    # ------------------------------------------------------------------

    async def render_pdf(self, quote_id: int, actor: User) -> Quote:
        """Render the quotation document and mark it as issued."""
        quote = await self.get_or_404(quote_id, actor)
        pdf_service = self.pdf_service or PDFService()

        quote.pdf_path = await pdf_service.generate_quote_pdf(quote)
        quote.pdf_generated = True
        await self.db.flush()

        return quote

    async def mark_pdf_generated(self, quote_id: int, actor: User) -> Quote:
        """Record that the document was issued outside the service."""
        quote = await self.get_or_404(quote_id, actor)
        quote.pdf_generated = True
        await self.db.flush()
        return quote
