"""
Quote (Devis) endpoints.
Creation, reads, workflow transitions, discounts, free months, duplication and PDF.
"""

from fastapi import APIRouter, Query, status
from fastapi.responses import FileResponse

from app.api.deps import DbSession, CurrentUser, PrivilegedUser
from app.schemas.quote import (
    QuoteCreate,
    QuoteResponse,
    QuoteCreateResponse,
    QuoteSummary,
    QuoteListResponse,
    QuoteStats,
    StatusChangeRequest,
    TransitionResponse,
    AuditBlock,
    ObservationsUpdate,
    DiscountRequest,
    FreeMonthsRequest,
    AdjustmentResponse,
    BreakdownResponse,
)
from app.models.quote import QuoteStatus
from app.services.adjustments import AdjustmentResult, AdjustmentService
from app.services.quote import QuoteService
from app.services.pdf import PDFService


router = APIRouter()


def _adjustment_response(result: AdjustmentResult, message: str) -> AdjustmentResponse:
    return AdjustmentResponse(
        quote_id=result.quote.id,
        total=result.quote.total,
        breakdown=BreakdownResponse.model_validate(result.breakdown),
        pdf_regenerated=result.pdf_regenerated,
        pdf_status=result.pdf_status,
        message=message,
    )


@router.post(
    "",
    response_model=QuoteCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un devis",
    description="Créer un devis et ses lignes en une seule transaction",
)
async def create_quote(
    data: QuoteCreate,
    current_user: CurrentUser,
    db: DbSession,
) -> QuoteCreateResponse:
    """Créer un nouveau devis."""
    service = QuoteService(db)
    quote, decision = await service.create(current_user, data)

    if decision.requires_approval:
        message = "Devis créé, en attente d'approbation (prix inférieur au minimum)"
    else:
        message = "Devis créé avec succès"

    return QuoteCreateResponse(
        quote=QuoteResponse.model_validate(quote),
        requires_approval=decision.requires_approval,
        message=message,
    )


@router.get(
    "",
    response_model=QuoteListResponse,
    summary="Lister les devis",
    description="Obtenir la liste paginée des devis",
)
async def list_quotes(
    current_user: CurrentUser,
    db: DbSession,
    page: int = Query(1, ge=1, description="Numéro de page"),
    per_page: int = Query(20, ge=1, le=100, description="Éléments par page"),
    status: QuoteStatus | None = Query(None, description="Filtrer par statut"),
    search: str | None = Query(None, description="Rechercher par société ou contact"),
) -> QuoteListResponse:
    """Lister les devis visibles par l'utilisateur."""
    service = QuoteService(db)
    skip = (page - 1) * per_page

    quotes, total = await service.list(
        actor=current_user,
        skip=skip,
        limit=per_page,
        status=status,
        search=search,
    )

    pages = (total + per_page - 1) // per_page if per_page > 0 else 0

    return QuoteListResponse(
        items=[QuoteSummary.model_validate(q) for q in quotes],
        total=total,
        page=page,
        per_page=per_page,
        pages=pages,
    )


@router.get(
    "/stats",
    response_model=QuoteStats,
    summary="Statistiques des devis",
)
async def get_quote_stats(
    current_user: CurrentUser,
    db: DbSession,
) -> QuoteStats:
    service = QuoteService(db)
    return QuoteStats(**await service.get_stats(current_user))


@router.get(
    "/pending-approval",
    response_model=list[QuoteSummary],
    summary="Devis en attente d'approbation",
    description="File d'approbation, du plus ancien au plus récent",
)
async def list_pending_approval(
    _: PrivilegedUser,
    db: DbSession,
) -> list[QuoteSummary]:
    service = QuoteService(db)
    quotes = await service.pending_approval()
    return [QuoteSummary.model_validate(q) for q in quotes]


@router.get(
    "/{quote_id}",
    response_model=QuoteResponse,
    summary="Détails d'un devis",
)
async def get_quote(
    quote_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> QuoteResponse:
    service = QuoteService(db)
    quote = await service.get_or_404(quote_id, current_user)
    return QuoteResponse.model_validate(quote)


@router.patch(
    "/{quote_id}/status",
    response_model=TransitionResponse,
    summary="Changer le statut",
    description="Déclencheurs: approve, reject, effective, force_reject (administrateur ou superviseur)",
)
async def change_quote_status(
    quote_id: int,
    data: StatusChangeRequest,
    current_user: PrivilegedUser,
    db: DbSession,
) -> TransitionResponse:
    """Appliquer une transition d'état au devis."""
    service = QuoteService(db)
    quote, result = await service.change_status(
        quote_id,
        data.trigger,
        current_user,
        reason=data.reason,
    )
    return TransitionResponse(
        quote_id=quote.id,
        previous_status=result.previous_status,
        new_status=result.new_status,
        changed=result.changed,
        audit=AuditBlock.model_validate(quote),
    )


@router.patch(
    "/{quote_id}/observations",
    response_model=QuoteResponse,
    summary="Modifier les observations",
    description="Remplacer les observations du devis (administrateur ou superviseur)",
)
async def update_quote_observations(
    quote_id: int,
    data: ObservationsUpdate,
    current_user: PrivilegedUser,
    db: DbSession,
) -> QuoteResponse:
    service = QuoteService(db)
    quote = await service.update_observations(quote_id, data.observations, current_user)
    return QuoteResponse.model_validate(quote)


@router.post(
    "/{quote_id}/discount",
    response_model=AdjustmentResponse,
    summary="Appliquer une remise",
    description="Remise en pourcentage sur un devis en attente (administrateur ou superviseur)",
)
async def apply_discount(
    quote_id: int,
    data: DiscountRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> AdjustmentResponse:
    service = AdjustmentService(db, PDFService())
    result = await service.apply_discount(
        quote_id,
        data.percentage,
        data.comment,
        current_user,
    )
    return _adjustment_response(
        result,
        f"Remise de {result.breakdown.discount_percentage}% appliquée",
    )


@router.post(
    "/{quote_id}/free-months",
    response_model=AdjustmentResponse,
    summary="Accorder des mois gratuits",
    description="Mois gratuits sur un devis en attente (administrateur ou superviseur)",
)
async def apply_free_months(
    quote_id: int,
    data: FreeMonthsRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> AdjustmentResponse:
    service = AdjustmentService(db, PDFService())
    result = await service.apply_free_months(
        quote_id,
        data.months,
        data.comment,
        current_user,
    )
    return _adjustment_response(
        result,
        f"{result.breakdown.free_months} mois gratuits accordés",
    )


@router.post(
    "/{quote_id}/duplicate",
    response_model=QuoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Dupliquer un devis",
    description="Copie les lignes dans un nouveau devis en attente, sans remise ni mois gratuits",
)
async def duplicate_quote(
    quote_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> QuoteResponse:
    service = QuoteService(db)
    quote = await service.duplicate(quote_id, current_user)
    return QuoteResponse.model_validate(quote)


@router.get(
    "/{quote_id}/pdf",
    summary="Télécharger le PDF",
    description="Générer et télécharger le PDF du devis",
    response_class=FileResponse,
)
async def download_quote_pdf(
    quote_id: int,
    current_user: CurrentUser,
    db: DbSession,
):
    """Générer et télécharger le PDF du devis."""
    service = QuoteService(db, PDFService())
    quote = await service.render_pdf(quote_id, current_user)

    return FileResponse(
        path=quote.pdf_path,
        filename=f"cotizacion_{quote.quote_number}.pdf",
        media_type="application/pdf",
    )


@router.post(
    "/{quote_id}/pdf-generated",
    response_model=QuoteResponse,
    summary="Marquer le PDF comme généré",
)
async def mark_pdf_generated(
    quote_id: int,
    current_user: CurrentUser,
    db: DbSession,
) -> QuoteResponse:
    service = QuoteService(db)
    quote = await service.mark_pdf_generated(quote_id, current_user)
    return QuoteResponse.model_validate(quote)
