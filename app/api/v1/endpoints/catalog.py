"""
Catalog endpoints.
Units of measure, categories and services. Writes are reserved to administrators.
"""

from fastapi import APIRouter, Query, status

from app.api.deps import DbSession, CurrentUser, AdminUser
from app.models.catalog import Category, Service, UnitOfMeasure
from app.schemas.catalog import (
    UnitOfMeasureCreate,
    UnitOfMeasureUpdate,
    UnitOfMeasureResponse,
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    ServiceCreate,
    ServiceUpdate,
    ServiceResponse,
)
from app.services.catalog import CatalogService


router = APIRouter()


# ---------------------------------------------------------------------------
# Units of measure
# ---------------------------------------------------------------------------

@router.get(
    "/units",
    response_model=list[UnitOfMeasureResponse],
    summary="Lister les unités de mesure",
)
async def list_units(
    _: CurrentUser,
    db: DbSession,
    include_inactive: bool = Query(False, description="Inclure les unités désactivées"),
) -> list[UnitOfMeasureResponse]:
    service = CatalogService(db)
    units = await service.list_units(active_only=not include_inactive)
    return [UnitOfMeasureResponse.model_validate(u) for u in units]


@router.post(
    "/units",
    response_model=UnitOfMeasureResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une unité de mesure",
)
async def create_unit(
    data: UnitOfMeasureCreate,
    _: AdminUser,
    db: DbSession,
) -> UnitOfMeasureResponse:
    service = CatalogService(db)
    unit = await service.create_unit(data)
    return UnitOfMeasureResponse.model_validate(unit)


@router.put(
    "/units/{unit_id}",
    response_model=UnitOfMeasureResponse,
    summary="Modifier une unité de mesure",
)
async def update_unit(
    unit_id: int,
    data: UnitOfMeasureUpdate,
    _: AdminUser,
    db: DbSession,
) -> UnitOfMeasureResponse:
    service = CatalogService(db)
    unit = await service.update_unit(unit_id, data)
    return UnitOfMeasureResponse.model_validate(unit)


@router.delete(
    "/units/{unit_id}",
    response_model=UnitOfMeasureResponse,
    summary="Désactiver une unité de mesure",
    description="Désactivation (soft delete), réversible via restore",
)
async def deactivate_unit(
    unit_id: int,
    _: AdminUser,
    db: DbSession,
) -> UnitOfMeasureResponse:
    service = CatalogService(db)
    unit = await service.set_active(UnitOfMeasure, unit_id, active=False)
    return UnitOfMeasureResponse.model_validate(unit)


@router.patch(
    "/units/{unit_id}/restore",
    response_model=UnitOfMeasureResponse,
    summary="Restaurer une unité de mesure",
)
async def restore_unit(
    unit_id: int,
    _: AdminUser,
    db: DbSession,
) -> UnitOfMeasureResponse:
    service = CatalogService(db)
    unit = await service.set_active(UnitOfMeasure, unit_id, active=True)
    return UnitOfMeasureResponse.model_validate(unit)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

@router.get(
    "/categories",
    response_model=list[CategoryResponse],
    summary="Lister les catégories",
)
async def list_categories(
    _: CurrentUser,
    db: DbSession,
    include_inactive: bool = Query(False, description="Inclure les catégories désactivées"),
) -> list[CategoryResponse]:
    service = CatalogService(db)
    categories = await service.list_categories(active_only=not include_inactive)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une catégorie",
)
async def create_category(
    data: CategoryCreate,
    _: AdminUser,
    db: DbSession,
) -> CategoryResponse:
    service = CatalogService(db)
    category = await service.create_category(data)
    return CategoryResponse.model_validate(category)


@router.put(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    summary="Modifier une catégorie",
)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    _: AdminUser,
    db: DbSession,
) -> CategoryResponse:
    service = CatalogService(db)
    category = await service.update_category(category_id, data)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    summary="Désactiver une catégorie",
    description="Désactivation (soft delete), réversible via restore",
)
async def deactivate_category(
    category_id: int,
    _: AdminUser,
    db: DbSession,
) -> CategoryResponse:
    service = CatalogService(db)
    category = await service.set_active(Category, category_id, active=False)
    return CategoryResponse.model_validate(category)


@router.patch(
    "/categories/{category_id}/restore",
    response_model=CategoryResponse,
    summary="Restaurer une catégorie",
)
async def restore_category(
    category_id: int,
    _: AdminUser,
    db: DbSession,
) -> CategoryResponse:
    service = CatalogService(db)
    category = await service.set_active(Category, category_id, active=True)
    return CategoryResponse.model_validate(category)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

@router.get(
    "/services",
    response_model=list[ServiceResponse],
    summary="Lister les services",
    description="Services actifs, filtrables par catégorie et par nom",
)
async def list_services(
    _: CurrentUser,
    db: DbSession,
    category_id: int | None = Query(None, description="Filtrer par catégorie"),
    search: str | None = Query(None, description="Rechercher par nom"),
    include_inactive: bool = Query(False, description="Inclure les services désactivés"),
) -> list[ServiceResponse]:
    service = CatalogService(db)
    services = await service.list_services(
        category_id=category_id,
        search=search,
        active_only=not include_inactive,
    )
    return [ServiceResponse.model_validate(s) for s in services]


@router.post(
    "/services",
    response_model=ServiceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un service",
    description="Le prix recommandé doit être supérieur ou égal au prix minimum",
)
async def create_service(
    data: ServiceCreate,
    _: AdminUser,
    db: DbSession,
) -> ServiceResponse:
    service = CatalogService(db)
    created = await service.create_service(data)
    return ServiceResponse.model_validate(created)


@router.put(
    "/services/{service_id}",
    response_model=ServiceResponse,
    summary="Modifier un service",
    description="Mise à jour partielle; les prix restent ordonnés (recommandé >= minimum)",
)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    _: AdminUser,
    db: DbSession,
) -> ServiceResponse:
    service = CatalogService(db)
    updated = await service.update_service(service_id, data)
    return ServiceResponse.model_validate(updated)


@router.delete(
    "/services/{service_id}",
    response_model=ServiceResponse,
    summary="Désactiver un service",
    description="Un service désactivé ne peut plus être ajouté à un devis",
)
async def deactivate_service(
    service_id: int,
    _: AdminUser,
    db: DbSession,
) -> ServiceResponse:
    service = CatalogService(db)
    deactivated = await service.set_active(Service, service_id, active=False)
    return ServiceResponse.model_validate(deactivated)


@router.patch(
    "/services/{service_id}/restore",
    response_model=ServiceResponse,
    summary="Restaurer un service",
)
async def restore_service(
    service_id: int,
    _: AdminUser,
    db: DbSession,
) -> ServiceResponse:
    service = CatalogService(db)
    restored = await service.set_active(Service, service_id, active=True)
    return ServiceResponse.model_validate(restored)
