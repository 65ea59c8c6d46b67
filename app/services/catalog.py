"""
Catalog service.
Resolves services to pricing metadata and manages units, categories and services.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import TypeVar
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.exceptions import ConfigurationError, NotFoundError, ValidationError
from app.models.catalog import Category, Service, UnitOfMeasure, UnitType
from app.schemas.catalog import (
    CategoryCreate,
    CategoryUpdate,
    ServiceCreate,
    ServiceUpdate,
    UnitOfMeasureCreate,
    UnitOfMeasureUpdate,
)


logger = logging.getLogger(__name__)

CatalogModel = TypeVar("CatalogModel", UnitOfMeasure, Category, Service)

_LABELS = {
    UnitOfMeasure: "Unité de mesure",
    Category: "Catégorie",
    Service: "Service",
}


@dataclass(frozen=True)
class CatalogEntry:
    """Pricing metadata of a service sold in a given category."""

    service_id: int
    service_name: str
    minimum_price: Decimal
    recommended_price: Decimal
    category_id: int
    category_name: str
    unit_of_measure_id: int
    unit_type: UnitType

    @property
    def reference_price(self) -> Decimal:
        """Price used to infer a quantity from a line amount."""
        if self.recommended_price > 0:
            return self.recommended_price
        return self.minimum_price


class CatalogService:
    """Service for catalog lookups and catalog administration."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    async def get_service(self, service_id: int) -> Service:
        """Get an active service or raise NotFoundError."""
        result = await self.db.execute(
            select(Service).where(
                Service.id == service_id,
                Service.is_active.is_(True),
            )
            .execution_options(populate_existing=True)
        )
        service = result.scalar_one_or_none()
        if not service:
            raise NotFoundError(
                f"Service {service_id} non trouvé",
                {"service_id": service_id},
            )
        return service

    async def get_category(self, category_id: int) -> Category:
        """Get a category or raise NotFoundError."""
        result = await self.db.execute(
            select(Category).where(Category.id == category_id)
            .execution_options(populate_existing=True)
        )
        category = result.scalar_one_or_none()
        if not category:
            raise NotFoundError(
                f"Catégorie {category_id} non trouvée",
                {"category_id": category_id},
            )
        return category

    async def lookup(
        self,
        service_id: int,
        category_id: int | None = None,
    ) -> CatalogEntry:
        """
        Resolve a service (and optionally an explicit category) to its pricing metadata.

        Without an explicit category the service's default category is used;
        if the service has none, the first active category of the catalog is
        picked. The unit of measure comes from the category, or the first
        active unit when the category has none.

        Raises:
            NotFoundError: Unknown service or explicit category
            ConfigurationError: Catalog has no category or no unit at all
        """
        service = await self.get_service(service_id)

        if category_id is not None:
            category = await self.get_category(category_id)
        elif service.category_id is not None:
            category = await self.get_category(service.category_id)
        else:
            category = await self._default_category()
            logger.warning(
                f"Service {service.id} sans catégorie, catégorie par défaut {category.id} utilisée"
            )

        unit = None
        if category.unit_of_measure_id is not None:
            unit = await self.db.get(UnitOfMeasure, category.unit_of_measure_id)
        if unit is None:
            unit = await self._default_unit()
            logger.warning(
                f"Catégorie {category.id} sans unité de mesure, unité par défaut {unit.id} utilisée"
            )

        return CatalogEntry(
            service_id=service.id,
            service_name=service.name,
            minimum_price=Decimal(service.minimum_price),
            recommended_price=Decimal(service.recommended_price),
            category_id=category.id,
            category_name=category.name,
            unit_of_measure_id=unit.id,
            unit_type=unit.unit_type,
        )

    async def _default_category(self) -> Category:
        result = await self.db.execute(
            select(Category)
            .where(Category.is_active.is_(True))
            .order_by(Category.id)
            .limit(1)
        )
        category = result.scalar_one_or_none()
        if category is None:
            raise ConfigurationError(
                "Aucune catégorie active configurée dans le catalogue"
            )
        return category

    async def _default_unit(self) -> UnitOfMeasure:
        result = await self.db.execute(
            select(UnitOfMeasure)
            .where(UnitOfMeasure.is_active.is_(True))
            .order_by(UnitOfMeasure.id)
            .limit(1)
        )
        unit = result.scalar_one_or_none()
        if unit is None:
            raise ConfigurationError(
                "Aucune unité de mesure active configurée dans le catalogue"
            )
        return unit

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    async def _get_any(self, model: type[CatalogModel], entity_id: int) -> CatalogModel:
        """Fetch a catalog row whatever its active flag."""
        entity = await self.db.get(model, entity_id, populate_existing=True)
        if entity is None:
            raise NotFoundError(
                f"{_LABELS[model]} {entity_id} non trouvé(e)",
                {"id": entity_id},
            )
        return entity

    async def _ensure_unit_exists(self, unit_id: int | None) -> None:
        if unit_id is not None:
            await self._get_any(UnitOfMeasure, unit_id)

    async def _apply(self, entity: CatalogModel, update_data: dict) -> CatalogModel:
        for field, value in update_data.items():
            setattr(entity, field, value)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def set_active(
        self,
        model: type[CatalogModel],
        entity_id: int,
        active: bool,
    ) -> CatalogModel:
        """
        Soft-delete or restore a unit, category or service.

        Deactivated services can no longer be quoted; deactivated categories
        and units are skipped by the lookup fallbacks. Existing quotation
        lines keep their references.
        """
        entity = await self._get_any(model, entity_id)
        entity.is_active = active
        await self.db.flush()
        await self.db.refresh(entity)

        logger.info(f"{_LABELS[model]} {entity_id}: {'restauration' if active else 'désactivation'}")
        return entity

    async def create_unit(self, data: UnitOfMeasureCreate) -> UnitOfMeasure:
        unit = UnitOfMeasure(**data.model_dump())
        self.db.add(unit)
        await self.db.flush()
        await self.db.refresh(unit)
        return unit

    async def update_unit(self, unit_id: int, data: UnitOfMeasureUpdate) -> UnitOfMeasure:
        unit = await self._get_any(UnitOfMeasure, unit_id)
        return await self._apply(unit, data.model_dump(exclude_unset=True))

    async def list_units(self, active_only: bool = True) -> list[UnitOfMeasure]:
        query = select(UnitOfMeasure).order_by(UnitOfMeasure.name)
        if active_only:
            query = query.where(UnitOfMeasure.is_active.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_category(self, data: CategoryCreate) -> Category:
        await self._ensure_unit_exists(data.unit_of_measure_id)

        category = Category(**data.model_dump())
        self.db.add(category)
        await self.db.flush()
        return await self.get_category(category.id)

    async def update_category(self, category_id: int, data: CategoryUpdate) -> Category:
        category = await self._get_any(Category, category_id)
        update_data = data.model_dump(exclude_unset=True)
        await self._ensure_unit_exists(update_data.get("unit_of_measure_id"))
        return await self._apply(category, update_data)

    async def list_categories(self, active_only: bool = True) -> list[Category]:
        query = select(Category).order_by(Category.name)
        if active_only:
            query = query.where(Category.is_active.is_(True))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_service(self, data: ServiceCreate) -> Service:
        _check_price_order(data.minimum_price, data.recommended_price)
        if data.category_id is not None:
            await self.get_category(data.category_id)

        service = Service(**data.model_dump())
        self.db.add(service)
        await self.db.flush()
        return await self.get_service(service.id)

    async def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        """Partial update; the price rule is checked on the resulting pair."""
        service = await self._get_any(Service, service_id)
        update_data = data.model_dump(exclude_unset=True)

        _check_price_order(
            update_data.get("minimum_price", service.minimum_price),
            update_data.get("recommended_price", service.recommended_price),
        )
        if update_data.get("category_id") is not None:
            await self.get_category(update_data["category_id"])

        return await self._apply(service, update_data)

    async def list_services(
        self,
        category_id: int | None = None,
        search: str | None = None,
        active_only: bool = True,
    ) -> list[Service]:
        query = select(Service)
        if active_only:
            query = query.where(Service.is_active.is_(True))
        if category_id:
            query = query.where(Service.category_id == category_id)
        if search:
            query = query.where(Service.name.ilike(f"%{search}%"))
        result = await self.db.execute(query.order_by(Service.name))
        return list(result.scalars().all())


def _check_price_order(minimum_price: Decimal, recommended_price: Decimal) -> None:
    if Decimal(recommended_price) < Decimal(minimum_price):
        raise ValidationError(
            "Le prix recommandé doit être supérieur ou égal au prix minimum",
            {"minimum_price": str(minimum_price), "recommended_price": str(recommended_price)},
        )
