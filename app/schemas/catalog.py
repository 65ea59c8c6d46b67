"""
Catalog schemas: units of measure, categories and services.
"""

from datetime import datetime
from decimal import Decimal
from pydantic import Field

from app.models.catalog import UnitType
from app.schemas.base import BaseSchema


class UnitOfMeasureCreate(BaseSchema):
    """Schema for creating a unit of measure."""

    name: str = Field(..., min_length=1, max_length=100)
    abbreviation: str = Field(..., min_length=1, max_length=20)
    description: str | None = None
    unit_type: UnitType = UnitType.COUNT


class UnitOfMeasureUpdate(BaseSchema):
    name: str | None = Field(None, min_length=1, max_length=100)
    abbreviation: str | None = Field(None, min_length=1, max_length=20)
    description: str | None = None
    unit_type: UnitType | None = None


class UnitOfMeasureResponse(UnitOfMeasureCreate):
    id: int
    is_active: bool
    created_at: datetime


class CategoryCreate(BaseSchema):
    """Schema for creating a category."""

    name: str = Field(..., min_length=2, max_length=100)
    description: str | None = None
    unit_of_measure_id: int | None = None


class CategoryUpdate(BaseSchema):
    name: str | None = Field(None, min_length=2, max_length=100)
    description: str | None = None
    unit_of_measure_id: int | None = None


class CategoryResponse(CategoryCreate):
    id: int
    is_active: bool
    created_at: datetime


class ServiceCreate(BaseSchema):
    """Schema for creating a sellable service."""

    name: str = Field(..., min_length=2, max_length=255)
    description: str | None = None
    category_id: int | None = None
    minimum_price: Decimal = Field(..., ge=0, decimal_places=2)
    recommended_price: Decimal = Field(..., ge=0, decimal_places=2)


class ServiceUpdate(BaseSchema):
    """Schema for updating a service. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=2, max_length=255)
    description: str | None = None
    category_id: int | None = None
    minimum_price: Decimal | None = Field(None, ge=0, decimal_places=2)
    recommended_price: Decimal | None = Field(None, ge=0, decimal_places=2)


class ServiceResponse(ServiceCreate):
    """Service response schema."""

    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
