"""
Service catalog models: units of measure, categories and services.
Read-only from the quotation engine's point of view.
"""

from typing import Optional, List
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Text, ForeignKey, Integer, Numeric, Boolean, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import BaseModel


class UnitType(str, Enum):
    """How a unit of measure counts what is sold."""
    COUNT = "count"
    CAPACITY = "capacity"
    TIME = "time"
    USERS = "users"
    SESSIONS = "sessions"


class UnitOfMeasure(BaseModel):
    """
    Unit of measure (servers, GB, hours, seats, sessions...).

    Attributes:
        name: Unique display name
        abbreviation: Short label used on documents
        unit_type: Counting semantics, drives quantity inference
        is_active: Whether the unit can be assigned
    """

    __tablename__ = "units_of_measure"

    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )
    abbreviation: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    unit_type: Mapped[UnitType] = mapped_column(
        SQLEnum(
            UnitType,
            name="unit_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    categories: Mapped[List["Category"]] = relationship(
        "Category",
        back_populates="unit_of_measure",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<UnitOfMeasure(id={self.id}, name='{self.name}', type='{self.unit_type}')>"


class Category(BaseModel):
    """
    Service category. Carries the unit of measure its services are sold in.
    """

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    unit_of_measure_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("units_of_measure.id", ondelete="SET NULL"),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    unit_of_measure: Mapped[Optional["UnitOfMeasure"]] = relationship(
        "UnitOfMeasure",
        back_populates="categories",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"


class Service(BaseModel):
    """
    Sellable service.

    Attributes:
        name: Service name
        category_id: Default category, used when a request gives no breakdown
        minimum_price: Floor price; selling below it requires approval
        recommended_price: Suggested price, reference for quantity inference
        is_active: Whether the service can be quoted
    """

    __tablename__ = "services"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    minimum_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
    )
    recommended_price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    category: Mapped[Optional["Category"]] = relationship(
        "Category",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, name='{self.name}', min={self.minimum_price})>"
