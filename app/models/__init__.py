"""
Database models module.
All SQLAlchemy models are exported from here for easy imports.
"""

from app.models.user import User, UserRole
from app.models.client import Client
from app.models.catalog import UnitOfMeasure, UnitType, Category, Service
from app.models.quote import Quote, QuoteItem, QuoteNumberCounter, QuoteStatus, PdfPriceType


__all__ = [
    "User",
    "UserRole",
    "Client",
    "UnitOfMeasure",
    "UnitType",
    "Category",
    "Service",
    "Quote",
    "QuoteItem",
    "QuoteNumberCounter",
    "QuoteStatus",
    "PdfPriceType",
]
