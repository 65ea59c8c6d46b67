"""
Client schemas for request/response validation.
"""

from datetime import datetime
from pydantic import EmailStr, Field

from app.schemas.base import BaseSchema


class ClientBase(BaseSchema):
    """Base client schema with common fields."""

    company_name: str = Field(..., min_length=2, max_length=255)
    contact_name: str = Field(..., min_length=2, max_length=255)
    tax_document: str | None = Field(None, max_length=100)
    personal_phone: str | None = Field(None, max_length=50)
    company_phone: str | None = Field(None, max_length=50)
    personal_email: EmailStr | None = None
    company_email: EmailStr | None = None
    notes: str | None = None


class ClientCreate(ClientBase):
    """Schema for creating a new client."""
    pass


class ClientUpdate(BaseSchema):
    """Schema for updating a client."""

    company_name: str | None = Field(None, min_length=2, max_length=255)
    contact_name: str | None = Field(None, min_length=2, max_length=255)
    tax_document: str | None = Field(None, max_length=100)
    personal_phone: str | None = Field(None, max_length=50)
    company_phone: str | None = Field(None, max_length=50)
    personal_email: EmailStr | None = None
    company_email: EmailStr | None = None
    notes: str | None = None


class ClientResponse(ClientBase):
    """Client response schema."""

    id: int
    owner_id: int
    created_at: datetime
    updated_at: datetime


class ClientListResponse(BaseSchema):
    """Paginated client list response."""

    items: list[ClientResponse]
    total: int
    page: int
    per_page: int
    pages: int
