"""
Pydantic schemas for request/response validation.
"""

from app.schemas.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    PasswordChangeRequest,
)
from app.schemas.client import (
    ClientCreate,
    ClientUpdate,
    ClientResponse,
)
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
from app.schemas.quote import (
    QuoteCreate,
    QuoteResponse,
    QuoteCreateResponse,
    StatusChangeRequest,
    TransitionResponse,
    ObservationsUpdate,
    DiscountRequest,
    FreeMonthsRequest,
    AdjustmentResponse,
)
from app.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    RefreshTokenRequest,
    StaffPermissions,
    StaffSession,
    StaffProfile,
)

__all__ = [
    # User
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "PasswordChangeRequest",
    # Client
    "ClientCreate",
    "ClientUpdate",
    "ClientResponse",
    # Catalog
    "UnitOfMeasureCreate",
    "UnitOfMeasureUpdate",
    "UnitOfMeasureResponse",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "ServiceCreate",
    "ServiceUpdate",
    "ServiceResponse",
    # Quote
    "QuoteCreate",
    "QuoteResponse",
    "QuoteCreateResponse",
    "StatusChangeRequest",
    "TransitionResponse",
    "ObservationsUpdate",
    "DiscountRequest",
    "FreeMonthsRequest",
    "AdjustmentResponse",
    # Auth
    "LoginRequest",
    "RegisterRequest",
    "RefreshTokenRequest",
    "StaffPermissions",
    "StaffSession",
    "StaffProfile",
]
