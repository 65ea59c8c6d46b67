"""
API v1 router - aggregates all endpoint routers.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth,
    users,
    clients,
    catalog,
    quotes,
)

api_router = APIRouter()

api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentification"],
)

api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Personnel"],
)

api_router.include_router(
    clients.router,
    prefix="/clients",
    tags=["Clients"],
)

api_router.include_router(
    catalog.router,
    prefix="/catalog",
    tags=["Catalogue"],
)

api_router.include_router(
    quotes.router,
    prefix="/quotes",
    tags=["Devis"],
)
