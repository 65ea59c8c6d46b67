"""
Authentication endpoints.
Login, salesperson registration, refresh token.
"""

from fastapi import APIRouter, status

from app.api.deps import DbSession, CurrentUser
from app.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    RefreshTokenRequest,
    StaffPermissions,
    StaffSession,
    StaffProfile,
)
from app.schemas.user import UserResponse
from app.services.auth import AuthService


router = APIRouter()


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Inscription",
    description="Créer un compte commercial",
)
async def register(
    data: RegisterRequest,
    db: DbSession,
) -> UserResponse:
    """Inscription d'un nouveau commercial."""
    service = AuthService(db)
    user = await service.register(data)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=StaffSession,
    summary="Connexion",
    description="Se connecter avec email et mot de passe; renvoie les tokens, le rôle et les permissions",
)
async def login(
    data: LoginRequest,
    db: DbSession,
) -> StaffSession:
    """Connexion et obtention des tokens JWT."""
    service = AuthService(db)
    return await service.login(data)


@router.post(
    "/refresh",
    response_model=StaffSession,
    summary="Rafraîchir le token",
    description="Obtenir de nouveaux tokens avec le refresh token",
)
async def refresh_token(
    data: RefreshTokenRequest,
    db: DbSession,
) -> StaffSession:
    """Rafraîchir les tokens JWT."""
    service = AuthService(db)
    return await service.refresh_token(data.refresh_token)


@router.get(
    "/me",
    response_model=StaffProfile,
    summary="Profil actuel",
    description="Obtenir le profil de l'utilisateur connecté et ses permissions",
)
async def get_current_user(
    current_user: CurrentUser,
) -> StaffProfile:
    """Récupérer le profil de l'utilisateur connecté."""
    profile = UserResponse.model_validate(current_user)
    return StaffProfile(
        **profile.model_dump(),
        permissions=StaffPermissions.for_role(current_user.role),
    )
