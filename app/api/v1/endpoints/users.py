"""
Staff endpoints.
Own profile, password change, and staff administration.
"""

from fastapi import APIRouter, Query, status

from app.api.deps import DbSession, CurrentUser, AdminUser, PrivilegedUser
from app.models.user import UserRole
from app.schemas.user import UserCreate, UserUpdate, UserResponse, PasswordChangeRequest
from app.schemas.base import MessageResponse
from app.services.user import UserService


router = APIRouter()


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Mon profil",
    description="Obtenir mon profil utilisateur",
)
async def get_my_profile(
    current_user: CurrentUser,
) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.patch(
    "/me",
    response_model=UserResponse,
    summary="Mettre à jour mon profil",
)
async def update_my_profile(
    data: UserUpdate,
    current_user: CurrentUser,
    db: DbSession,
) -> UserResponse:
    service = UserService(db)
    user = await service.update(current_user, data)
    return UserResponse.model_validate(user)


@router.post(
    "/me/change-password",
    response_model=MessageResponse,
    summary="Changer le mot de passe",
)
async def change_password(
    data: PasswordChangeRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> MessageResponse:
    service = UserService(db)
    await service.change_password(
        current_user,
        data.current_password,
        data.new_password,
    )
    return MessageResponse(message="Mot de passe modifié avec succès")


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un membre du personnel",
    description="Créer un compte avec un rôle explicite (administrateur uniquement)",
)
async def create_user(
    data: UserCreate,
    _: AdminUser,
    db: DbSession,
) -> UserResponse:
    service = UserService(db)
    user = await service.create(data)
    return UserResponse.model_validate(user)


@router.get(
    "",
    response_model=list[UserResponse],
    summary="Lister le personnel",
)
async def list_users(
    _: PrivilegedUser,
    db: DbSession,
    role: UserRole | None = Query(None, description="Filtrer par rôle"),
) -> list[UserResponse]:
    service = UserService(db)
    users = await service.list(role=role)
    return [UserResponse.model_validate(u) for u in users]
