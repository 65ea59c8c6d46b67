"""
Authentication service.
Handles salesperson self-registration, login, and token refresh.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from fastapi import HTTPException, status

from app.core.config import settings
from app.core.exceptions import ConflictError
from app.models.user import User, UserRole
from app.schemas.auth import (
    RegisterRequest,
    LoginRequest,
    StaffPermissions,
    StaffSession,
)
from app.schemas.user import UserResponse
from app.core.security import (
    get_password_hash,
    verify_password,
    create_token_pair,
    decode_token,
)


logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(self, data: RegisterRequest) -> User:
        """
        Register a new salesperson account.

        Raises:
            ConflictError: If email already exists
        """
        if await self.get_user_by_email(data.email):
            raise ConflictError(
                "Un compte avec cet email existe déjà",
                {"email": data.email},
            )

        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            full_name=data.full_name,
            role=UserRole.SALESPERSON,
        )

        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        logger.info(f"Nouveau compte commercial: {user.email}")
        return user

    async def login(self, data: LoginRequest) -> StaffSession:
        """
        Authenticate a staff member and open a session.

        Raises:
            HTTPException: If credentials are invalid or the account is disabled
        """
        user = await self.get_user_by_email(data.email)

        if not user or not verify_password(data.password, user.hashed_password):
            logger.warning(f"Échec de connexion pour {data.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Email ou mot de passe incorrect",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Compte désactivé",
            )

        logger.info(f"Connexion de {user.email} ({user.role.value})")
        return self._open_session(user)

    async def refresh_token(self, refresh_token: str) -> StaffSession:
        """
        Open a fresh session from a refresh token.

        The role and permissions are re-read from the database, so a role
        change made by an admin shows up on the next refresh.

        Raises:
            HTTPException: If refresh token is invalid
        """
        token_data = decode_token(refresh_token)

        if token_data is None or token_data.token_type != "refresh":
            logger.warning("Token de rafraîchissement invalide")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token de rafraîchissement invalide",
            )

        user = await self.db.get(User, token_data.user_id)

        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Utilisateur non trouvé",
            )

        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Compte désactivé",
            )

        return self._open_session(user)

    def _open_session(self, user: User) -> StaffSession:
        tokens = create_token_pair(user.id, user.email, user.role.value)
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
        )
        return StaffSession(
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_type=tokens.token_type,
            expires_at=expires_at,
            user=UserResponse.model_validate(user),
            permissions=StaffPermissions.for_role(user.role),
        )

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by email."""
        result = await self.db.execute(
            select(User).where(User.email == email)
        )
        return result.scalar_one_or_none()
