"""
User service.
Handles staff profiles and staff administration.
"""

import logging
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.exceptions import ConflictError, ValidationError
from app.core.security import get_password_hash, verify_password
from app.models.user import User, UserRole
from app.schemas.user import UserCreate, UserUpdate


logger = logging.getLogger(__name__)


class UserService:
    """Service for user operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: UserCreate) -> User:
        """
        Create a staff account with an explicit role.

        Raises:
            ConflictError: If email already exists
        """
        result = await self.db.execute(
            select(User.id).where(User.email == data.email)
        )
        if result.scalar_one_or_none() is not None:
            raise ConflictError(
                "Un compte avec cet email existe déjà",
                {"email": data.email},
            )

        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            full_name=data.full_name,
            role=data.role,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        logger.info(f"Compte {user.role.value} créé: {user.email}")
        return user

    async def list(self, role: UserRole | None = None) -> list[User]:
        query = select(User).order_by(User.full_name)
        if role:
            query = query.where(User.role == role)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update(self, user: User, data: UserUpdate) -> User:
        """Update own profile."""
        update_data = data.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            setattr(user, field, value)

        await self.db.flush()
        await self.db.refresh(user)

        return user

    async def change_password(
        self,
        user: User,
        current_password: str,
        new_password: str,
    ) -> User:
        """
        Change user password.

        Raises:
            ValidationError: If current password is incorrect
        """
        if not verify_password(current_password, user.hashed_password):
            raise ValidationError("Mot de passe actuel incorrect")

        user.hashed_password = get_password_hash(new_password)

        await self.db.flush()
        await self.db.refresh(user)

        return user
