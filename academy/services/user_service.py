"""User Service - Business Logic Layer"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.security import get_password_hash, verify_password
from academy.models.enums import UserRole
from academy.models.user import User, Teacher
from academy.services.account_provisioner import normalize_email

logger = logging.getLogger(__name__)


class UserService:
    """Service layer for user-related operations"""

    @staticmethod
    async def create_user(
        db: AsyncSession,
        email: str,
        password: str,
        full_name: Optional[str],
        role: UserRole,
        must_reset_password: bool = False,
    ) -> User:
        """
        Create a user; TEACHER users also get their teacher profile.

        Raises:
            ValueError: email already registered
        """
        email = normalize_email(email)
        if await UserService.get_user_by_email(db, email):
            raise ValueError(f"A user with email {email} already exists")

        user = User(
            email=email,
            hashed_password=get_password_hash(password),
            full_name=full_name,
            role=role,
            must_reset_password=must_reset_password,
            is_active=True,
        )
        db.add(user)
        await db.flush()
        if role == UserRole.TEACHER:
            db.add(Teacher(user_id=user.id, is_active=True))
        await db.commit()
        await db.refresh(user)
        return user

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        """
        Get user by email (case-insensitive; emails are stored lower-cased).

        Returns:
            User or None if not found
        """
        result = await db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    @staticmethod
    async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[User]:
        """Return the active user whose password matches, else None."""
        user = await UserService.get_user_by_email(db, email)
        if user is None or not user.is_active:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user
