"""API Dependencies"""

from typing import AsyncGenerator, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from academy.config import settings
from academy.core.exceptions import ForbiddenError
from academy.core.security import decode_token
from academy.database import Database
from academy.models.enums import UserRole
from academy.models.user import User
from academy.services.email_service import EmailNotifier
from academy.services.payment_verification_service import PaymentVerificationService
from academy.services.user_service import UserService

# Bearer is optional: browsers authenticate with the access-token cookie
security = HTTPBearer(auto_error=False)


def get_database(request: Request) -> Database:
    """Database created by the application lifespan"""
    return request.app.state.database


def get_notifier(request: Request) -> EmailNotifier:
    return request.app.state.notifier


async def get_db(database: Database = Depends(get_database)) -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session; commits on success, rolls back on error.

    Example:
        ```python
        @router.get("/students")
        async def list_students(db: AsyncSession = Depends(get_db)):
            ...
        ```
    """
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    database: Database = Depends(get_database),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    Resolve the caller from the access-token cookie or a Bearer header.

    Uses its own short-lived session so write endpoints can open a clean
    unit of work afterwards.

    Raises:
        HTTPException: 401 if the token is missing or invalid, 400 if inactive
    """
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token and credentials is not None:
        token = credentials.credentials
    if not token:
        raise _credentials_error("Not authenticated")

    payload = decode_token(token)
    if not payload:
        raise _credentials_error("Could not validate credentials")
    if payload.get("type") != "access":
        raise _credentials_error("Invalid token type")

    try:
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        raise _credentials_error("Invalid user ID")

    async with database.session() as session:
        user = await UserService.get_user_by_id(session, user_id)

    if not user:
        raise _credentials_error("User not found")
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )
    return user


def require_roles(*roles: UserRole):
    """Dependency factory: the caller must hold one of ``roles``."""

    async def _checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise ForbiddenError("Forbidden: Insufficient permissions")
        return current_user

    return _checker


require_admin = require_roles(UserRole.ADMIN)
require_student = require_roles(UserRole.STUDENT)


def get_payment_verification_service(
    database: Database = Depends(get_database),
    notifier: EmailNotifier = Depends(get_notifier),
) -> PaymentVerificationService:
    return PaymentVerificationService(database=database, notifier=notifier)
