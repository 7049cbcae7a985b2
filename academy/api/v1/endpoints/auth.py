from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.config import settings
from academy.core import security
from academy.core.rate_limit import limiter
from academy.models.user import User
from academy.schemas.auth import LoginRequest, Token
from academy.schemas.responses import SuccessResponse
from academy.schemas.user import UserResponse
from academy.services.user_service import UserService

router = APIRouter()


@router.post("/login", response_model=SuccessResponse[Token])
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    login_data: LoginRequest,
    db: AsyncSession = Depends(deps.get_db)
) -> Any:
    """
    Unified login for all roles.
    Returns JWTs and sets the httpOnly access-token cookie. Accounts created
    by the system report must_reset_password so the client can force a reset.
    """
    user = await UserService.authenticate_user(db, email=login_data.email, password=login_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )

    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token_data = {"sub": str(user.id), "role": user.role.value}
    access_token = security.create_access_token(data=token_data, expires_delta=expires)
    refresh_token = security.create_refresh_token(data=token_data)

    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=access_token,
        max_age=int(expires.total_seconds()),
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
    )
    return SuccessResponse(
        data=Token(
            access_token=access_token,
            refresh_token=refresh_token,
            role=user.role,
            user_id=str(user.id),
            must_reset_password=user.must_reset_password,
        ),
        message="Login successful"
    )


@router.post("/logout", response_model=SuccessResponse[None])
async def logout(response: Response) -> Any:
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return SuccessResponse(data=None, message="Logged out")


@router.get("/me", response_model=SuccessResponse[UserResponse])
async def read_current_user(current_user: User = Depends(deps.get_current_user)) -> Any:
    return SuccessResponse(data=UserResponse.model_validate(current_user))
