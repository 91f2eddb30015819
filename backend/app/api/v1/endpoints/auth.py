"""
Authentication API endpoints.

Register, login, profile and sign-out for the mobile client.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from starlette.concurrency import run_in_threadpool

from backend.app.core.dependencies import get_bearer_token, get_current_user
from backend.app.core.exceptions import AuthenticationError, InactiveUserError, ValidationFailedError
from backend.app.core.jwt import create_access_token
from backend.app.core.security import get_password_hash, verify_password
from backend.app.core.token_revocation import revoke_token
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.auth import UserRegister, UserLogin, TokenResponse, UserResponse
from backend.app.schemas.common import SuccessResponse

logger = logging.getLogger("trailsafe.auth")

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_response(user: User) -> TokenResponse:
    access_token = create_access_token(data={"sub": user.email, "user_id": user.id})
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user_id=user.id,
        email=user.email,
        name=user.name,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a new user and return a token."""
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise ValidationFailedError("Email already registered")

    new_user = User(
        email=email,
        name=user_data.name,
        hashed_password=await run_in_threadpool(get_password_hash, user_data.password),
        is_active=True,
    )
    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    logger.info("User registered", extra={"user_id": new_user.id})
    return _token_response(new_user)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not await run_in_threadpool(verify_password, credentials.password, user.hashed_password):
        logger.warning("Login failed", extra={"email": credentials.email})
        raise AuthenticationError("Invalid credentials")

    if not user.is_active:
        raise InactiveUserError("Inactive user account")

    logger.info("Login succeeded", extra={"user_id": user.id})
    return _token_response(user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Current authenticated user's profile."""
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    return UserResponse.model_validate(result.scalar_one())


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    token: str = Depends(get_bearer_token),
    current_user: dict = Depends(get_current_user),
):
    """Sign out: the presented token stops working immediately."""
    revoked = await revoke_token(token, current_user["user_id"])
    logger.info("User signed out", extra={"user_id": current_user["user_id"], "revoked": revoked})
    return SuccessResponse(success=revoked)
