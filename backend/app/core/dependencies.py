"""
Authentication dependencies for FastAPI.

``get_current_user`` is the access gate in front of every contact and trip
route: no resolvable identity, no further work.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backend.app.core.exceptions import AuthenticationError, InactiveUserError, TokenRevokedError
from backend.app.core.jwt import decode_access_token
from backend.app.core.token_revocation import is_token_revoked
from backend.app.db.session import get_db
from backend.app.models.user import User

logger = logging.getLogger("trailsafe.auth")

# Missing credentials are reported by us as 401, not by HTTPBearer as 403
security = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    Resolve the caller's identity from a bearer token.

    Checks, in order:
    1. JWT signature and expiry
    2. Token payload carries a user id
    3. Token has not been revoked (signed out)
    4. User still exists and is active

    Returns:
        Identity dict with ``user_id``, ``sub``, ``email`` and ``name``

    Raises:
        AuthenticationError / TokenRevokedError: 401
        InactiveUserError: 403
    """
    payload = decode_access_token(token)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    if await is_token_revoked(token):
        raise TokenRevokedError()

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        logger.warning("Token for unknown user", extra={"user_id": user_id})
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise InactiveUserError()

    return {
        "user_id": user.id,
        "sub": payload.get("sub"),
        "email": user.email,
        "name": user.name,
    }
