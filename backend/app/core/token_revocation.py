"""
Token Revocation using Redis.

Signing out blacklists the presented JWT until it would have expired anyway.
Lookups fail open: a Redis outage never locks users out of an SOS.
"""

import logging

from backend.app.core import redis_client as redis_module
from backend.app.core.config import settings

logger = logging.getLogger("trailsafe.auth")

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


async def revoke_token(token: str, user_id: int) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        user_id: User ID who owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        ttl_seconds = settings.access_token_expire_minutes * 60
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis_module.redis_client.set(key, str(user_id), ex=ttl_seconds)
        return True
    except Exception as e:
        logger.error("Error revoking token", extra={"user_id": user_id, "error": str(e)})
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    Returns False when Redis cannot be reached.
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await redis_module.redis_client.exists(key)
        return exists > 0
    except Exception as e:
        logger.warning("Error checking token revocation", extra={"error": str(e)})
        return False
