"""
Redis client for the session revocation list.

Other modules look the client up through this module at call time, so tests
can swap ``redis_client`` for an in-memory double.
"""

import logging

import redis.asyncio as redis
from backend.app.core.config import settings

logger = logging.getLogger("trailsafe.redis")

redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def ping_redis() -> bool:
    """Return True when Redis answers a PING."""
    try:
        return bool(await redis_client.ping())
    except Exception:
        return False


async def close_redis() -> None:
    try:
        await redis_client.aclose()
    except Exception as e:
        logger.warning("Error closing Redis connection", extra={"error": str(e)})
