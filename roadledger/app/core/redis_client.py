"""
Redis client initialization and connection management.

Redis only holds the per-collection version counters that polling clients
compare to decide whether a full re-sync is needed. Losing it never blocks
a write; see services.change_notifier.
"""

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from roadledger.app.core.config import settings

logger = logging.getLogger("roadledger.redis")

redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    """FastAPI dependency; tests override it with an in-memory double."""
    return redis_client


async def ping_redis() -> bool:
    """
    Test Redis connection.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        return bool(await redis_client.ping())
    except (RedisError, OSError) as e:
        logger.warning("Redis ping failed: %s", e)
        return False


async def close_redis() -> None:
    await redis_client.aclose()
