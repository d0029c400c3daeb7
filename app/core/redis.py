"""Redis connection management (rate limiter storage)."""
import redis.asyncio as redis

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

_redis_client: redis.Redis | None = None


async def init_redis() -> redis.Redis | None:
    """Connect to Redis. Leaves the client unset when the server is unreachable."""
    global _redis_client

    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except redis.ConnectionError as e:
        logger.warning("redis_connection_failed", error=str(e))
        await client.aclose()
        _redis_client = None
        return None
    logger.info("redis_connected")
    _redis_client = client
    return client


async def shutdown_redis() -> None:
    global _redis_client

    if _redis_client is not None:
        await _redis_client.aclose()
        logger.info("redis_disconnected")
        _redis_client = None


def get_redis() -> redis.Redis | None:
    return _redis_client
