"""Fixed-window rate limiting backed by Redis."""
import redis.asyncio as redis

from app.core.logging import get_logger
from app.core.redis import get_redis

logger = get_logger(__name__)


class RateLimiter:
    def __init__(self, client: redis.Redis | None):
        self.redis = client

    async def is_limited(self, key: str, limit: int, window_seconds: int) -> bool:
        """Count one hit against ``key``; True once more than ``limit`` hits land in the window.

        Without Redis (not configured or unreachable) nothing is limited.
        """
        if self.redis is None:
            return False
        redis_key = f"ratelimit:{key}"
        try:
            # INCR and EXPIRE go out as one MULTI so a counter never outlives its window.
            # NX keeps the window fixed from the first hit.
            pipe = self.redis.pipeline(transaction=True)
            pipe.incr(redis_key)
            pipe.expire(redis_key, window_seconds, nx=True)
            count, _ = await pipe.execute()
        except redis.RedisError as e:
            logger.warning("rate_limit_backend_error", key=key, error=str(e))
            return False
        if count > limit:
            logger.info("rate_limited", key=key, limit=limit, window_seconds=window_seconds)
            return True
        return False


def get_rate_limiter() -> RateLimiter:
    return RateLimiter(get_redis())
