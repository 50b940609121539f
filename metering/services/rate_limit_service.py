"""
Per-tier hourly rate ceilings using a Redis sliding window
"""
from dataclasses import dataclass
from typing import Optional
import logging
import time
import uuid

from metering.core.config import settings
from metering.schemas.tier import Tier

logger = logging.getLogger(__name__)


@dataclass
class RateLimitResult:
    """Outcome of a rate ceiling check"""
    allowed: bool
    remaining: Optional[int]
    reset_at: int
    limit: Optional[int]


class RateLimitService:
    """
    Sliding-window request counter per caller

    Each request is a member of a sorted set scored by its timestamp; members
    older than the window are trimmed before counting. When Redis is not
    reachable every request is allowed.
    """

    def __init__(self, redis_client=None, window_seconds: int = None):
        self.redis_client = redis_client
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS

    @classmethod
    def from_settings(cls) -> "RateLimitService":
        """Create a limiter connected to the configured Redis, or disabled"""
        try:
            import redis
            client = redis.Redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                decode_responses=True,
            )
            client.ping()
            logger.info("Rate limiter Redis connection established")
        except Exception as e:
            logger.warning(f"Rate limiter Redis connection failed: {e}. Rate ceilings disabled.")
            client = None
        return cls(client)

    def check(self, key: str, tier: Tier) -> RateLimitResult:
        """
        Count this request against the caller's hourly ceiling

        Args:
            key: Caller key (identity and session)
            tier: Resolved tier

        Returns:
            RateLimitResult
        """
        limit = tier.rate_ceiling_per_hour
        now = int(time.time())

        if limit is None or self.redis_client is None:
            return RateLimitResult(allowed=True, remaining=None, reset_at=0, limit=limit)

        window = self.window_seconds
        redis_key = f"rate_limit:{tier.id}:{key}"

        try:
            self.redis_client.zremrangebyscore(redis_key, 0, now - window)
            current_count = self.redis_client.zcard(redis_key)

            if current_count >= limit:
                oldest = self.redis_client.zrange(redis_key, 0, 0, withscores=True)
                reset_at = int(oldest[0][1]) + window if oldest else now + window
                return RateLimitResult(allowed=False, remaining=0, reset_at=reset_at, limit=limit)

            self.redis_client.zadd(redis_key, {f"{now}:{uuid.uuid4().hex}": now})
            self.redis_client.expire(redis_key, window)

            return RateLimitResult(
                allowed=True,
                remaining=limit - (current_count + 1),
                reset_at=now + window,
                limit=limit,
            )

        except Exception as e:
            logger.error(f"Rate limit check failed: {e}")
            return RateLimitResult(allowed=True, remaining=limit, reset_at=now + window, limit=limit)
