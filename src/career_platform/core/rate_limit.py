"""
Rate Limiting Module

Provides rate limiting for API endpoints using Redis as the backend.
Falls back to in-memory storage if Redis is unavailable.

Applied to write-heavy student actions:
- Course application submission (prevents spam submissions)
- Offer selection / decline (prevents click storms on the coordinator)
"""

import logging
import time

import redis.asyncio as redis
from fastapi import HTTPException, status
from redis.exceptions import RedisError

from career_platform.core.config import settings

logger = logging.getLogger(__name__)

# In-memory rate limit storage (fallback when Redis unavailable)
# Format: {key: [(timestamp, count), ...]}
_memory_store: dict[str, list[tuple[float, int]]] = {}


class RateLimitExceeded(HTTPException):
    """Exception raised when rate limit is exceeded."""

    def __init__(self, limit: int, window_seconds: int):
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail={
                "error": "RATE_LIMIT_EXCEEDED",
                "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                "retry_after_seconds": window_seconds,
            },
            headers={"Retry-After": str(window_seconds)},
        )


async def _get_redis_client():
    """Get Redis client if available."""
    try:
        client = redis.from_url(settings.redis_url, decode_responses=True)
        await client.ping()
        return client
    except (RedisError, OSError) as e:
        logger.warning(f"Redis unavailable for rate limiting, using memory: {e}")
        return None


async def _check_rate_limit_redis(
    client,
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using a Redis sorted-set sliding window.

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    now = time.time()
    window_start = now - window_seconds

    pipe = client.pipeline()
    pipe.zremrangebyscore(key, 0, window_start)
    pipe.zcard(key)
    pipe.zadd(key, {str(now): now})
    pipe.expire(key, window_seconds)

    results = await pipe.execute()
    current_count = results[1]

    return current_count < limit


def _check_rate_limit_memory(
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check rate limit using in-memory storage.

    Fallback when Redis is unavailable. Does not work across
    multiple server instances.
    """
    now = time.time()
    window_start = now - window_seconds

    entries = [(ts, count) for ts, count in _memory_store.get(key, []) if ts > window_start]
    current_count = sum(count for _, count in entries)

    if current_count >= limit:
        _memory_store[key] = entries
        return False

    entries.append((now, 1))
    _memory_store[key] = entries
    return True


async def check_rate_limit(
    key: str,
    limit: int,
    window_seconds: int,
) -> bool:
    """
    Check if a request is within rate limits.

    Tries Redis first, falls back to in-memory storage.

    Args:
        key: Unique key for this rate limit (e.g., "student:apply:abc123")
        limit: Maximum requests allowed in the window
        window_seconds: Time window in seconds

    Returns:
        True if request is allowed, False if rate limit exceeded
    """
    redis_client = await _get_redis_client()

    if redis_client:
        try:
            return await _check_rate_limit_redis(redis_client, key, limit, window_seconds)
        except RedisError as e:
            logger.warning(f"Redis rate limit check failed: {e}")
        finally:
            await redis_client.aclose()

    return _check_rate_limit_memory(key, limit, window_seconds)


async def enforce_user_rate_limit(
    user_id: str,
    action: str,
    limit: int,
    window_seconds: int,
) -> None:
    """
    Enforce a per-user rate limit for an action.

    Raises:
        RateLimitExceeded: If rate limit is exceeded
    """
    key = f"user:{action}:{user_id}"
    allowed = await check_rate_limit(key, limit, window_seconds)

    if not allowed:
        logger.warning(
            f"Rate limit exceeded for user {user_id} on action '{action}': "
            f"{limit}/{window_seconds}s"
        )
        raise RateLimitExceeded(limit, window_seconds)


__all__ = [
    "check_rate_limit",
    "enforce_user_rate_limit",
    "RateLimitExceeded",
]
