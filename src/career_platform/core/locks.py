"""
Distributed Locks

Short-lived mutual exclusion keyed by an arbitrary name, backed by Redis
(`SET key token NX EX ttl`). Locks expire on their own after `ttl_seconds`,
so a crashed worker can never hold one forever. Release is compare-and-delete:
a worker only deletes the lock if it still owns it.

Falls back to an in-process store when Redis is unavailable. The fallback
does not coordinate across multiple server instances.
"""

import asyncio
import logging
import secrets
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from redis.asyncio import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

# Only delete the key if it still holds our token
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""

# In-memory fallback: {key: (token, expires_at_monotonic)}
_memory_locks: dict[str, tuple[str, float]] = {}


class LockNotAcquiredError(Exception):
    """Raised when a lock is still held by someone else after all attempts."""

    def __init__(self, key: str, attempts: int):
        self.key = key
        self.attempts = attempts
        super().__init__(f"Could not acquire lock {key} after {attempts} attempt(s)")


def _acquire_memory(key: str, token: str, ttl_seconds: int) -> bool:
    now = time.monotonic()
    held = _memory_locks.get(key)
    if held is not None and held[1] > now:
        return False
    _memory_locks[key] = (token, now + ttl_seconds)
    return True


def _release_memory(key: str, token: str) -> bool:
    held = _memory_locks.get(key)
    if held is not None and held[0] == token:
        del _memory_locks[key]
        return True
    return False


async def try_acquire(redis: Redis | None, key: str, ttl_seconds: int) -> str | None:
    """
    Try once to acquire a lock.

    Returns:
        The owner token if acquired, None if the lock is held by someone else
    """
    token = secrets.token_hex(16)

    if redis is not None:
        try:
            acquired = await redis.set(key, token, nx=True, ex=ttl_seconds)
            return token if acquired else None
        except RedisError as e:
            logger.warning(f"Redis unavailable for lock {key}, using memory: {e}")

    return token if _acquire_memory(key, token, ttl_seconds) else None


async def release(redis: Redis | None, key: str, token: str) -> bool:
    """Release a lock if `token` still owns it. Returns True if it was released."""
    if _release_memory(key, token):
        return True

    if redis is None:
        return False

    try:
        return bool(await redis.eval(_RELEASE_SCRIPT, 1, key, token))
    except RedisError as e:
        # The lock will expire on its own after its TTL
        logger.error(f"Failed to release lock {key}: {e}")
        return False


@asynccontextmanager
async def hold_lock(
    redis: Redis | None,
    key: str,
    *,
    ttl_seconds: int,
    max_attempts: int,
    retry_delay_seconds: float,
) -> AsyncIterator[str]:
    """
    Acquire a lock for the duration of the block.

    Retries with linear backoff while the lock is held elsewhere. The lock is
    released on exit whether the block succeeds or raises.

    Usage:
        async with hold_lock(redis, "lock:student:abc", ttl_seconds=30,
                             max_attempts=5, retry_delay_seconds=0.2):
            ...

    Raises:
        LockNotAcquiredError: If the lock is still held after `max_attempts`
    """
    token: str | None = None

    for attempt in range(1, max_attempts + 1):
        token = await try_acquire(redis, key, ttl_seconds)
        if token is not None:
            break
        logger.info(f"Lock {key} busy (attempt {attempt}/{max_attempts})")
        if attempt < max_attempts:
            await asyncio.sleep(retry_delay_seconds * attempt)

    if token is None:
        raise LockNotAcquiredError(key, max_attempts)

    try:
        yield token
    finally:
        await release(redis, key, token)


def student_lock_key(student_id: str) -> str:
    """Lock key serializing all application writes for one student."""
    return f"lock:student:{student_id}"


__all__ = [
    "LockNotAcquiredError",
    "hold_lock",
    "release",
    "student_lock_key",
    "try_acquire",
]
