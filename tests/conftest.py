"""
Shared fixtures.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from career_platform.core import locks


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock(return_value=None)
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    return db


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.eval = AsyncMock(return_value=1)
    redis.incr = AsyncMock()
    redis.expire = AsyncMock()
    redis.ttl = AsyncMock(return_value=3600)
    return redis


@pytest.fixture(autouse=True)
def clear_memory_locks():
    """Start every test without in-process locks."""
    locks._memory_locks.clear()
    yield
    locks._memory_locks.clear()
