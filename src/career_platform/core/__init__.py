"""
Core module - Configuration, database, redis, security, and utilities.
"""

from career_platform.core.config import get_settings, settings
from career_platform.core.database import Base, close_db, get_db, init_db
from career_platform.core.redis import close_redis, get_redis, init_redis
from career_platform.core.security import decode_token

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Redis
    "get_redis",
    "init_redis",
    "close_redis",
    # Security
    "decode_token",
]
