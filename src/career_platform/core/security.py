"""
Security Utilities

JWT decoding for tokens issued by the identity provider. This service does
not issue credentials; it only verifies bearer tokens.
"""

import logging
from typing import Any

from jose import JWTError, jwt

from career_platform.core.config import settings

logger = logging.getLogger(__name__)


def decode_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT.

    Verifies the signature, algorithm and expiry.

    Returns:
        The token payload, or None if the token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.debug(f"JWT decode failed: {e}")
        return None


def create_access_token(claims: dict[str, Any]) -> str:
    """Encode an access token. Used by tests and local tooling."""
    to_encode = {"type": "access", **claims}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
