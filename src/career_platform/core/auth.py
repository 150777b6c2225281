"""
Authentication and Authorization Module

Provides authentication dependencies for FastAPI endpoints.

Identity is owned by an external provider. This service only validates the
bearer JWT it issues and trusts the `sub` claim as the principal id
(the student id for student tokens). Role-based access control is applied
per router through the `require_*` dependencies.

SECURITY NOTE:
- Development mode test tokens are ONLY accepted when PYTHON_ENV=development
- Production environments MUST set PYTHON_ENV=production to disable them
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from career_platform.core.config import settings
from career_platform.core.security import decode_token

logger = logging.getLogger(__name__)

# Security scheme for OpenAPI documentation
security = HTTPBearer(
    auto_error=True,
    description="JWT Bearer token issued by the identity provider",
)


class UserRole(str, Enum):
    """Portal roles carried in the `role` claim."""

    STUDENT = "student"
    INSTITUTION = "institution"
    COMPANY = "company"
    ADMIN = "admin"


@dataclass
class CurrentUser:
    """
    Represents an authenticated principal.

    Attributes:
        id: Principal id from the identity provider (`sub` claim)
        email: User's email address
        role: Portal role
        email_verified: Whether the provider has verified the email
        org_id: Institution or company id for organisation accounts
    """

    id: str
    email: str
    role: UserRole
    email_verified: bool = False
    org_id: UUID | None = None

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id}, role={self.role.value})"


def _is_dev_mode_safe() -> bool:
    """
    Check if development test tokens may be accepted.

    Requires PYTHON_ENV=development in settings AND in the raw environment
    variable, which must not say production or staging.
    """
    env_var = os.getenv("PYTHON_ENV", "").lower()

    is_safe = (
        settings.is_development
        and not settings.is_production
        and env_var not in ("production", "staging")
    )

    if is_safe:
        logger.warning(
            "SECURITY: Development auth mode is ENABLED. This MUST NOT be used in production!"
        )

    return is_safe


_DEVELOPMENT_MODE = _is_dev_mode_safe()


def _parse_dev_token(token: str) -> CurrentUser | None:
    """
    Parse a development token of the form `dev:<role>:<id>[:<org_id>]`.

    Example: `dev:student:abc123` or `dev:institution:u1:<uuid>`.
    """
    parts = token.split(":")
    if len(parts) < 3 or parts[0] != "dev":
        return None

    try:
        role = UserRole(parts[1])
        org_id = UUID(parts[3]) if len(parts) > 3 else None
    except ValueError:
        return None

    return CurrentUser(
        id=parts[2],
        email=f"{parts[2]}@careerplatform.dev",
        role=role,
        email_verified=True,
        org_id=org_id,
    )


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _validate_jwt_token(token: str) -> CurrentUser:
    """
    Validate JWT token and extract user claims.

    Raises:
        HTTPException 401: If token is invalid, expired or has bad claims
    """
    if _DEVELOPMENT_MODE:
        dev_user = _parse_dev_token(token)
        if dev_user:
            logger.debug("Development mode: Using test token")
            return dev_user

    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    token_type = payload.get("type", "access")
    if token_type != "access":
        logger.warning(f"Invalid token type: {token_type}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    try:
        user_id = payload.get("sub")
        if not user_id:
            raise ValueError("Missing 'sub' claim in token")

        org_id = payload.get("org_id")

        return CurrentUser(
            id=str(user_id),
            email=payload.get("email", ""),
            role=UserRole(payload.get("role", "")),
            email_verified=bool(payload.get("email_verified", False)),
            org_id=UUID(org_id) if org_id else None,
        )
    except (ValueError, KeyError) as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _unauthorized(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    """FastAPI dependency that validates the bearer token and returns the principal."""
    return await _validate_jwt_token(credentials.credentials)


def _require_role(role: UserRole, *, needs_org: bool = False):
    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role != role:
            logger.warning(
                f"Access denied: user {user.id} has role '{user.role.value}', "
                f"but '{role.value}' is required"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "ROLE_REQUIRED",
                    "message": f"This endpoint requires a {role.value} account.",
                },
            )
        if needs_org and user.org_id is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "ORGANISATION_REQUIRED",
                    "message": "This account is not linked to an organisation.",
                },
            )
        return user

    return dependency


async def require_student(
    user: CurrentUser = Depends(_require_role(UserRole.STUDENT)),
) -> CurrentUser:
    """
    Student-only dependency.

    Students must have a verified email before they can apply or select offers.
    """
    if not user.email_verified:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "EMAIL_NOT_VERIFIED",
                "message": "Please verify your email address before continuing.",
            },
        )
    return user


# Profile access does not need a verified email
require_student_account = _require_role(UserRole.STUDENT)
require_institution = _require_role(UserRole.INSTITUTION, needs_org=True)
require_company = _require_role(UserRole.COMPANY, needs_org=True)
require_admin = _require_role(UserRole.ADMIN)


__all__ = [
    "CurrentUser",
    "UserRole",
    "get_current_user",
    "require_student",
    "require_student_account",
    "require_institution",
    "require_company",
    "require_admin",
]
