"""
Bearer token authorization for analytics endpoints.

Tokens are HS256 JWTs issued by the platform's login service with claims:

    sub          user id
    role         SUPER_ADMIN | MERCHANT_OWNER | MERCHANT_STAFF | CUSTOMER
    merchant_id  selected merchant, for merchant roles
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import jwt
import structlog
from fastapi import Depends, Header

from merchant_analytics.config import get_settings
from merchant_analytics.exceptions import AuthenticationError, PermissionDeniedError

logger = structlog.get_logger(__name__)


class UserRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    MERCHANT_OWNER = "MERCHANT_OWNER"
    MERCHANT_STAFF = "MERCHANT_STAFF"
    CUSTOMER = "CUSTOMER"


@dataclass(frozen=True)
class AuthContext:
    """Identity extracted from a verified token"""
    user_id: str
    role: UserRole
    merchant_id: Optional[int] = None


def decode_token(token: str) -> Dict[str, Any]:
    """
    Verify a token's signature and expiry.

    Raises:
        AuthenticationError: signature, expiry or format is invalid
    """
    security = get_settings().security
    try:
        return jwt.decode(
            token,
            security.jwt_secret_key.get_secret_value(),
            algorithms=[security.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("JWT validation failed", error=str(e))
        raise AuthenticationError("Invalid token")


def build_context(claims: Dict[str, Any]) -> AuthContext:
    try:
        role = UserRole(claims.get("role"))
    except ValueError:
        raise AuthenticationError("Invalid token: unknown role")

    if "sub" not in claims:
        raise AuthenticationError("Invalid token: missing subject claim")

    merchant_id = claims.get("merchant_id")
    if merchant_id is not None:
        try:
            merchant_id = int(merchant_id)
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token: malformed merchant_id claim")

    return AuthContext(user_id=str(claims["sub"]), role=role, merchant_id=merchant_id)


async def get_auth_context(authorization: Optional[str] = Header(default=None)) -> AuthContext:
    """FastAPI dependency resolving the caller from the Authorization header."""
    if not authorization:
        raise AuthenticationError()

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Authorization header must be a Bearer token")

    return build_context(decode_token(token.strip()))


async def require_super_admin(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if context.role is not UserRole.SUPER_ADMIN:
        logger.warning("Super admin access denied", user_id=context.user_id, role=context.role.value)
        raise PermissionDeniedError()
    return context


async def require_merchant(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Merchant owner or staff with a selected merchant."""
    if context.role not in (UserRole.MERCHANT_OWNER, UserRole.MERCHANT_STAFF):
        raise PermissionDeniedError()
    if context.merchant_id is None:
        raise PermissionDeniedError("No merchant selected")
    return context
