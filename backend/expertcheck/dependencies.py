"""
Authentication and authorization dependencies.

get_current_user resolves the bearer token into a CurrentUser. Role checks
are capabilities attached at the router level (require_admin) rather than
repeated inside handlers.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header

from expertcheck.errors import Forbidden, Unauthorized
from expertcheck.models.user import ROLE_ADMIN, ROLE_USER
from expertcheck.security import decode_access_token


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: Optional[str]
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    """
    Resolve the Authorization header into the calling user.

    Raises:
        Unauthorized: If the header is missing, not a bearer token, or the
            token does not validate
    """
    if not authorization:
        raise Unauthorized("Access denied. Authorization required")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise Unauthorized("Invalid authorization header format")

    claims = decode_access_token(parts[1])
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token")

    return CurrentUser(
        id=user_id,
        email=claims.get("email"),
        role=claims.get("role") or ROLE_USER,
    )


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Capability check for administrator-only operations."""
    if not user.is_admin:
        raise Forbidden("Access denied. Administrator rights required")
    return user
