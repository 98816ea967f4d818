"""FastAPI dependencies for caller identity."""

from typing import Callable, Optional
from fastapi import Depends, Header
import jwt
from jwt import PyJWTError

from .config import settings
from .exceptions import AuthenticationError, AuthorizationError


# Roles issued by the identity provider
ROLE_ADMIN = "admin"
ROLE_WILDLIFE_OFFICER = "wildlifeOfficer"
ROLE_TOUR_GUIDE = "tourGuide"
ROLE_SAFARI_DRIVER = "safariDriver"


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> dict:
    """
    Authentication dependency that validates Bearer tokens.

    Token issuance is handled by the identity provider; this only decodes
    and checks the signature and expiry.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        dict: Caller identity with ``user_id`` and ``role``

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError(detail="Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError(detail="Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    try:
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=[settings.jwt_algorithm]
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {str(e)}")

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError(detail="Invalid token payload")

    return {
        "user_id": user_id,
        "role": payload.get("role"),
        "email": payload.get("email"),
    }


def require_roles(*roles: str) -> Callable:
    """
    Build a dependency that only lets callers with one of ``roles`` through.

    Args:
        roles: Accepted role names

    Returns:
        Dependency returning the caller identity
    """

    async def _check(user: dict = Depends(get_current_user)) -> dict:
        if user.get("role") not in roles:
            raise AuthorizationError(required_permissions=list(roles))
        return user

    return _check


RequiredAuth = Depends(get_current_user)
