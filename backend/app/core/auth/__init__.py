"""
FastAPI authentication dependencies.

The caller identity is read from the access token alone and passed to the
service layer as an explicit Principal; no service looks up "the current
user" on its own.
"""
from dataclasses import dataclass, field
from typing import FrozenSet

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.models import RoleName
from .security import decode_token, verify_token_type
from ..error_responses import ErrorMessages, raise_forbidden, raise_unauthorized

# HTTP Bearer token scheme
security = HTTPBearer()


@dataclass(frozen=True)
class Principal:
    """Authenticated caller: user id plus granted role names."""

    user_id: int
    roles: FrozenSet[str] = field(default_factory=frozenset)

    def has_role(self, role: RoleName) -> bool:
        return role.value in self.roles


def _decode_and_validate_token(token: str) -> Principal:
    """
    Decode and validate an access token into a Principal.

    Raises:
        HTTPException: 401 if token is invalid, wrong type, or missing user_id
    """
    payload = decode_token(token)
    if payload is None:
        raise_unauthorized(ErrorMessages.INVALID_TOKEN)

    if not verify_token_type(payload, "access"):
        raise_unauthorized(ErrorMessages.INVALID_TOKEN_TYPE)

    user_id = payload.get("user_id")
    roles = payload.get("roles") or []
    if not isinstance(user_id, int) or not isinstance(roles, list):
        raise_unauthorized(ErrorMessages.INVALID_TOKEN_PAYLOAD)

    return Principal(user_id=user_id, roles=frozenset(str(r) for r in roles))


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Principal:
    """
    Get the caller identity from the bearer token.

    Raises:
        HTTPException: 401 if the token is invalid (403 from HTTPBearer if
            the header is missing)
    """
    return _decode_and_validate_token(credentials.credentials)


async def require_user(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """Allow only callers holding the USER role."""
    if not principal.has_role(RoleName.USER):
        raise_forbidden(ErrorMessages.TEST_TAKERS_ONLY)
    return principal


async def require_admin(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """Allow only callers holding the ADMIN role."""
    if not principal.has_role(RoleName.ADMIN):
        raise_forbidden(ErrorMessages.ADMINS_ONLY)
    return principal
