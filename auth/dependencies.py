"""
FastAPI dependencies for authentication.

Provides ``get_repository``, ``get_token_service`` and
``get_current_identity`` which are used across all protected routes,
plus ``require_owner`` which builds the per-route ownership check.
"""

from __future__ import annotations

from typing import Callable, Optional

from fastapi import Depends, Header, Request

from auth.guard import ensure_owner
from auth.jwt import TokenClaims, TokenService
from database.repository import UserRepository
from utils.errors import AuthenticationError

_BEARER_PREFIX = "Bearer "


def get_repository(request: Request) -> UserRepository:
    return request.app.state.repository


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    Extract and verify the Bearer token from the Authorization header.

    A missing header or a non-Bearer scheme is rejected before any
    decode is attempted.  The verified subject is recorded on
    ``request.state.caller_id`` for the access log.
    """
    if not authorization or not authorization.startswith(_BEARER_PREFIX):
        raise AuthenticationError("Unauthorized: No token provided")

    claims = tokens.verify(authorization[len(_BEARER_PREFIX):])
    if claims is None:
        raise AuthenticationError("Unauthorized: Invalid token")
    request.state.caller_id = claims.subject_id
    return claims


def require_owner(action: str) -> Callable:
    """
    Build a dependency that lets the request through only when the
    caller is the user named by the ``{user_id}`` path parameter.
    """

    async def _check_owner(
        user_id: int,
        identity: TokenClaims = Depends(get_current_identity),
    ) -> TokenClaims:
        ensure_owner(identity, user_id, action)
        return identity

    return _check_owner
