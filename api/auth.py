"""
Auth API routes: register, login.

Neither route requires a token.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from auth.dependencies import get_repository, get_token_service
from auth.jwt import TokenService
from database.repository import UserRepository
from utils.errors import AuthenticationError, ValidationError
from utils.schemas import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    repo: UserRepository = Depends(get_repository),
) -> UserResponse:
    """Register a new user."""
    if not req.name or not req.email or not req.password:
        raise ValidationError("Name, email, and password are required")

    user = await repo.register(req.name, req.email, req.password)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    req: LoginRequest,
    repo: UserRepository = Depends(get_repository),
    tokens: TokenService = Depends(get_token_service),
) -> TokenResponse:
    """Login with email + password."""
    if not req.email or not req.password:
        raise ValidationError("Email and password are required")

    user = await repo.authenticate(req.email, req.password)
    if user is None:
        logger.info("Rejected login attempt")
        raise AuthenticationError("Invalid credentials")

    logger.info("Login: user %d", user.id)
    return TokenResponse(token=tokens.issue(user))
