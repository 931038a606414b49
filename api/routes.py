"""
REST API routes for user profiles and preferences.

Every route needs a Bearer token.  Routes under ``/users/{user_id}``
are owner-scoped: the guard runs before body validation and before the
repository is consulted, so a caller probing someone else's id gets 403
whether or not that id exists.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status

from auth.dependencies import get_current_identity, get_repository, require_owner
from database.repository import UserRepository
from utils.errors import NotFoundError, ValidationError
from utils.schemas import (
    PreferenceRequest,
    PreferenceResponse,
    UserResponse,
    UserUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

_USER_NOT_FOUND = "User not found"
_PREF_NOT_FOUND = "User or preference not found"

_read_profile = require_owner("access own profile")
_update_profile = require_owner("update own profile")
_delete_profile = require_owner("delete own profile")
_modify_preferences = require_owner("modify own preferences")


# ── Users ──────────────────────────────────────────────────────────────


@router.get(
    "/users",
    response_model=List[UserResponse],
    dependencies=[Depends(get_current_identity)],
)
async def list_users(
    repo: UserRepository = Depends(get_repository),
) -> List[UserResponse]:
    """All users, any authenticated caller."""
    return [UserResponse.model_validate(u) for u in repo.list_all()]


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(_read_profile)],
)
async def get_user(
    user_id: int,
    repo: UserRepository = Depends(get_repository),
) -> UserResponse:
    user = repo.get_by_id(user_id)
    if user is None:
        raise NotFoundError(_USER_NOT_FOUND)
    return UserResponse.model_validate(user)


@router.put(
    "/users/{user_id}",
    response_model=UserResponse,
    dependencies=[Depends(_update_profile)],
)
async def update_user(
    user_id: int,
    req: Optional[UserUpdateRequest] = None,
    repo: UserRepository = Depends(get_repository),
) -> UserResponse:
    """Partial update; fields left out (or empty) keep their value."""
    req = req or UserUpdateRequest()
    user = await repo.update(
        user_id, name=req.name, email=req.email, password=req.password,
    )
    if user is None:
        raise NotFoundError(_USER_NOT_FOUND)
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(_delete_profile)],
)
async def delete_user(
    user_id: int,
    repo: UserRepository = Depends(get_repository),
) -> Response:
    if not repo.delete(user_id):
        raise NotFoundError(_USER_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ── Preferences ────────────────────────────────────────────────────────


@router.post(
    "/users/{user_id}/preferences",
    response_model=PreferenceResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(_modify_preferences)],
)
async def add_preference(
    user_id: int,
    req: Optional[PreferenceRequest] = None,
    repo: UserRepository = Depends(get_repository),
) -> PreferenceResponse:
    if req is None or not req.preference:
        raise ValidationError("Preference is required")

    pref = repo.add_preference(user_id, req.preference)
    if pref is None:
        raise NotFoundError(_USER_NOT_FOUND)
    logger.debug("User %d added preference %d", user_id, pref.pref_id)
    return PreferenceResponse.model_validate(pref)


@router.put(
    "/users/{user_id}/preferences/{pref_id}",
    response_model=PreferenceResponse,
    dependencies=[Depends(_modify_preferences)],
)
async def update_preference(
    user_id: int,
    pref_id: int,
    req: Optional[PreferenceRequest] = None,
    repo: UserRepository = Depends(get_repository),
) -> PreferenceResponse:
    value = req.preference if req else None
    pref = repo.update_preference(user_id, pref_id, value)
    if pref is None:
        raise NotFoundError(_PREF_NOT_FOUND)
    return PreferenceResponse.model_validate(pref)


@router.delete(
    "/users/{user_id}/preferences/{pref_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(_modify_preferences)],
)
async def delete_preference(
    user_id: int,
    pref_id: int,
    repo: UserRepository = Depends(get_repository),
) -> Response:
    if not repo.delete_preference(user_id, pref_id):
        raise NotFoundError(_PREF_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
