"""
Pydantic request / response schemas for the HTTP layer.

Request bodies accept every field as optional: presence is checked by
the handlers so a missing field is reported as a 400 with the service's
own message rather than a generic validation error.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════════════════════════════
# Requests
# ═══════════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdateRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class PreferenceRequest(BaseModel):
    preference: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════════════════
# Responses
# ═══════════════════════════════════════════════════════════════════════════════


class PreferenceResponse(BaseModel):
    """Wire shape ``{"prefId": 1, "preference": "vegetarian"}``."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    pref_id: int = Field(..., alias="prefId")
    preference: str = Field(
        ...,
        validation_alias=AliasChoices("preference", "value"),
        serialization_alias="preference",
    )


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    preferences: List[PreferenceResponse] = Field(default_factory=list)


class TokenResponse(BaseModel):
    token: str
