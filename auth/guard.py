"""
Ownership guard: a caller may only touch resources it owns.

Ownership is decided on the user id in the request path.  Preferences
are always addressed through their owner, so the preference id never
takes part in the decision.
"""

from __future__ import annotations

import logging
from enum import Enum

from auth.jwt import TokenClaims
from utils.errors import AuthorizationError

logger = logging.getLogger(__name__)


class Access(str, Enum):
    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"


def authorize(identity: TokenClaims, owner_id: int) -> Access:
    if identity.subject_id == owner_id:
        return Access.ALLOWED
    return Access.FORBIDDEN


def ensure_owner(identity: TokenClaims, owner_id: int, action: str) -> None:
    """Raise ``AuthorizationError`` unless ``identity`` owns ``owner_id``."""
    if authorize(identity, owner_id) is Access.FORBIDDEN:
        logger.info("User %s denied access to user %s", identity.subject_id, owner_id)
        raise AuthorizationError(f"Forbidden: Can only {action}")
