"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256::

    <base64url(payload)>.<hex signature>

The payload carries ``sub`` (user id), ``email``, ``iat`` and ``exp``.
Nothing is stored server-side: a token is valid until ``exp`` and cannot
be revoked or refreshed.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import logging
import time
from base64 import b64decode, urlsafe_b64encode
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_SECONDS = 3600


@dataclass(frozen=True)
class TokenClaims:
    subject_id: int
    email: str


class TokenService:
    def __init__(
        self,
        secret: str,
        expiry_seconds: int = DEFAULT_EXPIRY_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._secret = secret.encode()
        self._expiry_seconds = expiry_seconds
        self._clock = clock

    def _sign(self, raw: bytes) -> str:
        return hmac.new(self._secret, raw, hashlib.sha256).hexdigest()

    def issue(self, user) -> str:
        """Create a signed token for ``user`` (anything with ``id`` and ``email``)."""
        issued_at = int(self._clock())
        payload = {
            "sub": user.id,
            "email": user.email,
            "iat": issued_at,
            "exp": issued_at + self._expiry_seconds,
        }
        raw = json.dumps(payload, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode() + "." + self._sign(raw)

    def verify(self, token: str) -> Optional[TokenClaims]:
        """
        Return the claims of a valid token, or ``None``.

        The signature is checked before the payload is parsed, so no
        decoded field is looked at until its integrity is established.
        Callers are not told *why* a token was rejected.
        """
        try:
            encoded, sig = token.split(".", 1)
            # Characters outside the urlsafe alphabet are rejected, and so is
            # any spelling other than the one ``issue`` produces.
            raw = b64decode(encoded, altchars=b"-_", validate=True)
            if urlsafe_b64encode(raw).decode() != encoded:
                raise ValueError("non-canonical payload encoding")
        except (ValueError, binascii.Error) as exc:
            logger.debug("Rejected token: malformed (%s)", exc)
            return None

        if not hmac.compare_digest(sig.encode(), self._sign(raw).encode()):
            logger.debug("Rejected token: bad signature")
            return None

        try:
            payload = json.loads(raw)
            subject_id = payload["sub"]
            email = payload["email"]
            expires_at = payload["exp"]
        except (ValueError, KeyError, TypeError) as exc:
            logger.debug("Rejected token: bad payload (%s)", exc)
            return None

        if not isinstance(subject_id, int) or not isinstance(expires_at, (int, float)):
            logger.debug("Rejected token: bad claim types")
            return None
        if self._clock() > expires_at:
            logger.debug("Rejected token for user %s: expired", subject_id)
            return None

        return TokenClaims(subject_id=subject_id, email=email)
