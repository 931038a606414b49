"""
User / preference repository, which is also the credential store.

Holds every user record in process memory.  The repository instance owns
the user list and both id counters; create one per application (or per
test) and hand it to the handlers through ``app.state``.

Missing users or preferences are reported with ``None`` / ``False``; the
HTTP layer turns those into status codes.

Concurrency: bcrypt runs in a worker thread, so ``register``,
``authenticate`` and ``update`` suspend.  Id allocation and list
mutation always happen *after* the last ``await`` of a call, so on a
single event loop two requests cannot interleave inside them.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from auth.password import DEFAULT_ROUNDS, hash_password_async, verify_password_async
from database.models import Preference, PublicUser, User
from utils.errors import ValidationError

logger = logging.getLogger(__name__)


class UserRepository:
    def __init__(self, bcrypt_rounds: int = DEFAULT_ROUNDS):
        self._bcrypt_rounds = bcrypt_rounds
        self._users: List[User] = []
        self._next_user_id = 1
        self._next_pref_id = 1

    # ── Internal lookups ───────────────────────────────────────────────

    def _find(self, user_id: int) -> Optional[User]:
        for user in self._users:
            if user.id == user_id:
                return user
        return None

    @staticmethod
    def _find_preference(user: User, pref_id: int) -> Optional[Preference]:
        for pref in user.preferences:
            if pref.pref_id == pref_id:
                return pref
        return None

    # ── Users ──────────────────────────────────────────────────────────

    async def register(self, name: str, email: str, password: str) -> PublicUser:
        """
        Create a user and return its public view.

        Email uniqueness is not enforced; ``find_by_email`` resolves
        duplicates to the earliest registration.
        """
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")

        password_hash = await hash_password_async(password, self._bcrypt_rounds)

        user = User(
            id=self._next_user_id,
            name=name,
            email=email,
            password_hash=password_hash,
        )
        self._next_user_id += 1
        self._users.append(user)
        logger.info("Registered user %d", user.id)
        return user.to_public()

    def find_by_email(self, email: str) -> Optional[User]:
        """Internal record (hash included), for credential checks only."""
        for user in self._users:
            if user.email == email:
                return user
        return None

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user if the credentials match, else ``None``."""
        user = self.find_by_email(email)
        if user is None:
            return None
        if not await verify_password_async(password, user.password_hash):
            return None
        return user

    def list_all(self) -> List[PublicUser]:
        return [u.to_public() for u in self._users]

    def get_by_id(self, user_id: int) -> Optional[PublicUser]:
        user = self._find(user_id)
        return user.to_public() if user else None

    async def update(
        self,
        user_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Optional[PublicUser]:
        """Overwrite only the fields given (empty values are ignored)."""
        if self._find(user_id) is None:
            return None

        password_hash = None
        if password:
            password_hash = await hash_password_async(password, self._bcrypt_rounds)

        # The user may have been deleted while the hash was computed.
        user = self._find(user_id)
        if user is None:
            return None
        if name:
            user.name = name
        if email:
            user.email = email
        if password_hash:
            user.password_hash = password_hash
        return user.to_public()

    def delete(self, user_id: int) -> bool:
        user = self._find(user_id)
        if user is None:
            return False
        self._users.remove(user)
        logger.info("Deleted user %d (%d preferences)", user_id, len(user.preferences))
        return True

    # ── Preferences ────────────────────────────────────────────────────

    def add_preference(self, user_id: int, value: str) -> Optional[Preference]:
        user = self._find(user_id)
        if user is None:
            return None
        pref = Preference(pref_id=self._next_pref_id, value=value)
        self._next_pref_id += 1
        user.preferences.append(pref)
        return pref.copy()

    def update_preference(
        self, user_id: int, pref_id: int, value: Optional[str] = None
    ) -> Optional[Preference]:
        user = self._find(user_id)
        if user is None:
            return None
        pref = self._find_preference(user, pref_id)
        if pref is None:
            return None
        if value:
            pref.value = value
        return pref.copy()

    def delete_preference(self, user_id: int, pref_id: int) -> bool:
        user = self._find(user_id)
        if user is None:
            return False
        pref = self._find_preference(user, pref_id)
        if pref is None:
            return False
        user.preferences.remove(pref)
        return True
