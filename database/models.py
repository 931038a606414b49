"""
In-memory record types for users and their preferences.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List


@dataclass
class Preference:
    pref_id: int
    value: str

    def copy(self) -> "Preference":
        return replace(self)


@dataclass
class PublicUser:
    """A user as it may leave the service: no password hash."""

    id: int
    name: str
    email: str
    preferences: List[Preference] = field(default_factory=list)


@dataclass
class User:
    id: int
    name: str
    email: str
    password_hash: str = field(repr=False)
    preferences: List[Preference] = field(default_factory=list)

    def to_public(self) -> PublicUser:
        return PublicUser(
            id=self.id,
            name=self.name,
            email=self.email,
            preferences=[p.copy() for p in self.preferences],
        )
