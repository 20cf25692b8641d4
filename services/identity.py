"""Identity and session value types shared by the auth services."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

IDENTITY_CLAIMS = ("id", "username", "email")


@dataclass(frozen=True)
class UserIdentity:
    """Minimal projection of a user, embedded in both token kinds."""

    id: str
    username: str
    email: str

    @classmethod
    def from_user(cls, user) -> "UserIdentity":
        return cls(id=str(user.id), username=user.username, email=user.email)

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> Optional["UserIdentity"]:
        """Build an identity from decoded claims, or None if any field is missing or not a string."""
        values = {}
        for name in IDENTITY_CLAIMS:
            value = claims.get(name)
            if not isinstance(value, str) or not value:
                return None
            values[name] = value
        return cls(**values)

    def to_claims(self) -> dict:
        return {"id": self.id, "username": self.username, "email": self.email}


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class AuthSession:
    """Result of a successful registration, login or refresh. Never persisted."""

    tokens: TokenPair
    user: UserIdentity
