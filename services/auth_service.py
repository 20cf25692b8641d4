"""
Registration, login, refresh and logout flows.

Each flow runs top to bottom and raises a typed ApiError at the first failed
check, so a session is either fully issued (tokens signed and the refresh
token persisted) or not at all.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from models.user import User
from services.credential_store import CredentialStore
from services.exceptions import AccountNotFound, AlreadyExists, InvalidCredentials, Unauthorized
from services.identity import AuthSession, UserIdentity
from services.token_service import TokenService
from utils.security import PasswordHasher

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    def __init__(self, credentials: CredentialStore, hasher: PasswordHasher, tokens: TokenService):
        self.credentials = credentials
        self.hasher = hasher
        self.tokens = tokens

    def register(self, username: str, email: str, password: str) -> AuthSession:
        email = normalize_email(email)
        if self.credentials.find_by_username_or_email(username, email) is not None:
            raise AlreadyExists()

        password_hash = self.hasher.hash(password)
        try:
            user = self.credentials.create(username, email, password_hash)
        except IntegrityError:
            # lost a race with a concurrent registration
            raise AlreadyExists()

        logger.info("Registered user %s", user.id)
        return self._issue_session(user)

    def login(self, login: str, password: str) -> AuthSession:
        user = self.credentials.find_by_username_or_email(login, normalize_email(login))
        if user is None:
            logger.info("Login failed: unknown account")
            raise AccountNotFound()

        if not self.hasher.verify(password, user.password_hash):
            logger.info("Login failed: wrong password for user %s", user.id)
            raise InvalidCredentials()

        return self._issue_session(user)

    def refresh(self, refresh_token: Optional[str]) -> AuthSession:
        if not refresh_token:
            raise Unauthorized()

        identity = self.tokens.validate_refresh_token(refresh_token)
        if identity is None:
            raise Unauthorized()

        record = self.tokens.find_persisted_refresh_token(refresh_token)
        if record is None or record.user_id != identity.id:
            # Signed by us but no longer on file: a rotated-out token is being
            # replayed, so the session it belonged to is ended as well.
            logger.warning("Refresh token reuse for user %s, revoking stored token", identity.id)
            self.tokens.revoke_refresh_token(identity.id)
            raise Unauthorized()

        user = self.credentials.find_by_id(identity.id)
        if user is None:
            raise Unauthorized()

        return self._issue_session(user, replaces=refresh_token)

    def logout(self, refresh_token: Optional[str]) -> bool:
        """Forget the stored refresh token the caller presents. Returns whether one was removed."""
        identity = self.tokens.validate_refresh_token(refresh_token)
        if identity is None:
            return False
        record = self.tokens.find_persisted_refresh_token(refresh_token)
        if record is None or record.user_id != identity.id:
            return False
        return self.tokens.revoke_refresh_token(identity.id)

    def _issue_session(self, user: User, replaces: Optional[str] = None) -> AuthSession:
        identity = UserIdentity.from_user(user)
        tokens = self.tokens.generate_token_pair(identity)
        if not self.tokens.persist_refresh_token(identity.id, tokens.refresh_token, replaces=replaces):
            # a concurrent refresh rotated the same token first
            raise Unauthorized()
        return AuthSession(tokens=tokens, user=identity)
