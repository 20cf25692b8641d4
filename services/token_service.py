"""
Token service:
- signs access and refresh JWTs (PyJWT) with distinct keys and lifetimes
- validates them into a UserIdentity, or None on any failure
- keeps the single refresh token on file per user and rotates it
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from sqlalchemy.exc import IntegrityError

from models.db_storage import DBStorage
from models.refresh_token import RefreshToken
from services.identity import TokenPair, UserIdentity
from utils.security import generate_jti

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class TokenService:
    def __init__(
        self,
        storage: DBStorage,
        access_secret: str,
        refresh_secret: str,
        access_expires: timedelta,
        refresh_expires: timedelta,
        algorithm: str = "HS256",
        issuer: str = "socialfeed-api",
    ):
        if access_secret == refresh_secret:
            raise ValueError("access and refresh tokens must be signed with different secrets")
        self.storage = storage
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm
        self.issuer = issuer

    @classmethod
    def from_config(cls, storage: DBStorage, config) -> "TokenService":
        return cls(
            storage,
            access_secret=config["ACCESS_TOKEN_SECRET"],
            refresh_secret=config["REFRESH_TOKEN_SECRET"],
            access_expires=config["ACCESS_TOKEN_EXPIRES"],
            refresh_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "socialfeed-api"),
        )

    # signing

    def _encode(self, identity: UserIdentity, token_type: str, secret: str, expires: timedelta) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            **identity.to_claims(),
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + expires).timestamp()),
            "type": token_type,
            "jti": generate_jti(),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def generate_token_pair(self, identity: UserIdentity) -> TokenPair:
        return TokenPair(
            access_token=self._encode(identity, ACCESS, self.access_secret, self.access_expires),
            refresh_token=self._encode(identity, REFRESH, self.refresh_secret, self.refresh_expires),
        )

    # validation

    def _decode(self, token: Optional[str], token_type: str, secret: str) -> Optional[UserIdentity]:
        if not token or not isinstance(token, str):
            return None
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "iss"]},
            )
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected %s token: %s", token_type, exc)
            return None
        if claims.get("type") != token_type:
            logger.debug("Rejected %s token: wrong type %r", token_type, claims.get("type"))
            return None
        return UserIdentity.from_claims(claims)

    def validate_access_token(self, token: Optional[str]) -> Optional[UserIdentity]:
        """Stateless check: signature, expiry and type only."""
        return self._decode(token, ACCESS, self.access_secret)

    def validate_refresh_token(self, token: Optional[str]) -> Optional[UserIdentity]:
        """Signature, expiry and type; the caller checks the stored record separately."""
        return self._decode(token, REFRESH, self.refresh_secret)

    # persistence

    def persist_refresh_token(self, user_id: str, token: str, replaces: Optional[str] = None) -> bool:
        """
        Store `token` as the user's only refresh token.

        With `replaces`, the write only happens if the stored token is still
        `replaces` (compare-and-swap); returns False when another request
        rotated it first.
        """
        session = self.storage.get_session()
        if replaces is not None:
            updated = (
                session.query(RefreshToken)
                .filter(RefreshToken.user_id == user_id, RefreshToken.token == replaces)
                .update({RefreshToken.token: token})
            )
            self.storage.save()
            return updated == 1

        record = session.query(RefreshToken).filter(RefreshToken.user_id == user_id).first()
        if record is not None:
            record.token = token
            self.storage.save()
            return True

        self.storage.new(RefreshToken(user_id=user_id, token=token))
        try:
            self.storage.save()
        except IntegrityError:
            # a concurrent request inserted the row first; overwrite it
            session.query(RefreshToken).filter(RefreshToken.user_id == user_id).update({RefreshToken.token: token})
            self.storage.save()
        return True

    def find_persisted_refresh_token(self, token: Optional[str]) -> Optional[RefreshToken]:
        if not token:
            return None
        session = self.storage.get_session()
        return session.query(RefreshToken).filter(RefreshToken.token == token).first()

    def revoke_refresh_token(self, user_id: str) -> bool:
        """Delete the user's stored refresh token. Returns whether one existed."""
        session = self.storage.get_session()
        deleted = session.query(RefreshToken).filter(RefreshToken.user_id == user_id).delete()
        self.storage.save()
        return deleted > 0
