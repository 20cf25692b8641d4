"""Turns an inbound access token into the caller's identity."""
from __future__ import annotations

from typing import Optional

from services.exceptions import Unauthorized
from services.identity import UserIdentity
from services.token_service import TokenService


class AuthContextResolver:
    """
    The single check every protected handler depends on.

    Access tokens are verified statelessly (signature and expiry); the
    refresh-token store is never consulted here.
    """

    def __init__(self, tokens: TokenService):
        self.tokens = tokens

    def resolve(self, access_token: Optional[str]) -> UserIdentity:
        if not access_token:
            raise Unauthorized()
        identity = self.tokens.validate_access_token(access_token)
        if identity is None:
            raise Unauthorized()
        return identity


def have_user_data(identity: Optional[UserIdentity]) -> UserIdentity:
    """Return the identity attached to the request or raise Unauthorized."""
    if not isinstance(identity, UserIdentity):
        raise Unauthorized()
    return identity
