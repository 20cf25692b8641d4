from services.auth_context import AuthContextResolver, have_user_data
from services.auth_service import AuthService
from services.credential_store import CredentialStore
from services.identity import AuthSession, TokenPair, UserIdentity
from services.token_service import TokenService

__all__ = [
    "AuthContextResolver",
    "AuthService",
    "AuthSession",
    "CredentialStore",
    "TokenPair",
    "TokenService",
    "UserIdentity",
    "have_user_data",
]
