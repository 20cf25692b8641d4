from __future__ import annotations
from functools import wraps
from flask import request, g, current_app

from services.auth_context import have_user_data
from services.identity import UserIdentity


def bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def jwt_required():
    """Resolve the Bearer access token and attach the caller's identity to g.current_user."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            resolver = current_app.extensions["auth_context"]
            # raises Unauthorized, rendered as 401 by the error handlers
            g.current_user = resolver.resolve(bearer_token())
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def current_user() -> UserIdentity:
    """Identity of the authenticated caller; Unauthorized if jwt_required did not run."""
    return have_user_data(g.get("current_user"))
