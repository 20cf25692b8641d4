"""
Typed API errors raised by the services and rendered by api.errors.

Every failure a caller can act on is one of these. Storage errors are not
wrapped: they propagate unchanged and surface as 500.
"""
from __future__ import annotations

from typing import Any


class ApiError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, errors: Any = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def __repr__(self):
        return f"<{self.__class__.__name__} status={self.status} message={self.message!r}>"


class BadRequest(ApiError):
    status = 400
    code = "BAD_REQUEST"
    default_message = "Bad request"


class AlreadyExists(BadRequest):
    default_message = "A user with this username or email already exists"


# Unknown login and wrong password share one public message so the
# response does not reveal which of the two was wrong.
INVALID_LOGIN_MESSAGE = "Invalid login or password"


class AccountNotFound(BadRequest):
    default_message = INVALID_LOGIN_MESSAGE


class InvalidCredentials(BadRequest):
    default_message = INVALID_LOGIN_MESSAGE


class Unauthorized(ApiError):
    status = 401
    code = "UNAUTHORIZED"
    default_message = "User is not authorized"


class Forbidden(ApiError):
    status = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFound(ApiError):
    status = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"
