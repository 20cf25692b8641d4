"""
Authentication blueprint:
- POST /auth/registration
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout

The flows live in services.auth_service; this module only moves tokens
between HTTP and the service:
- the access token travels in the response body and the Bearer header
- the refresh token is written back as an HTTP-only cookie (and returned in
  the body for clients without cookie support)
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from models.schemas.user import RegistrationSchema, LoginSchema, SessionOutSchema
from services.auth_service import AuthService
from services.identity import AuthSession

bp = Blueprint("auth", __name__)

registration_schema = RegistrationSchema()
login_schema = LoginSchema()
session_out_schema = SessionOutSchema()


def _auth_service() -> AuthService:
    return current_app.extensions["auth_service"]


def _presented_refresh_token() -> str | None:
    # an explicit body value wins over the cookie
    payload = request.get_json(silent=True) or {}
    token = payload.get("refresh_token") if isinstance(payload, dict) else None
    if not token:
        token = request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"])
    return token if isinstance(token, str) and token else None


def _session_response(session: AuthSession, status: int):
    body = session_out_schema.dump(session)
    body["token_type"] = "bearer"
    body["expires_in"] = int(current_app.config["ACCESS_TOKEN_EXPIRES"].total_seconds())
    response = jsonify(body)
    response.status_code = status
    response.set_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        session.tokens.refresh_token,
        max_age=int(current_app.config["REFRESH_TOKEN_EXPIRES"].total_seconds()),
        httponly=True,
        secure=current_app.config["REFRESH_COOKIE_SECURE"],
        samesite=current_app.config["REFRESH_COOKIE_SAMESITE"],
    )
    return response


@bp.post("/registration")
def registration():
    """
    Register a new user and open a session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string }
            email: { type: string }
            password: { type: string }
    responses:
      201:
        description: Created (returns tokens and user)
      400:
        description: User already exists or invalid input
    """
    payload = request.get_json(silent=True) or {}
    data = registration_schema.load(payload)
    session = _auth_service().register(data["username"], data["email"], data["password"])
    return _session_response(session, 201)


@bp.post("/login")
def login():
    """
    Login with username or email: return access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             login: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens and user)
      400:
        description: Invalid login or password
    """
    payload = request.get_json(silent=True) or {}
    data = login_schema.load(payload)
    session = _auth_service().login(data["login"], data["password"])
    return _session_response(session, 200)


@bp.post("/refresh")
def refresh():
    """
    Use the refresh token to obtain new access and refresh tokens (rotation).
    The token is read from { "refresh_token": "<token>" } when given, else from the refresh cookie.
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK (returns new tokens)
      401:
        description: Missing, invalid, expired or rotated-out refresh token
    """
    session = _auth_service().refresh(_presented_refresh_token())
    return _session_response(session, 200)


@bp.post("/logout")
def logout():
    """
    Logout: forget the stored refresh token and clear the cookie
    ---
    tags:
      - Auth
    responses:
      204:
        description: ""
    """
    _auth_service().logout(_presented_refresh_token())
    response = current_app.response_class(status=204)
    response.delete_cookie(
        current_app.config["REFRESH_COOKIE_NAME"],
        httponly=True,
        secure=current_app.config["REFRESH_COOKIE_SECURE"],
        samesite=current_app.config["REFRESH_COOKIE_SAMESITE"],
    )
    return response
