from __future__ import annotations

from typing import Tuple
from flask import Blueprint, request, jsonify, abort, current_app

from models.schemas.user import UserIdentitySchema, UserListOutSchema
from utils.decorators import jwt_required, current_user

MAX_LIMIT = 100

bp = Blueprint("users", __name__)

identity_schema = UserIdentitySchema()
user_list_out_schema = UserListOutSchema(many=True)


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


@bp.get("/users/me")
@jwt_required()
def me():
    """
    Get the identity carried by the access token.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify(
        {
            "data": identity_schema.dump(current_user())
        }
    ), 200


@bp.get("/users")
@jwt_required()
def list_users():
    """
    List all users - authenticated
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    page, limit = parse_pagination()
    rows, total = current_app.extensions["credential_store"].list_users(page, limit)
    return jsonify(
        {
            "data": user_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total}
        }
    ), 200
