from flask import Blueprint, current_app
from sqlalchemy import text

bp = Blueprint("health", __name__)

API_VERSION = "1.0.0"


@bp.get("/health")
def health():
    """
    Health check, including a round trip to the database
    ---
    tags:
      - Health
    responses:
      200:
        description: API and database are up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            database:
              type: string
              example: ok
            version:
              type: string
              example: 1.0.0
    """
    session = current_app.extensions["storage"].get_session()
    session.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok", "version": API_VERSION}, 200
