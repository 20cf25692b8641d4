from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
import logging

from services.exceptions import ApiError

logger = logging.getLogger(__name__)


def error_response(error: str, message: str, status: int, details=None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Typed domain errors: BadRequest family -> 400, Unauthorized -> 401, ...
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        logger.info("%s %s: %s", err.status, err.code, err.message)
        if err.status >= 500:
            logger.error("Internal API error", exc_info=err)
            return error_response(err.code, ApiError.default_message, err.status)
        return error_response(err.code, err.message, err.status, details=err.errors)

    # Malformed input maps to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=err.messages)

    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response("METHOD_NOT_ALLOWED", e.description, 405)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        return error_response("BAD_REQUEST", err.description, err.code or 400)

    # 500 Internal Error (catch-all): always logged, never leaks details outside debug
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logging.exception("Unhandled exception", exc_info=err)
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
