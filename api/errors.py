import logging

from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import storage
from utils.exceptions import APIError

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    415: "UNSUPPORTED_MEDIA_TYPE",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        if err.status >= 500:
            logger.error("%s: %s", err.code, err.message)
        else:
            logger.debug("%s %s: %s", err.status, err.code, err.message)
        return error_response(err.code, err.message, err.status, details=err.details)

    # Marshmallow validation errors: missing/malformed input is a 400
    @app.errorhandler(SchemaValidationError)
    def handle_validation_error(err: SchemaValidationError):
        # err.messages contains field-level details
        details = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=details)

    # Integrity errors (unique constraints, FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        storage.rollback()
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        logger.warning("integrity error: %s", message)
        details = {"db_error": message} if current_app.debug else None
        if "unique" in lower_msg:
            return error_response("VALIDATION_ERROR", "Resource already exists.", 400, details=details)
        if "foreign key" in lower_msg:
            return error_response("BAD_REQUEST", "Foreign key constraint failed.", 400, details=details)
        if "check constraint" in lower_msg or "constraint failed" in lower_msg:
            return error_response("BAD_REQUEST", "Check constraint failed.", 400, details=details)
        return error_response("BAD_REQUEST", "Integrity error.", 400, details=details)

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(err: SQLAlchemyError):
        storage.rollback()
        logger.exception("Database error", exc_info=err)
        return error_response("DATABASE_ERROR", "Database error", 500)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(HTTP_ERROR_CODES.get(status, "HTTP_ERROR"), err.description, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        if current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
