from flask import current_app, jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from school_library.extensions import db, jwt
from school_library.utils.errors import LibraryError


def _json_error(message, code=400):
    return jsonify({"success": False, "message": message}), code


def register_error_handlers(app):
    @app.errorhandler(LibraryError)
    def handle_library_error(e):
        current_app.logger.warning(f"[errors] {type(e).__name__}: {e.message}")
        return _json_error(e.message, e.status_code)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e):
        db.session.rollback()
        current_app.logger.warning(f"[errors] integrity error: {e.orig}")
        return _json_error("Duplicate or conflicting record", 409)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return _json_error(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        current_app.logger.exception(f"[errors] unhandled: {e}")
        if current_app.config.get("EXPOSE_INTERNAL_ERRORS") or current_app.debug:
            return _json_error(f"Backend Error: {e}", 500)
        return _json_error("Internal server error", 500)

    @jwt.unauthorized_loader
    def missing_token(reason):
        return _json_error("Access token required", 401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return _json_error("Invalid token", 401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return _json_error("Token expired", 401)
