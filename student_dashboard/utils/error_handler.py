# student_dashboard/utils/error_handler.py
"""
JSON error handlers for the API
"""

from flask import jsonify
from werkzeug.exceptions import HTTPException

from student_dashboard.models import db
from student_dashboard.records.errors import (
    CSVParseError,
    ImportModeRequired,
    NoteNotFoundError,
    RecordValidationError,
    StudentNotFoundError,
    TransportError,
)
from student_dashboard.services import AuthError, NotificationNotFoundError

AUTH_ERROR_STATUS = {
    "auth/email-already-in-use": 409,
    "auth/invalid-credential": 400,
}


def _error_response(message, status_code, **extra):
    payload = {"message": message}
    payload.update(extra)
    return jsonify(payload), status_code


def register_error_handlers(app):
    """Translate domain exceptions and HTTP errors into JSON bodies"""

    @app.errorhandler(StudentNotFoundError)
    @app.errorhandler(NoteNotFoundError)
    @app.errorhandler(NotificationNotFoundError)
    def handle_not_found(error):
        app.logger.info(f"Lookup failed: {error}")
        message = error.args[0] if error.args else str(error)
        return _error_response(message, 404)

    @app.errorhandler(RecordValidationError)
    def handle_validation_error(error):
        return _error_response(str(error), 400, fields=list(error.fields))

    @app.errorhandler(CSVParseError)
    def handle_csv_parse_error(error):
        app.logger.warning(f"CSV import rejected: {error}")
        return _error_response(str(error), 400)

    @app.errorhandler(ImportModeRequired)
    def handle_import_mode_required(error):
        return _error_response(
            str(error),
            409,
            existing=error.existing_count,
            incoming=error.incoming_count,
        )

    @app.errorhandler(TransportError)
    def handle_transport_error(error):
        app.logger.error(f"Storage or transport failure: {error}")
        return _error_response(str(error), 503)

    @app.errorhandler(AuthError)
    def handle_auth_error(error):
        return _error_response(str(error), AUTH_ERROR_STATUS.get(error.code, 401), code=error.code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return _error_response(error.description or error.name, error.code)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Unhandled error: {error}", exc_info=True)
        return _error_response("An internal error occurred", 500)
