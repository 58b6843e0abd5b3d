"""
API error types and the Flask handlers that render them as JSON.

Every error response is an object of the form
``{"message": str, "error": str?, ...}``.
"""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base class for errors that map directly to an HTTP response"""
    status_code = 500

    def __init__(self, message, error=None, **payload):
        super().__init__(message)
        self.message = message
        self.error = error
        self.payload = payload

    def to_dict(self):
        data = {'message': self.message}
        if self.error:
            data['error'] = self.error
        data.update(self.payload)
        return data


class ValidationError(APIError):
    """Missing or malformed input"""
    status_code = 400


class PolicyError(APIError):
    """Request is well-formed but not allowed in the record's current state"""
    status_code = 400


class AuthenticationError(APIError):
    status_code = 401


class PermissionDenied(APIError):
    status_code = 403


class NotFound(APIError):
    status_code = 404


def register_error_handlers(app):
    """Attach JSON error handlers to the application"""
    from washline import db

    @app.errorhandler(APIError)
    def handle_api_error(e):
        # Nothing half-applied may reach a later commit
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(e):
        db.session.rollback()
        logger.exception("Database error")
        return jsonify({'message': 'Database operation failed', 'error': str(e)}), 500

    @app.errorhandler(429)
    def ratelimit_handler(e):
        # Retry-After header is set by Flask-Limiter; read it back.
        retry_after = e.get_headers().get("Retry-After") if hasattr(e, "get_headers") else None
        retry_after_seconds = int(retry_after) if retry_after else 60
        return jsonify({
            'message': 'Too many requests. Please try again later.',
            'retry_after': retry_after_seconds,
        }), 429

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({'message': e.description, 'error': e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        logger.exception("Unhandled error")
        return jsonify({'message': 'Internal server error', 'error': str(e)}), 500
