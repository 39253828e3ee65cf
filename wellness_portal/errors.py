"""Centralised error handling and custom exceptions.

This module defines custom exception classes and provides Flask error
handlers that serialise them into JSON responses. By using custom
exceptions, the service layer can signal specific error conditions
without coupling itself to HTTP response codes. The Flask app
registers these handlers during application factory initialisation.
"""
from __future__ import annotations

import logging

from flask import jsonify
from marshmallow import ValidationError as SchemaValidationError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class PortalError(Exception):
    """Base class for errors rendered as JSON by the portal."""

    code = "ERROR"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def payload(self) -> dict:
        return {"code": self.code, "message": self.message}

    def to_response(self, status_code: int | None = None):
        return jsonify({"error": self.payload()}), status_code or self.status_code


class ValidationError(PortalError):
    """Raised when input validation fails."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, message: str, fields: dict | None = None) -> None:
        super().__init__(message)
        self.fields = fields or {}

    def payload(self) -> dict:
        return {"code": self.code, "message": self.message, "fields": self.fields}


class UnauthorizedError(PortalError):
    """Raised when credentials are missing or wrong."""

    code = "UNAUTHORIZED"
    status_code = 401


class ForbiddenError(PortalError):
    """Raised when the current user may not touch a resource."""

    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)


class NotFoundError(PortalError):
    """Raised when a requested resource cannot be found."""

    code = "NOT_FOUND"
    status_code = 404


class ConflictError(PortalError):
    """Raised when a uniqueness or state conflict occurs."""

    code = "CONFLICT"
    status_code = 409


def register_error_handlers(app) -> None:
    """Register custom error handlers on the given Flask app."""
    @app.errorhandler(PortalError)
    def handle_portal_error(err: PortalError):
        return err.to_response()

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(err: SchemaValidationError):
        fields = err.messages if isinstance(err.messages, dict) else {"_schema": err.messages}
        return ValidationError("Invalid request body.", fields).to_response()

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        response = {
            "error": {
                "code": (err.name or "HTTP_ERROR").upper().replace(" ", "_"),
                "message": err.description,
            }
        }
        return jsonify(response), err.code

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        logger.exception("Unhandled server error")
        return jsonify({"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}}), 500
