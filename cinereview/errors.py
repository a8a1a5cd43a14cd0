"""
Error taxonomy for the CineReview service layer.

Every failure a request can hit is raised as a subclass of ServiceError and
rendered by the Flask error handlers registered in `register_error_handlers`.

Error Taxonomy:
- ValidationFailedError: Malformed or out-of-range input (400)
- AuthenticationError: Missing, invalid or expired credential (401)
- PermissionDeniedError: Valid identity, insufficient privilege (403)
- NotFoundError: Inactive or nonexistent movie/review/user (404)
- ConflictError: Duplicate review, watchlist entry or username (409)
- StoreError: Persistent store failure, nothing partially applied (500)
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from cinereview.logging_config import get_logger

logger = get_logger(__name__)


class ErrorType(Enum):
    """Machine-distinguishable error categories."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    STORE = "store"


class ServiceError(Exception):
    """Base exception for all service errors."""

    status_code = 500

    def __init__(self, message: str, error_type: ErrorType, status_code: Optional[int] = None):
        self.message = message
        self.error_type = error_type
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.error_type.value, "message": self.message}


class ValidationFailedError(ServiceError):
    """Request input failed validation; `details` lists the offending fields."""

    status_code = 400

    def __init__(self, message: str, details: Optional[List[Dict[str, str]]] = None):
        super().__init__(message, ErrorType.VALIDATION)
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["details"] = self.details
        return data

    @classmethod
    def from_pydantic(cls, error: ValidationError) -> "ValidationFailedError":
        """Build a per-field validation error from a pydantic ValidationError."""
        details = []
        for item in error.errors():
            field = ".".join(str(part) for part in item.get("loc", ())) or "body"
            message = item.get("msg", "Invalid value")
            # pydantic prefixes custom ValueError messages
            if message.startswith("Value error, "):
                message = message[len("Value error, "):]
            details.append({"field": field, "message": message})
        return cls("Validation failed", details)


class AuthenticationError(ServiceError):
    """
    Missing or unusable credential.

    `reason` distinguishes the cause: "missing", "invalid", "expired",
    "user_not_found" or "invalid_credentials".
    """

    status_code = 401

    def __init__(self, message: str, reason: str):
        super().__init__(message, ErrorType.AUTHENTICATION)
        self.reason = reason

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        return data


class PermissionDeniedError(ServiceError):
    """Authenticated caller lacks the privilege for this resource."""

    status_code = 403

    def __init__(self, message: str):
        super().__init__(message, ErrorType.AUTHORIZATION)


class NotFoundError(ServiceError):
    """Referenced resource is missing or no longer active."""

    status_code = 404

    def __init__(self, message: str):
        super().__init__(message, ErrorType.NOT_FOUND)


class ConflictError(ServiceError):
    """Request collides with existing state; `code` names the collision."""

    status_code = 409

    def __init__(self, message: str, code: str):
        super().__init__(message, ErrorType.CONFLICT)
        self.code = code

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["code"] = self.code
        return data


class StoreError(ServiceError):
    """Persistent store failure. The message never carries internal details."""

    status_code = 500

    def __init__(self, message: str = "A storage error occurred. Please try again.",
                 original_error: Optional[Exception] = None):
        super().__init__(message, ErrorType.STORE)
        self.original_error = original_error


def error_response(error: ServiceError):
    """Build the JSON error body and status code for a ServiceError."""
    return jsonify({"status": "error", "error": error.to_dict()}), error.status_code


def register_error_handlers(app: Flask):
    """
    Register JSON error handlers on the Flask application.

    Args:
        app: Flask application instance
    """

    @app.errorhandler(ServiceError)
    def handle_service_error(error: ServiceError):
        log = logger.error if error.status_code >= 500 else logger.info
        log(
            "request_rejected",
            error_type=error.error_type.value,
            status_code=error.status_code,
            message=error.message,
        )
        return error_response(error)

    @app.errorhandler(ValidationError)
    def handle_pydantic_error(error: ValidationError):
        return handle_service_error(ValidationFailedError.from_pydantic(error))

    @app.errorhandler(404)
    def handle_unknown_route(error):
        return error_response(NotFoundError("Resource not found"))

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return jsonify({
            "status": "error",
            "error": {"type": "method_not_allowed", "message": "Method not allowed"},
        }), 405

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        if isinstance(error, HTTPException):
            return jsonify({
                "status": "error",
                "error": {"type": "http", "message": error.description},
            }), error.code
        logger.error("unhandled_exception", error=str(error), exc_info=True)
        return error_response(StoreError("An unexpected error occurred while processing your request."))
