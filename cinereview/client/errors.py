"""
Error taxonomy of the CineReview client library.

Error Taxonomy:
- TransientError: Network unavailable or server-side failure (timeouts,
  connection errors, 5xx); the only error that triggers demo-mode fallback
- AuthError: Missing, invalid or expired token, or insufficient role (401, 403)
- NotFoundError: Movie or review is missing or removed (404)
- ConflictError: Duplicate review or watchlist entry (409)
- ClientValidationError: Request rejected as malformed (400)
- StorageError: The demo store could not persist its state; nothing changed
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ClientErrorType(Enum):
    """Classification of client errors."""
    TRANSIENT = "transient"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    STORAGE = "storage"
    UNKNOWN = "unknown"


class ClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, error_type: ClientErrorType, status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.original_error = original_error
        super().__init__(message)


class TransientError(ClientError):
    """Temporary failure; the demo store may serve the call instead."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        super().__init__(message, ClientErrorType.TRANSIENT, status_code, original_error)


class AuthError(ClientError):
    """
    Authentication or authorization error.

    `reason` mirrors the server's error.reason ("missing", "invalid",
    "expired", "user_not_found", "invalid_credentials") when present.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message, ClientErrorType.AUTH, status_code)
        self.reason = reason


class NotFoundError(ClientError):
    """Resource not found error."""

    def __init__(self, message: str, status_code: Optional[int] = 404):
        super().__init__(message, ClientErrorType.NOT_FOUND, status_code)


class ConflictError(ClientError):
    """Request collides with existing state; `code` names the collision."""

    def __init__(self, message: str, code: Optional[str] = None, status_code: Optional[int] = 409):
        super().__init__(message, ClientErrorType.CONFLICT, status_code)
        self.code = code


class ClientValidationError(ClientError):
    """Request input rejected; `details` lists the offending fields."""

    def __init__(self, message: str, details: Optional[List[Dict[str, str]]] = None,
                 status_code: Optional[int] = 400):
        super().__init__(message, ClientErrorType.VALIDATION, status_code)
        self.details = details or []


class StorageError(ClientError):
    """Local demo state could not be written; the store kept its previous state."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message, ClientErrorType.STORAGE, original_error=original_error)


def error_from_body(status_code: int, body: Dict[str, Any]) -> ClientError:
    """
    Build the client error matching a server error response.

    Args:
        status_code: HTTP status of the response
        body: Decoded JSON body, `{"status": "error", "error": {...}}`
    """
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        error = {}
    message = error.get("message") or f"Request failed with status {status_code}"

    if status_code in (401, 403):
        return AuthError(message, status_code, error.get("reason"))
    if status_code == 404:
        return NotFoundError(message, status_code)
    if status_code == 409:
        return ConflictError(message, error.get("code"), status_code)
    if status_code == 400:
        return ClientValidationError(message, error.get("details"), status_code)
    if 500 <= status_code < 600:
        return TransientError(message, status_code)
    return ClientError(message, ClientErrorType.UNKNOWN, status_code)
