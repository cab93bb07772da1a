"""
Domain exceptions raised by the services.

Services never raise HTTPException; main.py maps each kind to its status code.
"""
from typing import Any, Dict, Optional


class LeavePortalError(Exception):
    """Base class for all expected, caller-facing failures."""

    status_code = 500
    error_code = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(LeavePortalError):
    """Malformed or missing input."""

    status_code = 400
    error_code = "validation_error"


class Unauthorized(LeavePortalError):
    """No caller identity present."""

    status_code = 401
    error_code = "unauthorized"

    def __init__(self, message: str = "Could not validate credentials", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class Forbidden(LeavePortalError):
    """Caller lacks the role or ownership the operation requires."""

    status_code = 403
    error_code = "forbidden"


class NotFound(LeavePortalError):
    """Entity does not exist or is outside the caller's visible scope."""

    status_code = 404
    error_code = "not_found"


class Conflict(LeavePortalError):
    """Valid request, but the entity's current state disallows it."""

    status_code = 409
    error_code = "conflict"
