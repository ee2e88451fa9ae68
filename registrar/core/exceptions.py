"""
Custom exceptions for the registrar platform.
"""

from typing import Optional, Any, Dict


class RegistrarException(Exception):
    """Base exception for all registrar errors."""

    default_code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}

    def to_response(self) -> Dict[str, Any]:
        """Convert to the API error response format."""
        error: Dict[str, Any] = {"code": self.error_code, "message": self.message}
        if self.details:
            error["details"] = self.details
        return {"success": False, "error": error}


class ValidationError(RegistrarException):
    """Raised when input violates a stated precondition."""
    default_code = "VALIDATION_ERROR"
    status_code = 400


class InvalidGradeError(ValidationError):
    """Raised when a value is not one of the known letter grades."""
    pass


class ConflictError(RegistrarException):
    """Raised when an operation would violate a uniqueness invariant."""
    default_code = "CONFLICT"
    status_code = 409


class NotFoundError(RegistrarException):
    """Raised when a referenced entity does not exist."""
    default_code = "NOT_FOUND"
    status_code = 404


class PersistenceError(RegistrarException):
    """Raised when persistence operations fail."""
    pass


class ConfigurationError(RegistrarException):
    """Raised when configuration is invalid."""
    default_code = "CONFIGURATION_ERROR"
