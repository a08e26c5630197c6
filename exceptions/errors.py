"""
Custom exception classes for the application.

Every error carries a stable code, a human-readable message and an HTTP
status so routes can return a uniform error envelope.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "BOT_TASK_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class ValidationError(AppError):
    """Validation failed (422 unless overridden)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None,
        status_code: int = 422
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=status_code,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# TRADE POTENTIAL ERRORS
# ===================

class InvalidPotentialStatusError(ValidationError):
    """Unknown trade potential status filter."""

    def __init__(self, status: str, valid: list[str]):
        super().__init__(
            code="TRADE_POTENTIAL_INVALID_STATUS",
            message=f"Status must be one of: {', '.join(valid)}",
            details={"provided": status, "valid": valid}
        )


# ===================
# BOT ERRORS
# ===================

class EmptyBotMessageError(ValidationError):
    """Bot test endpoint called without a message."""

    def __init__(self):
        super().__init__(
            code="BOT_MESSAGE_REQUIRED",
            message="Message is required",
            status_code=400
        )


class TwilioError(ExternalServiceError):
    """Twilio API error."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="twilio",
            message=message,
            details=details
        )
