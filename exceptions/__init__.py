"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Trade potential
    InvalidPotentialStatusError,

    # Bot
    EmptyBotMessageError,
    TwilioError,
)

__all__ = [
    # Base
    "AppError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Trade potential
    "InvalidPotentialStatusError",

    # Bot
    "EmptyBotMessageError",
    "TwilioError",
]
