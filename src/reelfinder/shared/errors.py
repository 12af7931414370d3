"""ReelFinder Error Handling Module

This module defines the error handling system for ReelFinder, providing
structured error classes with context information and the classified
errors the UI layer reacts to.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Classified Failures: every metadata failure maps to one taxonomy member
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Error codes for ReelFinder.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # Credential Errors
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"

    # TMDB API Errors
    TMDB_API_REQUEST_FAILED = "TMDB_API_REQUEST_FAILED"
    TMDB_API_EMPTY_RESULT = "TMDB_API_EMPTY_RESULT"
    TMDB_API_INVALID_RESPONSE = "TMDB_API_INVALID_RESPONSE"

    # Cache Errors
    CACHE_READ_FAILED = "CACHE_READ_FAILED"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"

    # Storage Errors
    STORAGE_INIT_FAILED = "STORAGE_INIT_FAILED"

    # Configuration Errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Application Errors
    APPLICATION_ERROR = "APPLICATION_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data so the context is always safe to serialize and log.

    Attributes:
        operation: Optional operation name that caused the error
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Coerce additional_data to primitives."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self) -> dict[str, Any]:
        """Export context as a dict with a guaranteed additional_data key."""
        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        data["additional_data"] = dict(self.additional_data or {})
        return data


class ReelFinderError(Exception):
    """Base exception class for all ReelFinder errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize ReelFinderError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error
        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to a dictionary for logging and JSON output."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(ReelFinderError):
    """Domain-specific errors.

    These errors occur when data or usage violates the rules of the
    metadata layer, e.g. a payload that does not have the expected shape.
    """


class InfrastructureError(ReelFinderError):
    """Infrastructure-related errors.

    These errors occur when interacting with external systems such as
    the network or the cache database.
    """


class ApplicationError(ReelFinderError):
    """Application-level errors such as configuration failures."""


class MissingCredentialError(DomainError):
    """No API key is configured; the caller must prompt for one."""

    def __init__(
        self,
        message: str = "TMDB API key is not configured",
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.MISSING_CREDENTIAL, message, context)


class TransportError(InfrastructureError):
    """Connectivity failure or non-success HTTP status.

    The transport's message is kept verbatim in ``message``.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.status = status
        super().__init__(
            ErrorCode.TMDB_API_REQUEST_FAILED,
            message,
            context,
            original_error,
        )


class EmptyResultError(DomainError):
    """The server answered a search with no usable body."""

    def __init__(
        self,
        message: str = "No results found.",
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.TMDB_API_EMPTY_RESULT, message, context)


class MalformedResponseError(DomainError):
    """A body was received but could not be decoded into the expected shape."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.TMDB_API_INVALID_RESPONSE,
            message,
            context,
            original_error,
        )


__all__ = [
    "ApplicationError",
    "DomainError",
    "EmptyResultError",
    "ErrorCode",
    "ErrorContext",
    "InfrastructureError",
    "MalformedResponseError",
    "MissingCredentialError",
    "PrimitiveContextValue",
    "ReelFinderError",
    "TransportError",
]
