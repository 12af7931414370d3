"""
Tests for ReelFinder error handling system.

This module contains unit tests for the error hierarchy defined in
reelfinder.shared.errors, including the classified metadata failures.
"""

from dataclasses import FrozenInstanceError
from decimal import Decimal
from enum import Enum
from pathlib import Path

import pytest

from reelfinder.shared.errors import (
    ApplicationError,
    DomainError,
    EmptyResultError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    MalformedResponseError,
    MissingCredentialError,
    ReelFinderError,
    TransportError,
)


class Color(Enum):
    RED = "red"


class TestErrorContext:
    """Test cases for ErrorContext frozen dataclass."""

    def test_empty_context(self):
        context = ErrorContext()
        assert context.operation is None
        assert context.additional_data is None
        assert context.safe_dict() == {"additional_data": {}}

    def test_context_is_frozen(self):
        context = ErrorContext(operation="search_movies")
        with pytest.raises(FrozenInstanceError):
            context.operation = "other"  # type: ignore[misc]

    def test_additional_data_coerced_to_primitives(self):
        """Path, Enum and Decimal values are converted."""
        context = ErrorContext(
            operation="cache_put",
            additional_data={
                "path": Path("cache/db.sqlite"),
                "color": Color.RED,
                "ratio": Decimal("0.5"),
                "count": 3,
            },
        )

        assert context.additional_data == {
            "path": str(Path("cache/db.sqlite")),
            "color": "red",
            "ratio": 0.5,
            "count": 3,
        }

    def test_unconvertible_value_rejected(self):
        with pytest.raises(TypeError, match="Cannot coerce"):
            ErrorContext(additional_data={"items": [1, 2]})

    def test_non_dict_additional_data_rejected(self):
        with pytest.raises(TypeError, match="must be dict"):
            ErrorContext(additional_data=["not", "a", "dict"])  # type: ignore[arg-type]

    def test_safe_dict_includes_operation(self):
        context = ErrorContext(operation="search_movies", additional_data={"query": "Heat"})
        assert context.safe_dict() == {
            "operation": "search_movies",
            "additional_data": {"query": "Heat"},
        }


class TestReelFinderError:
    """Test cases for the base error class."""

    def test_str_includes_code(self):
        error = ReelFinderError(ErrorCode.APPLICATION_ERROR, "boom")
        assert str(error) == "APPLICATION_ERROR: boom"

    def test_default_context(self):
        error = ReelFinderError(ErrorCode.APPLICATION_ERROR, "boom")
        assert error.context == ErrorContext()
        assert error.original_error is None

    def test_to_dict(self):
        cause = ValueError("bad value")
        error = ApplicationError(
            ErrorCode.CONFIGURATION_ERROR,
            "Failed to load configuration",
            context=ErrorContext(operation="load_settings"),
            original_error=cause,
        )

        assert error.to_dict() == {
            "code": "CONFIGURATION_ERROR",
            "message": "Failed to load configuration",
            "context": {"operation": "load_settings", "additional_data": {}},
            "original_error": "bad value",
        }

    @pytest.mark.parametrize("cls", [DomainError, InfrastructureError, ApplicationError])
    def test_layers_are_reelfinder_errors(self, cls):
        assert issubclass(cls, ReelFinderError)


class TestClassifiedErrors:
    """The four failure kinds a metadata operation can end with."""

    def test_missing_credential(self):
        error = MissingCredentialError()
        assert isinstance(error, DomainError)
        assert error.code is ErrorCode.MISSING_CREDENTIAL
        assert error.message == "TMDB API key is not configured"

    def test_transport_error_keeps_message_verbatim(self):
        error = TransportError("HTTP 401: Unauthorized", status=401)
        assert isinstance(error, InfrastructureError)
        assert error.code is ErrorCode.TMDB_API_REQUEST_FAILED
        assert error.message == "HTTP 401: Unauthorized"
        assert error.status == 401

    def test_transport_error_without_status(self):
        error = TransportError("Request timeout")
        assert error.status is None

    def test_empty_result(self):
        error = EmptyResultError()
        assert isinstance(error, DomainError)
        assert error.code is ErrorCode.TMDB_API_EMPTY_RESULT
        assert error.message == "No results found."

    def test_malformed_response_chains_cause(self):
        cause = ValueError("unexpected token")
        error = MalformedResponseError("Response is not valid JSON", original_error=cause)
        assert isinstance(error, DomainError)
        assert error.code is ErrorCode.TMDB_API_INVALID_RESPONSE
        assert error.original_error is cause

    def test_kinds_are_distinguishable(self):
        errors = [
            MissingCredentialError(),
            TransportError("HTTP 500: Internal Server Error"),
            EmptyResultError(),
            MalformedResponseError("bad shape"),
        ]
        assert len({error.code for error in errors}) == 4
