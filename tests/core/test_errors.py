"""Tests for error types and codes."""

import pytest

from coverview.core.errors import (
    CommandError,
    ConfigError,
    CoverviewError,
    EmptyWorkspaceError,
    ErrorCode,
    InternalError,
    LoadError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_MISSING_REQUIRED, 2000),
            (ErrorCode.WORKSPACE_EMPTY, 3000),
            (ErrorCode.COVERAGE_LOAD_FAILED, 4000),
            (ErrorCode.COMMAND_FAILED, 5000),
            (ErrorCode.INTERNAL_ERROR, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        assert expected_range <= code.value < expected_range + 1000


class TestCoverviewError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = CoverviewError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_includes_code_and_name(self) -> None:
        """String form carries the numeric code and its name."""
        error = CoverviewError(code=ErrorCode.INTERNAL_ERROR, message="boom")

        assert str(error) == "[9001] INTERNAL_ERROR: boom"

    def test_given_error_when_raised_then_catchable_as_exception(self) -> None:
        """Errors are regular exceptions."""
        with pytest.raises(CoverviewError):
            raise InternalError.unexpected("bad state")


class TestFactories:
    """Factory classmethod tests."""

    def test_given_missing_command_when_missing_required_then_names_field_and_root(self) -> None:
        """Missing-field errors record the field and the root."""
        # When
        error = ConfigError.missing_required("coverage_command", root="/work/app")

        # Then
        assert error.code == ErrorCode.CONFIG_MISSING_REQUIRED
        assert error.details == {"field": "coverage_command", "root": "/work/app"}
        assert "coverage_command" in error.message

    def test_given_operation_when_empty_workspace_then_message_names_operation(self) -> None:
        """Empty workspace errors say which operation had no roots."""
        error = EmptyWorkspaceError.create("coverage generation")

        assert error.code == ErrorCode.WORKSPACE_EMPTY
        assert error.message == "Empty workspace: no monitored roots for coverage generation"

    def test_given_load_failure_when_for_root_then_retryable(self) -> None:
        """Load failures are transient and may be retried."""
        error = LoadError.for_root("/work/app", "invalid JSON", document="records.json")

        assert error.retryable is True
        assert error.details["document"] == "records.json"
        assert error.details["reason"] == "invalid JSON"

    def test_given_failed_command_when_created_then_stderr_exposed(self) -> None:
        """Command failures keep the command's stderr for display."""
        error = CommandError.failed("npm test", 2, "tests failed\n")

        assert error.code == ErrorCode.COMMAND_FAILED
        assert error.stderr == "tests failed\n"
        assert error.details["returncode"] == 2
        assert "exit code 2" in error.message
