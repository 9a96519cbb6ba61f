"""Coverview error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Workspace
- 4xxx: Coverage loading
- 5xxx: Command execution
- 9xxx: Internal

Fatal errors are raised to the caller. Per-record and per-root anomalies
found while indexing are not exceptions; they are collected as
``IndexDiagnostic`` records (see ``coverview.index.diagnostics``).
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003

    # Workspace (3xxx)
    WORKSPACE_EMPTY = 3001

    # Coverage loading (4xxx)
    COVERAGE_LOAD_FAILED = 4001

    # Command execution (5xxx)
    COMMAND_FAILED = 5001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class CoverviewError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CoverviewError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def missing_required(cls, field: str, root: str | None = None) -> "ConfigError":
        details: dict[str, Any] = {"field": field}
        if root is not None:
            details["root"] = root
        return cls(
            code=ErrorCode.CONFIG_MISSING_REQUIRED,
            message=f"Missing required config field: {field}",
            details=details,
        )


class EmptyWorkspaceError(CoverviewError):
    """No monitored roots were supplied."""

    @classmethod
    def create(cls, operation: str) -> "EmptyWorkspaceError":
        return cls(
            code=ErrorCode.WORKSPACE_EMPTY,
            message=f"Empty workspace: no monitored roots for {operation}",
            details={"operation": operation},
        )


class LoadError(CoverviewError):
    """Coverage could not be loaded for one root."""

    @classmethod
    def for_root(cls, root: str, reason: str, **details: Any) -> "LoadError":
        return cls(
            code=ErrorCode.COVERAGE_LOAD_FAILED,
            message=f"Failed to load coverage for {root}: {reason}",
            retryable=True,
            details={"root": root, "reason": reason, **details},
        )


class CommandError(CoverviewError):
    """A coverage command exited unsuccessfully."""

    @classmethod
    def failed(cls, command: str, returncode: int | None, stderr: str) -> "CommandError":
        return cls(
            code=ErrorCode.COMMAND_FAILED,
            message=f"Command '{command}' failed with exit code {returncode}",
            details={"command": command, "returncode": returncode, "stderr": stderr},
        )

    @property
    def stderr(self) -> str:
        return str(self.details.get("stderr", ""))


class InternalError(CoverviewError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
