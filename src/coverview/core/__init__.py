"""Core module exports."""

from coverview.core.errors import (
    CommandError,
    ConfigError,
    CoverviewError,
    EmptyWorkspaceError,
    ErrorCode,
    InternalError,
    LoadError,
)
from coverview.core.logging import (
    clear_refresh_id,
    configure_logging,
    get_logger,
    get_refresh_id,
    set_refresh_id,
)

__all__ = [
    # Errors
    "CommandError",
    "ConfigError",
    "CoverviewError",
    "EmptyWorkspaceError",
    "ErrorCode",
    "InternalError",
    "LoadError",
    # Logging
    "clear_refresh_id",
    "configure_logging",
    "get_logger",
    "get_refresh_id",
    "set_refresh_id",
]
