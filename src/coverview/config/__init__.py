"""Config module exports."""

from coverview.config.loader import load_config, load_root_config
from coverview.config.models import (
    CoverviewConfig,
    LoggingConfig,
    LogOutputConfig,
    RootConfig,
)
from coverview.config.store import ConfigStore

__all__ = [
    "load_config",
    "load_root_config",
    "ConfigStore",
    "CoverviewConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "RootConfig",
]
