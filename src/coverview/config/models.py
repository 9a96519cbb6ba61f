"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (COVERVIEW__SECTION__KEY)
3. Per-root YAML (<root>/.coverview/config.yaml)
4. Built-in defaults (this file)

Environment Variable Format:
    COVERVIEW__<SECTION>__<KEY>=<VALUE>

Examples:
    COVERVIEW__LOGGING__LEVEL=DEBUG
    COVERVIEW__ROOT__AUTO_REFRESH=false
    COVERVIEW__ROOT__AUTO_REFRESH_DEBOUNCE_MS=500
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        COVERVIEW__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs every reconciled path.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class RootConfig(BaseModel):
    """Settings for a single monitored root.

    Env vars:
        COVERVIEW__ROOT__AUTO_REFRESH: Forward coverage file events (default: true)
        COVERVIEW__ROOT__AUTO_REFRESH_DEBOUNCE_MS: Throttle window for file events
        COVERVIEW__ROOT__COVERAGE_COMMAND: Shell command that regenerates coverage
    """

    auto_refresh: bool = Field(
        default=True,
        description="Refresh the tree when coverage files change. "
        "Manual and configuration refreshes happen regardless.",
    )
    auto_refresh_debounce_ms: int = Field(
        default=3000,
        description="Minimum interval between two file-triggered refreshes (ms). "
        "Lower values repaint faster during long coverage runs.",
    )
    coverage_file_patterns: list[str] = Field(
        default_factory=lambda: ["coverage"],
        description="Directory names or globs holding coverage output. "
        "Each entry is watched as **/<entry>/**.",
    )
    sufficient_coverage_threshold: float = Field(
        default=80.0,
        description="Percentage at or above which coverage is HIGH.",
    )
    low_coverage_threshold: float = Field(
        default=50.0,
        description="Percentage at or above which coverage is MEDIUM.",
    )
    coverage_command: str | None = Field(
        default=None,
        description="Shell command run from the root to regenerate coverage.",
    )
    include_dirs: list[str] = Field(
        default_factory=list,
        description="Dependency directories (e.g. node_modules) to keep in file listings.",
    )

    @field_validator("auto_refresh_debounce_ms")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"Debounce must be >= 0 ms, got {v}")
        return v

    @field_validator("sufficient_coverage_threshold", "low_coverage_threshold")
    @classmethod
    def validate_percentage(cls, v: float) -> float:
        if not (0.0 <= v <= 100.0):
            raise ValueError(f"Threshold must be 0-100, got {v}")
        return v

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "RootConfig":
        if self.low_coverage_threshold > self.sufficient_coverage_threshold:
            raise ValueError(
                "low_coverage_threshold must not exceed sufficient_coverage_threshold "
                f"({self.low_coverage_threshold} > {self.sufficient_coverage_threshold})"
            )
        return self

    @property
    def watch_patterns(self) -> list[str]:
        """Globs (relative to the root) matched against changed files."""
        patterns: list[str] = []
        for entry in self.coverage_file_patterns:
            entry = entry.strip("/")
            if not entry:
                continue
            patterns.append(f"**/{entry}/**")
            patterns.append(entry)
        return patterns


class CoverviewConfig(BaseModel):
    """Root configuration for coverview.

    All settings can be configured via:
    1. Environment variables: COVERVIEW__SECTION__KEY
    2. Per-root YAML config file
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    root: RootConfig = Field(default_factory=RootConfig)
