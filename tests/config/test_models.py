"""Tests for config/models.py module.

Covers:
- LogOutputConfig model
- LoggingConfig model
- RootConfig model and its watch patterns
- CoverviewConfig root model
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from coverview.config.models import CoverviewConfig, LoggingConfig, LogOutputConfig, RootConfig


class TestLogOutputConfig:
    """Tests for LogOutputConfig model."""

    def test_defaults(self) -> None:
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    def test_absolute_path_destination(self) -> None:
        config = LogOutputConfig(destination="/var/log/coverview.log")
        assert config.destination == "/var/log/coverview.log"

    def test_relative_path_fails(self) -> None:
        """Relative path is rejected."""
        with pytest.raises(ValidationError, match="absolute path"):
            LogOutputConfig(destination="logs/app.log")


class TestLoggingConfig:
    """Tests for LoggingConfig model."""

    def test_defaults(self) -> None:
        config = LoggingConfig()
        assert config.level == "INFO"
        assert len(config.outputs) == 1

    def test_invalid_level_fails(self) -> None:
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")  # type: ignore[arg-type]


class TestRootConfig:
    """Tests for RootConfig model."""

    def test_defaults(self) -> None:
        """Defaults match the documented settings."""
        config = RootConfig()
        assert config.auto_refresh is True
        assert config.auto_refresh_debounce_ms == 3000
        assert config.coverage_file_patterns == ["coverage"]
        assert config.sufficient_coverage_threshold == 80.0
        assert config.low_coverage_threshold == 50.0
        assert config.coverage_command is None
        assert config.include_dirs == []

    def test_zero_debounce_allowed(self) -> None:
        """A zero debounce forwards every file event."""
        assert RootConfig(auto_refresh_debounce_ms=0).auto_refresh_debounce_ms == 0

    def test_negative_debounce_fails(self) -> None:
        with pytest.raises(ValidationError, match="Debounce"):
            RootConfig(auto_refresh_debounce_ms=-1)

    @pytest.mark.parametrize("value", [-0.1, 100.5])
    def test_threshold_out_of_range_fails(self, value: float) -> None:
        with pytest.raises(ValidationError, match="0-100"):
            RootConfig(sufficient_coverage_threshold=value)

    def test_low_above_sufficient_fails(self) -> None:
        """Thresholds must be ordered."""
        with pytest.raises(ValidationError, match="must not exceed"):
            RootConfig(sufficient_coverage_threshold=60, low_coverage_threshold=70)

    def test_equal_thresholds_allowed(self) -> None:
        config = RootConfig(sufficient_coverage_threshold=70, low_coverage_threshold=70)
        assert config.low_coverage_threshold == config.sufficient_coverage_threshold

    def test_watch_patterns_match_directory_and_contents(self) -> None:
        """Each entry watches the entry itself and everything below it."""
        config = RootConfig(coverage_file_patterns=["coverage", "/reports/"])
        assert config.watch_patterns == [
            "**/coverage/**",
            "coverage",
            "**/reports/**",
            "reports",
        ]

    def test_watch_patterns_skip_empty_entries(self) -> None:
        assert RootConfig(coverage_file_patterns=["", "/"]).watch_patterns == []


class TestCoverviewConfig:
    """Tests for the root model."""

    def test_sections_default(self) -> None:
        config = CoverviewConfig()
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.root, RootConfig)

    def test_nested_dict_input(self) -> None:
        config = CoverviewConfig(root={"auto_refresh": False})  # type: ignore[arg-type]
        assert config.root.auto_refresh is False
