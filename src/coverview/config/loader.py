"""Configuration loading with pydantic-settings.

Supports loading configuration from multiple sources with precedence:
1. Direct kwargs (highest priority)
2. Environment variables (COVERVIEW__SECTION__KEY)
3. Per-root config (<root>/.coverview/config.yaml)
4. Built-in defaults (lowest priority)

The per-root YAML file is flat for root settings, with an optional
``logging`` section::

    auto_refresh: true
    auto_refresh_debounce_ms: 1000
    coverage_file_patterns: [coverage]
    coverage_command: npm run coverage
    logging:
      level: DEBUG
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from coverview.config.models import CoverviewConfig, LoggingConfig, RootConfig
from coverview.core.errors import ConfigError

CONFIG_DIR_NAME = ".coverview"
CONFIG_FILE_NAME = "config.yaml"


def config_path_for(root: Path) -> Path:
    return root / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top-level value must be a mapping")
    return data


def _to_sections(data: dict[str, Any]) -> dict[str, Any]:
    """Split a flat per-root file into the internal section layout."""
    data = dict(data)
    sections: dict[str, Any] = {}
    logging_section = data.pop("logging", None)
    if logging_section is not None:
        sections["logging"] = logging_section
    if data:
        sections["root"] = data
    return sections


class _YamlSource(PydanticBaseSettingsSource):
    """Settings source that reads from pre-loaded YAML config."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_config: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._yaml_config = yaml_config

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        val = self._yaml_config.get(field_name)
        return val, field_name, val is not None

    def __call__(self) -> dict[str, Any]:
        return self._yaml_config


def _make_settings_class(yaml_config: dict[str, Any]) -> type[BaseSettings]:
    """Create a Settings class with instance-based YAML source."""

    class CoverviewSettings(BaseSettings):
        """Root config. Env vars: COVERVIEW__LOGGING__LEVEL, COVERVIEW__ROOT__AUTO_REFRESH, etc."""

        model_config = SettingsConfigDict(
            env_prefix="COVERVIEW__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        root: RootConfig = RootConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            # Precedence (first wins): init kwargs > env vars > yaml file
            return (init_settings, env_settings, _YamlSource(settings_cls, yaml_config))

    return CoverviewSettings


def load_config(root: Path | None = None, **kwargs: Any) -> CoverviewConfig:
    """Load config: defaults < per-root YAML < env vars < kwargs.

    Args:
        root: Monitored root to load config from.
              Defaults to current working directory.
        **kwargs: Override values (highest precedence), by section.

    Returns:
        Fully resolved configuration object.

    Raises:
        ConfigError: On invalid YAML syntax or validation errors.
    """
    root = root or Path.cwd()
    yaml_config = _to_sections(_load_yaml(config_path_for(root)))

    settings_cls = _make_settings_class(yaml_config)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return CoverviewConfig.model_validate(settings.model_dump())


def load_root_config(root: Path, **overrides: Any) -> RootConfig:
    """Load only the per-root settings, applying ``overrides`` on top."""
    kwargs: dict[str, Any] = {"root": overrides} if overrides else {}
    return load_config(root, **kwargs).root
