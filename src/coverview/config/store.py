"""In-memory per-root configuration with change notification.

The store is the single owner of each root's ``RootConfig``. Mutations
(``set``, ``update``, ``reload``) notify listeners synchronously, in
registration order, on the caller's thread of control. Listeners are how the
refresh orchestrator learns about threshold and debounce changes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from coverview.config.loader import load_root_config
from coverview.config.models import RootConfig
from coverview.core.errors import ConfigError
from coverview.workspace import MonitoredRoot

logger = structlog.get_logger()

ConfigListener = Callable[[MonitoredRoot, RootConfig], None]
RootConfigLoader = Callable[[Path], RootConfig]


class ConfigStore:
    """Per-root configuration accessor, observable for changes."""

    def __init__(
        self,
        configs: dict[MonitoredRoot, RootConfig],
        *,
        loader: RootConfigLoader = load_root_config,
    ) -> None:
        self._configs = dict(configs)
        self._loader = loader
        self._listeners: list[ConfigListener] = []

    @classmethod
    def from_roots(
        cls,
        roots: Iterable[MonitoredRoot],
        *,
        loader: RootConfigLoader = load_root_config,
    ) -> ConfigStore:
        """Load every root's config from disk."""
        return cls({root: loader(root.path) for root in roots}, loader=loader)

    @property
    def roots(self) -> list[MonitoredRoot]:
        return list(self._configs)

    def get(self, root: MonitoredRoot) -> RootConfig:
        try:
            return self._configs[root]
        except KeyError:
            raise ConfigError.invalid_value("root", root.path, "not a monitored root") from None

    def set(self, root: MonitoredRoot, config: RootConfig) -> None:
        self.get(root)
        self._configs[root] = config
        logger.info("config_updated", root=root.name)
        self._notify(root, config)

    def update(self, root: MonitoredRoot, **changes: Any) -> RootConfig:
        """Apply field changes to a root's config and notify listeners.

        Raises:
            ConfigError: If the resulting config fails validation.
        """
        current = self.get(root)
        try:
            config = RootConfig.model_validate({**current.model_dump(), **changes})
        except ValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(loc) for loc in err["loc"]) or "root"
            raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
        self.set(root, config)
        return config

    def reload(self, root: MonitoredRoot) -> RootConfig:
        """Re-read a root's config from disk and notify listeners."""
        config = self._loader(root.path)
        self.set(root, config)
        return config

    def add_listener(self, listener: ConfigListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self, root: MonitoredRoot, config: RootConfig) -> None:
        for listener in list(self._listeners):
            try:
                listener(root, config)
            except Exception as e:
                logger.error("config_listener_failed", root=root.name, error=str(e))
