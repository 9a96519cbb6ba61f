"""Live file listing of a monitored root."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import structlog

from coverview.core.excludes import should_prune_dir

if TYPE_CHECKING:
    from coverview.config.store import ConfigStore
    from coverview.workspace import MonitoredRoot

logger = structlog.get_logger()


class FileLister(Protocol):
    async def list_files(self, root: MonitoredRoot) -> list[Path]:
        """Return the absolute path of every file currently under the root."""
        ...


def scan_files(root: Path, include_dirs: frozenset[str] = frozenset()) -> list[Path]:
    """Walk ``root`` pruning VCS and dependency directories."""
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        # Prune in-place: remove dirs we should skip
        dirnames[:] = [d for d in dirnames if not should_prune_dir(d, include_dirs)]
        for filename in filenames:
            files.append(Path(dirpath) / filename)
    return files


class WalkFileLister:
    """Lists files with ``os.walk`` off the event loop."""

    def __init__(self, config_store: ConfigStore) -> None:
        self._config_store = config_store

    async def list_files(self, root: MonitoredRoot) -> list[Path]:
        include_dirs = frozenset(self._config_store.get(root).include_dirs)
        files = await asyncio.to_thread(scan_files, root.path, include_dirs)
        logger.debug("files_listed", root=root.name, count=len(files))
        return files
