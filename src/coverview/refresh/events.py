"""Refresh reasons and coverage-file change sources.

Design:
- A ``ChangeEventSource`` turns one root's coverage-file churn into a stream
  of ``ChangeKind`` values
- Closing the stream (cancelling its consumer) releases the underlying watch
- ``WatchfilesChangeSource`` is the native implementation on top of
  ``watchfiles.awatch``
"""

from __future__ import annotations

import asyncio
import fnmatch
from collections.abc import AsyncGenerator, Sequence
from enum import Enum
from pathlib import Path
from typing import Protocol

import structlog
from watchfiles import Change, awatch

from coverview.core.excludes import should_prune_dir

logger = structlog.get_logger()


class RefreshReason(Enum):
    """Why a tree rebuild was requested."""

    MANUAL = "manual"
    CONFIG_UPDATED = "config_updated"
    COVERAGE_CREATED = "coverage_created"
    COVERAGE_UPDATED = "coverage_updated"
    COVERAGE_DELETED = "coverage_deleted"


class ChangeKind(Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"

    @property
    def refresh_reason(self) -> RefreshReason:
        return _REASON_BY_KIND[self]


_REASON_BY_KIND: dict[ChangeKind, RefreshReason] = {
    ChangeKind.CREATED: RefreshReason.COVERAGE_CREATED,
    ChangeKind.UPDATED: RefreshReason.COVERAGE_UPDATED,
    ChangeKind.DELETED: RefreshReason.COVERAGE_DELETED,
}

_KIND_BY_CHANGE: dict[Change, ChangeKind] = {
    Change.added: ChangeKind.CREATED,
    Change.modified: ChangeKind.UPDATED,
    Change.deleted: ChangeKind.DELETED,
}


class ChangeEventSource(Protocol):
    def watch(self, root: Path, patterns: Sequence[str]) -> AsyncGenerator[ChangeKind, None]:
        """Stream create/update/delete events of files under ``root`` matching ``patterns``."""
        ...


def matches_glob(rel_path: str, pattern: str) -> bool:
    """Check if a path matches a glob pattern, with ** support."""
    if fnmatch.fnmatch(rel_path, pattern):
        return True
    # Handle **/pattern for any-depth matching
    if pattern.startswith("**/"):
        return fnmatch.fnmatch(rel_path, pattern[3:])
    return False


def matches_any(rel_path: str, patterns: Sequence[str]) -> bool:
    return any(matches_glob(rel_path, pattern) for pattern in patterns)


class WatchfilesChangeSource:
    """Coverage-file events from native filesystem notifications."""

    def __init__(self, *, step_ms: int = 200) -> None:
        self._step_ms = step_ms

    async def watch(self, root: Path, patterns: Sequence[str]) -> AsyncGenerator[ChangeKind, None]:
        stop_event = asyncio.Event()

        def accept(change: Change, path: str) -> bool:
            try:
                rel_path = Path(path).relative_to(root)
            except ValueError:
                return False
            if any(should_prune_dir(part) for part in rel_path.parts[:-1]):
                return False
            return change in _KIND_BY_CHANGE and matches_any(rel_path.as_posix(), patterns)

        logger.info("coverage_watch_started", root=str(root), patterns=list(patterns))
        try:
            async for changes in awatch(
                root,
                watch_filter=accept,
                stop_event=stop_event,
                step=self._step_ms,
                ignore_permission_denied=True,
            ):
                for change, path in sorted(changes, key=lambda c: c[1]):
                    logger.debug("coverage_file_changed", path=path, change_type=change.name)
                    yield _KIND_BY_CHANGE[change]
        finally:
            stop_event.set()
            logger.info("coverage_watch_released", root=str(root))
