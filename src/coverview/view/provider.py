"""Live coverage tree provider.

Design:
- Owns the most recently built ``TreeIndex``; nothing else holds tree state
- Each refresh builds a complete new tree, then swaps it in with a single
  assignment, so readers see either the old tree or the new one
- Refresh requests during a build are coalesced: the running build finishes
  and exactly one more build follows
- Tree-changed listeners get no payload; they re-read ``get_children``
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

import structlog

from coverview.core.errors import (
    ConfigError,
    CoverviewError,
    EmptyWorkspaceError,
    InternalError,
)
from coverview.core.logging import set_refresh_id
from coverview.coverage.command import CommandRunner, ShellCommandRunner
from coverview.index.ops import index_workspace
from coverview.index.tree import sorted_children
from coverview.refresh.events import RefreshReason

if TYPE_CHECKING:
    from coverview.config.store import ConfigStore
    from coverview.coverage.source import CoverageSource
    from coverview.index.builder import TreeIndex
    from coverview.index.files import FileLister
    from coverview.index.tree import TreeNode
    from coverview.workspace import MonitoredRoot

logger = structlog.get_logger()

TreeListener = Callable[[], None]


class ProviderState(Enum):
    IDLE = "idle"
    BUILDING = "building"
    STOPPED = "stopped"


@dataclass
class ProviderStatus:
    """Current provider status."""

    state: ProviderState
    builds: int
    pending: bool
    last_reason: RefreshReason | None = None
    last_error: str | None = None


class CoverageTreeProvider:
    """Serves the current coverage tree and rebuilds it on request."""

    def __init__(
        self,
        roots: Sequence[MonitoredRoot],
        config_store: ConfigStore,
        source: CoverageSource,
        lister: FileLister,
        *,
        command_runner: CommandRunner | None = None,
    ) -> None:
        self._roots = list(roots)
        self._config_store = config_store
        self._source = source
        self._lister = lister
        self._command_runner = command_runner or ShellCommandRunner()

        self._tree: TreeIndex | None = None
        self._listeners: list[TreeListener] = []
        self._build_task: asyncio.Task[None] | None = None
        self._dirty = False
        self._state = ProviderState.IDLE
        self._builds = 0
        self._last_reason: RefreshReason | None = None
        self._last_error: str | None = None

    @property
    def current(self) -> TreeIndex | None:
        """Last fully built tree, or None before the first build."""
        return self._tree

    @property
    def status(self) -> ProviderStatus:
        return ProviderStatus(
            state=self._state,
            builds=self._builds,
            pending=self._dirty,
            last_reason=self._last_reason,
            last_error=self._last_error,
        )

    def add_listener(self, listener: TreeListener) -> Callable[[], None]:
        """Register a tree-changed listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def request_refresh(self, reason: RefreshReason = RefreshReason.MANUAL) -> None:
        """Schedule a rebuild. Suitable as a refresh orchestrator listener."""
        if self._state is ProviderState.STOPPED:
            return
        self._last_reason = reason
        self._dirty = True
        if self._build_task is None or self._build_task.done():
            self._build_task = asyncio.create_task(self._build_loop())
        else:
            logger.debug("refresh_coalesced", reason=reason.value)

    async def refresh(self, reason: RefreshReason = RefreshReason.MANUAL) -> TreeIndex:
        """Rebuild now and return the resulting tree."""
        self.request_refresh(reason)
        if self._build_task is not None:
            await asyncio.shield(self._build_task)
        if self._tree is None:
            raise InternalError.unexpected(
                "coverage tree could not be built", error=self._last_error or "unknown"
            )
        return self._tree

    async def get_children(self, node: TreeNode | None = None) -> list[TreeNode]:
        """Display-ordered children of ``node``; ``None`` means the top level."""
        if node is not None:
            return sorted_children(node)
        if not self._roots:
            logger.info("empty_workspace_no_coverage")
            return []
        tree = self._tree if self._tree is not None else await self.refresh()
        return tree.get_children()

    async def _build_loop(self) -> None:
        while self._dirty and self._state is not ProviderState.STOPPED:
            self._dirty = False
            self._state = ProviderState.BUILDING
            set_refresh_id()
            try:
                tree = await index_workspace(
                    self._roots, self._config_store, self._source, self._lister
                )
            except Exception as e:
                # Keep showing the previous tree
                self._last_error = str(e)
                logger.error("tree_build_failed", error=str(e))
                continue
            finally:
                if self._state is ProviderState.BUILDING:
                    self._state = ProviderState.IDLE

            self._tree = tree
            self._builds += 1
            self._last_error = None
            self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.error("tree_listener_failed", error=str(e))

    async def generate_coverage(self) -> str:
        """Run every root's coverage command; return their joined stdout.

        Raises:
            EmptyWorkspaceError: If there are no monitored roots.
            ConfigError: If a root has no coverage command configured.
            CommandError: If a command fails.
        """
        if not self._roots:
            logger.warning("empty_workspace")
            raise EmptyWorkspaceError.create("coverage generation")

        commands: list[tuple[MonitoredRoot, str]] = []
        for root in self._roots:
            command = self._config_store.get(root).coverage_command
            if not command:
                logger.warning("coverage_command_missing", root=root.name)
                raise ConfigError.missing_required("coverage_command", root=str(root.path))
            commands.append((root, command))

        # A failing command cancels the others still running
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(self._command_runner.run(command, root.path))
                    for root, command in commands
                ]
        except* CoverviewError as eg:
            raise eg.exceptions[0] from None
        outputs = [task.result() for task in tasks]
        logger.info("coverage_generated", roots=len(commands))
        return "\n".join(outputs)

    async def close(self) -> None:
        self._state = ProviderState.STOPPED
        if self._build_task is not None and not self._build_task.done():
            self._build_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._build_task
        self._build_task = None
