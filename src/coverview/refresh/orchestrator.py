"""Refresh orchestration: many change sources, one refresh signal.

Channels, all funneled into one queue:
- manual: ``force_refresh()``, always forwarded
- config: every configuration change becomes CONFIG_UPDATED, even with
  auto refresh off, because thresholds may have changed
- one per monitored root: coverage-file events, throttled with the root's
  current debounce and dropped while the root's auto refresh is off

A single dispatcher task drains the queue and calls every refresh listener
once per event.

Re-throttling: each root channel runs one pump task that owns one watch. When
the root's debounce (or its watch patterns) change, the running pump is
cancelled, which releases its watch, and a new pump subscribes with a fresh
throttle. The channel itself stays registered throughout.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

import structlog

from coverview.core.errors import EmptyWorkspaceError
from coverview.refresh.events import ChangeEventSource, RefreshReason
from coverview.refresh.throttle import Throttle

if TYPE_CHECKING:
    from coverview.config.models import RootConfig
    from coverview.config.store import ConfigStore
    from coverview.workspace import MonitoredRoot

logger = structlog.get_logger()

RefreshListener = Callable[[RefreshReason], None]
Clock = Callable[[], float]


class _RootChannel:
    """Throttled coverage-file events of one root."""

    def __init__(
        self,
        root: MonitoredRoot,
        config_store: ConfigStore,
        change_source: ChangeEventSource,
        publish: Callable[[RefreshReason], None],
        clock: Clock,
    ) -> None:
        self.root = root
        self._config_store = config_store
        self._change_source = change_source
        self._publish = publish
        self._clock = clock
        self._watch_key: tuple[int, tuple[str, ...]] | None = None
        self._current: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def interval_ms(self) -> int | None:
        return self._watch_key[0] if self._watch_key else None

    def apply(self, config: RootConfig) -> None:
        """Subscribe, or re-subscribe when the debounce or patterns changed."""
        key = (config.auto_refresh_debounce_ms, tuple(config.watch_patterns))
        if key == self._watch_key and self._current is not None:
            return

        previous = self._current
        if previous is not None and not previous.done():
            previous.cancel()
            logger.info(
                "refresh_throttle_swapped",
                root=self.root.name,
                old_ms=self.interval_ms,
                new_ms=key[0],
            )

        self._watch_key = key
        throttle = Throttle(key[0] / 1000, clock=self._clock)
        task = asyncio.create_task(self._pump(throttle, key[1]))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._current = task

    async def _pump(self, throttle: Throttle, patterns: Sequence[str]) -> None:
        events = self._change_source.watch(self.root.path, patterns)
        try:
            async with contextlib.aclosing(events):
                async for kind in events:
                    if not throttle.admit():
                        logger.debug(
                            "coverage_event_throttled", root=self.root.name, kind=kind.value
                        )
                        continue
                    if not self._config_store.get(self.root).auto_refresh:
                        logger.debug(
                            "coverage_event_suppressed", root=self.root.name, kind=kind.value
                        )
                        continue
                    self._publish(kind.refresh_reason)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("coverage_watch_failed", root=self.root.name, error=str(e))

    async def close(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._current = None


class RefreshOrchestrator:
    """Merges manual, config and coverage-file events into refresh requests.

    Usage::

        async with RefreshOrchestrator(roots, store, WatchfilesChangeSource()) as orch:
            orch.add_listener(provider.request_refresh)
            ...
    """

    def __init__(
        self,
        roots: Sequence[MonitoredRoot],
        config_store: ConfigStore,
        change_source: ChangeEventSource,
        *,
        clock: Clock = time.monotonic,
    ) -> None:
        if not roots:
            logger.warning("empty_workspace")
            raise EmptyWorkspaceError.create("refresh orchestration")

        self._config_store = config_store
        self._queue: asyncio.Queue[RefreshReason] = asyncio.Queue()
        self._listeners: list[RefreshListener] = []
        self._channels: dict[MonitoredRoot, _RootChannel] = {
            root: _RootChannel(root, config_store, change_source, self._publish, clock)
            for root in roots
        }
        self._remove_config_listener: Callable[[], None] | None = None
        self._dispatch_task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def roots(self) -> list[MonitoredRoot]:
        return list(self._channels)

    @property
    def closed(self) -> bool:
        return self._closed

    def throttle_interval_ms(self, root: MonitoredRoot) -> int | None:
        """Debounce currently applied to ``root``'s file events."""
        return self._channels[root].interval_ms

    def add_listener(self, listener: RefreshListener) -> Callable[[], None]:
        """Register a refresh listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def start(self) -> None:
        """Subscribe every channel and start delivering refreshes."""
        if self._closed:
            raise RuntimeError("orchestrator is closed")
        if self._dispatch_task is not None:
            return

        self._remove_config_listener = self._config_store.add_listener(self._on_config_changed)
        for root, channel in self._channels.items():
            channel.apply(self._config_store.get(root))
        self._dispatch_task = asyncio.create_task(self._dispatch())
        logger.info("refresh_orchestrator_started", roots=len(self._channels))

    def force_refresh(self, reason: RefreshReason = RefreshReason.MANUAL) -> None:
        """Request a refresh regardless of auto refresh settings."""
        self._publish(reason)

    def _publish(self, reason: RefreshReason) -> None:
        if self._closed:
            return
        self._queue.put_nowait(reason)

    def _on_config_changed(self, root: MonitoredRoot, config: RootConfig) -> None:
        self._publish(RefreshReason.CONFIG_UPDATED)
        channel = self._channels.get(root)
        if channel is not None and not self._closed:
            channel.apply(config)

    async def _dispatch(self) -> None:
        while True:
            reason = await self._queue.get()
            logger.info("refresh_triggered", reason=reason.value)
            for listener in list(self._listeners):
                try:
                    listener(reason)
                except Exception as e:
                    logger.error("refresh_listener_failed", reason=reason.value, error=str(e))

    async def close(self) -> None:
        """Release every watch and stop delivering refreshes. Idempotent."""
        if self._closed:
            return
        self._closed = True

        if self._remove_config_listener is not None:
            self._remove_config_listener()
            self._remove_config_listener = None

        for channel in self._channels.values():
            await channel.close()

        if self._dispatch_task is not None and not self._dispatch_task.done():
            self._dispatch_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._dispatch_task
        self._dispatch_task = None

        # Drop anything published before close() that was never delivered
        while not self._queue.empty():
            self._queue.get_nowait()

        logger.info("refresh_orchestrator_stopped")

    async def __aenter__(self) -> RefreshOrchestrator:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
