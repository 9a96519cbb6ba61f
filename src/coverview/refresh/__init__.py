"""Refresh orchestration: merged, throttled refresh signals."""

from coverview.refresh.events import (
    ChangeEventSource,
    ChangeKind,
    RefreshReason,
    WatchfilesChangeSource,
    matches_any,
    matches_glob,
)
from coverview.refresh.orchestrator import RefreshListener, RefreshOrchestrator
from coverview.refresh.throttle import Throttle

__all__ = [
    "ChangeEventSource",
    "ChangeKind",
    "RefreshListener",
    "RefreshOrchestrator",
    "RefreshReason",
    "Throttle",
    "WatchfilesChangeSource",
    "matches_any",
    "matches_glob",
]
