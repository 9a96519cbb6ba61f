"""Monitored root registry."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from coverview.core.errors import EmptyWorkspaceError


@dataclass(frozen=True, slots=True)
class MonitoredRoot:
    """A top-level directory tracked with its own config and coverage data."""

    path: Path
    name: str

    @classmethod
    def from_path(cls, path: Path, name: str | None = None) -> MonitoredRoot:
        resolved = path.resolve()
        return cls(path=resolved, name=name or resolved.name or str(resolved))


def resolve_roots(paths: Iterable[Path], *, operation: str) -> list[MonitoredRoot]:
    """Build the root list, failing fast when it is empty.

    Two roots sharing a directory name get their parent name appended so the
    tree never holds two top-level folders with the same label.
    """
    roots = [MonitoredRoot.from_path(p) for p in paths]
    if not roots:
        raise EmptyWorkspaceError.create(operation)

    seen: dict[str, int] = {}
    for root in roots:
        seen[root.name] = seen.get(root.name, 0) + 1

    result: list[MonitoredRoot] = []
    for root in roots:
        if seen[root.name] > 1:
            root = MonitoredRoot(path=root.path, name=f"{root.name} ({root.path.parent.name})")
        result.append(root)
    return result
