"""Path reconciliation.

Coverage tools report paths that may be truncated, use another separator, or
be relative to some other directory. Each reported path is matched against
the live file listing by suffix: a real file matches when its absolute POSIX
path equals the reported path or ends with ``"/" + reported``.

- exactly one match: the record is rewritten to the match's path relative to
  the root
- no match, or several: the record keeps its reported path and a diagnostic
  is emitted
- two records resolving to the same file: the later one wins, as in
  ``CoverageRecordSet.of``

The input record set is never modified.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

import structlog

from coverview.coverage.models import CoverageRecord, CoverageRecordSet
from coverview.index.diagnostics import DiagnosticKind, IndexDiagnostic, record

if TYPE_CHECKING:
    from coverview.workspace import MonitoredRoot

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class ReconcileResult:
    records: CoverageRecordSet
    diagnostics: list[IndexDiagnostic] = field(default_factory=list)


def normalize_reported_path(reported: str) -> str:
    """Use ``/`` separators and drop ``./`` prefixes."""
    path = reported.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


class _FileIndex:
    """Real files bucketed by file name for suffix lookups."""

    def __init__(self, files: Iterable[Path], root: PurePosixPath) -> None:
        self._by_name: dict[str, list[str]] = defaultdict(list)
        for f in files:
            posix = f.as_posix()
            if not PurePosixPath(posix).is_relative_to(root):
                continue
            self._by_name[PurePosixPath(posix).name].append(posix)

    def matches(self, reported: str) -> list[str]:
        name = PurePosixPath(reported).name
        boundary = reported if reported.startswith("/") else "/" + reported
        return [
            candidate
            for candidate in self._by_name.get(name, [])
            if candidate == reported or candidate.endswith(boundary)
        ]


def reconcile_paths(
    records: CoverageRecordSet,
    root: MonitoredRoot,
    files: Iterable[Path],
) -> ReconcileResult:
    """Match every reported path to a real file under ``root``."""
    root_posix = PurePosixPath(root.path.as_posix())
    index = _FileIndex(files, root_posix)
    diagnostics: list[IndexDiagnostic] = []
    resolved: dict[str, CoverageRecord] = {}

    for reported_key, coverage in records.items():
        reported = normalize_reported_path(coverage.file_path)
        matches = index.matches(reported) if reported else []

        if len(matches) == 1:
            relative = PurePosixPath(matches[0]).relative_to(root_posix).as_posix()
            if relative != coverage.file_path:
                logger.debug(
                    "coverage_path_replaced",
                    root=root.name,
                    reported=coverage.file_path,
                    resolved=relative,
                )
                coverage = coverage.with_path(relative)
        else:
            kind = DiagnosticKind.AMBIGUOUS_PATH if matches else DiagnosticKind.MISSING_PATH
            record(
                diagnostics,
                kind,
                root=root.name,
                path=coverage.file_path,
                detail=f"expected exactly 1 matching file, found {len(matches)}",
            )

        if coverage.file_path in resolved:
            record(
                diagnostics,
                DiagnosticKind.AMBIGUOUS_PATH,
                root=root.name,
                path=coverage.file_path,
                detail=f"reported path {reported_key!r} replaces an earlier record for this file",
            )
        resolved[coverage.file_path] = coverage

    return ReconcileResult(records=CoverageRecordSet(resolved), diagnostics=diagnostics)
