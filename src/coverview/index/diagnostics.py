"""Non-fatal indexing anomalies.

None of these stop a build. Each is logged once when recorded and kept on
the resulting ``TreeIndex`` so callers can report them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger()


class DiagnosticKind(Enum):
    AMBIGUOUS_PATH = "ambiguous_path"  # several real files end with the reported path
    MISSING_PATH = "missing_path"  # no real file ends with the reported path
    MISSING_FILE = "missing_file"  # indexed file does not exist on disk
    STRUCTURAL_INCONSISTENCY = "structural_inconsistency"  # folder segment collides with a file
    LOAD_FAILED = "load_failed"  # coverage source failed for the root


@dataclass(frozen=True, slots=True)
class IndexDiagnostic:
    kind: DiagnosticKind
    root: str
    path: str
    detail: str


def record(
    diagnostics: list[IndexDiagnostic],
    kind: DiagnosticKind,
    *,
    root: str,
    path: str,
    detail: str,
) -> IndexDiagnostic:
    """Append a diagnostic and log it at warning level."""
    diagnostic = IndexDiagnostic(kind=kind, root=root, path=path, detail=detail)
    diagnostics.append(diagnostic)
    logger.warning(kind.value, root=root, path=path, detail=detail)
    return diagnostic
