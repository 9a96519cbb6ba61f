"""Coverage record data model.

File-centric: one ``CoverageRecord`` per source file as reported by the
coverage tool, grouped per monitored root in a ``CoverageRecordSet``. Paths
are kept exactly as reported; reconciliation against the real file system
happens later, in ``coverview.index.reconcile``.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum


class CoverageLevel(Enum):
    """Display classification of a coverage percentage."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class FunctionDetail:
    """Hit count of one function."""

    name: str
    source_line: int
    hit_count: int

    def __post_init__(self) -> None:
        if self.hit_count < 0:
            raise ValueError(f"hit_count must be >= 0, got {self.hit_count}")


@dataclass(frozen=True, slots=True)
class CoverageRecord:
    """Line and function coverage of a single source file."""

    file_path: str  # as reported by the coverage tool
    lines_found: int
    lines_hit: int
    functions: tuple[FunctionDetail, ...] = ()

    def __post_init__(self) -> None:
        if self.lines_found < 0:
            raise ValueError(f"lines_found must be >= 0, got {self.lines_found}")
        if not (0 <= self.lines_hit <= self.lines_found):
            raise ValueError(
                f"lines_hit must be within 0..{self.lines_found}, got {self.lines_hit}"
            )

    def with_path(self, file_path: str) -> CoverageRecord:
        return replace(self, file_path=file_path)


@dataclass(frozen=True, slots=True, eq=False)
class CoverageRecordSet(Mapping[str, CoverageRecord]):
    """Read-only mapping of reported path -> record for one monitored root."""

    _records: dict[str, CoverageRecord] = field(default_factory=dict)

    @classmethod
    def of(cls, records: Iterable[CoverageRecord]) -> CoverageRecordSet:
        """Key records by their path. A later record for the same path wins."""
        return cls({record.file_path: record for record in records})

    def __getitem__(self, key: str) -> CoverageRecord:
        return self._records[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"CoverageRecordSet({len(self._records)} records)"


@dataclass(frozen=True, slots=True)
class CoverageLevelThresholds:
    """Percentage cut-offs of one root: ``0 <= low <= sufficient <= 100``."""

    sufficient: float
    low: float

    def __post_init__(self) -> None:
        if not (0.0 <= self.low <= self.sufficient <= 100.0):
            raise ValueError(
                f"thresholds must satisfy 0 <= low <= sufficient <= 100, "
                f"got low={self.low}, sufficient={self.sufficient}"
            )

    def classify(self, percent: float) -> CoverageLevel:
        if percent >= self.sufficient:
            return CoverageLevel.HIGH
        if percent >= self.low:
            return CoverageLevel.MEDIUM
        return CoverageLevel.LOW


def line_percent(total: int, covered: int) -> float:
    """Coverage percentage; a file with no instrumented lines is fully covered."""
    if total == 0:
        return 100.0
    return covered / total * 100.0
