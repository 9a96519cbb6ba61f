"""Coverage tree nodes.

A ``TreeNode`` has the same shape for every variant (kind, path, label,
children) plus a variant payload. Aggregation and presentation are plain
functions that dispatch on ``kind``, so all of the summing rules live here:

- ROOT and FOLDER totals are the sum of their children, computed on read.
- FILE totals are the recorded counts (the aggregation floor).
- FUNCTION nodes have no line totals; they report ``None``, never 0.

Function nodes share their file's path: they point at the file, and a stable
sort by path keeps them in source order.
"""

from __future__ import annotations

import locale
from dataclasses import dataclass, field
from enum import Enum

from coverview.coverage.models import CoverageLevel, CoverageLevelThresholds, line_percent

ROOT_KEY = ""


class NodeKind(Enum):
    ROOT = "root"
    FOLDER = "folder"
    FILE = "file"
    FUNCTION = "function"


@dataclass(frozen=True, slots=True)
class FolderPayload:
    thresholds: CoverageLevelThresholds


@dataclass(frozen=True, slots=True)
class FilePayload:
    thresholds: CoverageLevelThresholds
    lines_found: int
    lines_hit: int


@dataclass(frozen=True, slots=True)
class FunctionPayload:
    source_line: int
    hit_count: int


NodePayload = FolderPayload | FilePayload | FunctionPayload | None


@dataclass(eq=False, slots=True)
class TreeNode:
    kind: NodeKind
    path: str
    label: str
    children: list[TreeNode] = field(default_factory=list)
    payload: NodePayload = None

    @property
    def total_lines(self) -> int | None:
        return total_lines(self)

    @property
    def covered_lines(self) -> int | None:
        return covered_lines(self)

    def __repr__(self) -> str:
        return f"TreeNode({self.kind.name}, path={self.path!r}, children={len(self.children)})"


def root_node() -> TreeNode:
    return TreeNode(NodeKind.ROOT, ROOT_KEY, ROOT_KEY)


def folder_node(path: str, label: str, thresholds: CoverageLevelThresholds) -> TreeNode:
    return TreeNode(NodeKind.FOLDER, path, label, payload=FolderPayload(thresholds))


def file_node(
    path: str,
    label: str,
    thresholds: CoverageLevelThresholds,
    lines_found: int,
    lines_hit: int,
    functions: list[TreeNode] | None = None,
) -> TreeNode:
    return TreeNode(
        NodeKind.FILE,
        path,
        label,
        children=list(functions or []),
        payload=FilePayload(thresholds, lines_found, lines_hit),
    )


def function_node(path: str, name: str, source_line: int, hit_count: int) -> TreeNode:
    return TreeNode(NodeKind.FUNCTION, path, name, payload=FunctionPayload(source_line, hit_count))


def total_lines(node: TreeNode) -> int | None:
    match node.payload:
        case FilePayload(lines_found=found):
            return found
        case FunctionPayload():
            return None
        case _:
            return sum(total_lines(child) or 0 for child in node.children)


def covered_lines(node: TreeNode) -> int | None:
    match node.payload:
        case FilePayload(lines_hit=hit):
            return hit
        case FunctionPayload():
            return None
        case _:
            return sum(covered_lines(child) or 0 for child in node.children)


def coverage_percent(node: TreeNode) -> float | None:
    """Line coverage percentage, or ``None`` for function nodes."""
    total = total_lines(node)
    covered = covered_lines(node)
    if total is None or covered is None:
        return None
    return line_percent(total, covered)


def coverage_level(node: TreeNode) -> CoverageLevel | None:
    """Classify a node; the root has no thresholds and returns ``None``."""
    match node.payload:
        case FunctionPayload(hit_count=hits):
            return CoverageLevel.HIGH if hits > 0 else CoverageLevel.LOW
        case FolderPayload(thresholds=thresholds) | FilePayload(thresholds=thresholds):
            percent = line_percent(total_lines(node) or 0, covered_lines(node) or 0)
            return thresholds.classify(percent)
        case _:
            return None


def format_coverage(node: TreeNode) -> str:
    """Short label such as ``83.3%`` or ``4 hits``."""
    if isinstance(node.payload, FunctionPayload):
        return f"{node.payload.hit_count} hits"
    percent = coverage_percent(node) or 0.0
    text = f"{percent:.1f}".removesuffix(".0")
    return f"{text}%"


def tooltip(node: TreeNode) -> str:
    return f"{node.label}: {format_coverage(node)}"


def _collation_key(path: str) -> tuple[str, str]:
    # Case-insensitive first so "a.ts" < "B.ts" even under the C locale
    return locale.strxfrm(path.casefold()), path


def sorted_children(node: TreeNode) -> list[TreeNode]:
    """Children ordered by path with locale-aware comparison."""
    return sorted(node.children, key=lambda child: _collation_key(child.path))


def iter_nodes(node: TreeNode) -> list[TreeNode]:
    """Depth-first list of ``node`` and all its descendants."""
    nodes = [node]
    for child in node.children:
        nodes.extend(iter_nodes(child))
    return nodes
