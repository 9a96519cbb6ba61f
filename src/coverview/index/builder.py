"""Tree construction from reconciled coverage records.

One build produces a complete, new tree:

    ROOT ("")
      FOLDER <root name>        path = absolute root path
        FOLDER src              path = <root>/src
          FILE a.ts             path = <root>/src/a.ts
            FUNCTION main       path = <root>/src/a.ts

While building, nodes are memoized by display path (``<root name>/src/a.ts``)
so shared prefixes become a single folder. The memo is local to one build.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from coverview.index.diagnostics import DiagnosticKind, IndexDiagnostic, record
from coverview.index.reconcile import normalize_reported_path
from coverview.index.tree import (
    NodeKind,
    TreeNode,
    file_node,
    folder_node,
    function_node,
    root_node,
    sorted_children,
)

if TYPE_CHECKING:
    from coverview.coverage.models import (
        CoverageLevelThresholds,
        CoverageRecord,
        CoverageRecordSet,
    )
    from coverview.workspace import MonitoredRoot

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class RootCoverage:
    """Everything the builder needs for one monitored root."""

    root: MonitoredRoot
    records: CoverageRecordSet
    thresholds: CoverageLevelThresholds


@dataclass(frozen=True, slots=True)
class TreeIndex:
    """A fully built tree and the anomalies met while building it."""

    root: TreeNode
    diagnostics: tuple[IndexDiagnostic, ...] = field(default_factory=tuple)

    def get_children(self, node: TreeNode | None = None) -> list[TreeNode]:
        """Display-ordered children; ``None`` means the top level."""
        return sorted_children(self.root if node is None else node)


def split_segments(file_path: str) -> list[str]:
    return [s for s in normalize_reported_path(file_path).split("/") if s not in ("", ".")]


def build_tree(roots: Iterable[RootCoverage]) -> TreeIndex:
    """Build the coverage tree for every root. Never raises for bad records."""
    diagnostics: list[IndexDiagnostic] = []
    top = root_node()

    for root_coverage in roots:
        root = root_coverage.root
        folder = folder_node(str(root.path), root.name, root_coverage.thresholds)
        top.children.append(folder)

        # Display path -> node, for this root only
        nodes: dict[str, TreeNode] = {root.name: folder}
        for coverage in root_coverage.records.values():
            _attach(nodes, root_coverage, coverage, diagnostics)

        logger.debug("root_indexed", root=root.name, nodes=len(nodes))

    return TreeIndex(root=top, diagnostics=tuple(diagnostics))


def _attach(
    nodes: dict[str, TreeNode],
    root_coverage: RootCoverage,
    coverage: CoverageRecord,
    diagnostics: list[IndexDiagnostic],
) -> None:
    root = root_coverage.root
    segments = split_segments(coverage.file_path)
    if not segments:
        record(
            diagnostics,
            DiagnosticKind.MISSING_PATH,
            root=root.name,
            path=coverage.file_path,
            detail="reported path has no segments",
        )
        return

    parent_key = root.name
    parent_fs = root.path
    for index, step in enumerate(segments):
        node_key = f"{parent_key}/{step}"
        node_fs = parent_fs / step
        parent = nodes[parent_key]
        is_last = index == len(segments) - 1

        if parent.kind is not NodeKind.FOLDER:
            record(
                diagnostics,
                DiagnosticKind.STRUCTURAL_INCONSISTENCY,
                root=root.name,
                path=coverage.file_path,
                detail=f"expected a folder at {parent_key}, found {parent.kind.value}",
            )
            return

        existing = nodes.get(node_key)
        if existing is None:
            if is_last:
                node = _make_file(node_fs, step, root_coverage, coverage, diagnostics)
            else:
                node = folder_node(str(node_fs), step, root_coverage.thresholds)
            parent.children.append(node)
            nodes[node_key] = node
        elif is_last:
            record(
                diagnostics,
                DiagnosticKind.STRUCTURAL_INCONSISTENCY,
                root=root.name,
                path=coverage.file_path,
                detail=f"{node_key} is already indexed as a {existing.kind.value}",
            )
            return

        parent_key = node_key
        parent_fs = node_fs


def _make_file(
    absolute_path: Path,
    label: str,
    root_coverage: RootCoverage,
    coverage: CoverageRecord,
    diagnostics: list[IndexDiagnostic],
) -> TreeNode:
    if not absolute_path.exists():
        record(
            diagnostics,
            DiagnosticKind.MISSING_FILE,
            root=root_coverage.root.name,
            path=str(absolute_path),
            detail="file does not exist; in a multi-root setup, open every root, "
            "not just the folder that produced the coverage",
        )

    path = str(absolute_path)
    functions = [
        function_node(path, detail.name, detail.source_line, detail.hit_count)
        for detail in coverage.functions
    ]
    return file_node(
        path,
        label,
        root_coverage.thresholds,
        coverage.lines_found,
        coverage.lines_hit,
        functions,
    )
