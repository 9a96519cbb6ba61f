"""Coverage indexing: path reconciliation, tree construction, aggregation."""

from coverview.index.builder import RootCoverage, TreeIndex, build_tree, split_segments
from coverview.index.diagnostics import DiagnosticKind, IndexDiagnostic
from coverview.index.files import FileLister, WalkFileLister, scan_files
from coverview.index.ops import index_workspace
from coverview.index.reconcile import ReconcileResult, normalize_reported_path, reconcile_paths
from coverview.index.tree import (
    ROOT_KEY,
    NodeKind,
    TreeNode,
    coverage_level,
    coverage_percent,
    covered_lines,
    format_coverage,
    sorted_children,
    tooltip,
    total_lines,
)

__all__ = [
    # Tree
    "ROOT_KEY",
    "NodeKind",
    "TreeNode",
    "coverage_level",
    "coverage_percent",
    "covered_lines",
    "format_coverage",
    "sorted_children",
    "tooltip",
    "total_lines",
    # Build
    "RootCoverage",
    "TreeIndex",
    "build_tree",
    "split_segments",
    "index_workspace",
    # Reconcile
    "ReconcileResult",
    "normalize_reported_path",
    "reconcile_paths",
    # Files
    "FileLister",
    "WalkFileLister",
    "scan_files",
    # Diagnostics
    "DiagnosticKind",
    "IndexDiagnostic",
]
