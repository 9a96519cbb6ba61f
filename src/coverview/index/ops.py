"""Indexing pipeline: load, list, reconcile, build.

The only suspension points are coverage loading and file listing. Once
every root's inputs are in hand the tree is built synchronously, so no
caller can observe a half-built tree.
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from coverview.core.errors import CoverviewError, LoadError
from coverview.coverage.models import CoverageLevelThresholds, CoverageRecordSet
from coverview.index.builder import RootCoverage, TreeIndex, build_tree
from coverview.index.diagnostics import DiagnosticKind, IndexDiagnostic, record
from coverview.index.reconcile import reconcile_paths
from coverview.index.tree import covered_lines, total_lines

if TYPE_CHECKING:
    from coverview.config.store import ConfigStore
    from coverview.coverage.source import CoverageSource
    from coverview.index.files import FileLister
    from coverview.workspace import MonitoredRoot

logger = structlog.get_logger()


async def _prepare_root(
    root: MonitoredRoot,
    config_store: ConfigStore,
    source: CoverageSource,
    lister: FileLister,
    diagnostics: list[IndexDiagnostic],
) -> RootCoverage:
    config = config_store.get(root)
    thresholds = CoverageLevelThresholds(
        sufficient=config.sufficient_coverage_threshold,
        low=config.low_coverage_threshold,
    )

    try:
        records = await source.load_coverage(root)
        files = await lister.list_files(root)
    except Exception as e:
        # One root failing must not hide the others
        error = e if isinstance(e, CoverviewError) else LoadError.for_root(str(root.path), str(e))
        record(
            diagnostics,
            DiagnosticKind.LOAD_FAILED,
            root=root.name,
            path=str(root.path),
            detail=error.message,
        )
        return RootCoverage(root=root, records=CoverageRecordSet(), thresholds=thresholds)

    result = reconcile_paths(records, root, files)
    diagnostics.extend(result.diagnostics)
    return RootCoverage(root=root, records=result.records, thresholds=thresholds)


async def index_workspace(
    roots: Sequence[MonitoredRoot],
    config_store: ConfigStore,
    source: CoverageSource,
    lister: FileLister,
) -> TreeIndex:
    """Build a fresh tree for ``roots``. Per-root failures become diagnostics."""
    start = time.perf_counter()
    diagnostics: list[IndexDiagnostic] = []

    prepared = [
        await _prepare_root(root, config_store, source, lister, diagnostics) for root in roots
    ]
    built = build_tree(prepared)
    tree = TreeIndex(root=built.root, diagnostics=(*diagnostics, *built.diagnostics))

    logger.info(
        "tree_built",
        roots=len(roots),
        total_lines=total_lines(tree.root),
        covered_lines=covered_lines(tree.root),
        diagnostics=len(tree.diagnostics),
        duration_ms=round((time.perf_counter() - start) * 1000, 1),
    )
    return tree
