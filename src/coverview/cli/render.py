"""Rendering coverage trees for the terminal and JSON output."""

from __future__ import annotations

from typing import Any

from rich.markup import escape
from rich.tree import Tree

from coverview.core.progress import pluralize
from coverview.coverage.models import CoverageLevel
from coverview.index.builder import TreeIndex
from coverview.index.tree import (
    NodeKind,
    TreeNode,
    coverage_level,
    coverage_percent,
    covered_lines,
    format_coverage,
    sorted_children,
    total_lines,
)
from coverview.view.provider import ProviderStatus

_LEVEL_STYLES = {
    CoverageLevel.HIGH: "green",
    CoverageLevel.MEDIUM: "yellow",
    CoverageLevel.LOW: "red",
}


def _node_markup(node: TreeNode) -> str:
    level = coverage_level(node)
    style = _LEVEL_STYLES.get(level, "cyan") if level else "cyan"
    label = escape(node.label)
    if node.kind is NodeKind.FOLDER:
        label = f"[bold]{label}[/bold]"
    return f"{label} [{style}]{format_coverage(node)}[/{style}]"


def _add_children(branch: Tree, node: TreeNode, *, functions: bool) -> None:
    for child in sorted_children(node):
        if child.kind is NodeKind.FUNCTION and not functions:
            continue
        sub = branch.add(_node_markup(child))
        _add_children(sub, child, functions=functions)


def render_tree(tree: TreeIndex, *, functions: bool = False) -> Tree:
    total = total_lines(tree.root) or 0
    covered = covered_lines(tree.root) or 0
    summary = f"{covered}/{total} lines ({format_coverage(tree.root)})"
    rich_tree = Tree(f"[bold]Coverage[/bold] {summary}")
    _add_children(rich_tree, tree.root, functions=functions)
    return rich_tree


def node_to_dict(node: TreeNode) -> dict[str, Any]:
    level = coverage_level(node)
    data: dict[str, Any] = {
        "kind": node.kind.value,
        "path": node.path,
        "label": node.label,
        "total_lines": total_lines(node),
        "covered_lines": covered_lines(node),
        "percent": coverage_percent(node),
        "level": level.value if level else None,
    }
    if node.kind is NodeKind.FUNCTION:
        data["hit_count"] = node.payload.hit_count  # type: ignore[union-attr]
        data["source_line"] = node.payload.source_line  # type: ignore[union-attr]
    data["children"] = [node_to_dict(child) for child in sorted_children(node)]
    return data


def tree_to_dict(tree: TreeIndex) -> dict[str, Any]:
    return {
        "tree": node_to_dict(tree.root),
        "diagnostics": [
            {"kind": d.kind.value, "root": d.root, "path": d.path, "detail": d.detail}
            for d in tree.diagnostics
        ],
    }


def status_line(provider_status: ProviderStatus) -> str:
    """One-line footer describing the provider's latest build."""
    reason = provider_status.last_reason.value if provider_status.last_reason else "initial"
    line = f"{pluralize(provider_status.builds, 'build')}, last trigger: {reason}"
    if provider_status.pending:
        line += " (refresh pending)"
    if provider_status.last_error:
        line += f" [red]last rebuild failed: {escape(provider_status.last_error)}[/red]"
    return line
