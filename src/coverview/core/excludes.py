"""Directory exclusion tiers for live file listings.

Tier 0 (HARDCODED_DIRS): Never traversed, not user-configurable.
    - VCS internals, coverview data directories

Tier 1 (DEFAULT_PRUNABLE_DIRS): Dependency and cache directories.
    - Pruned from file listings unless a root opts in through
      ``RootConfig.include_dirs``

Files inside pruned directories never take part in path reconciliation, so a
reported ``a.ts`` cannot match a vendored copy under ``node_modules``.
"""

from __future__ import annotations

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        # VCS internals
        ".git",
        ".svn",
        ".hg",
        ".bzr",
        # coverview data
        ".coverview",
    )
)

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # JavaScript/Node.js
        "node_modules",
        ".npm",
        ".yarn",
        ".pnpm-store",
        "bower_components",
        ".next",
        ".nuxt",
        ".turbo",
        # Python
        "venv",
        ".venv",
        ".virtualenv",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".tox",
        ".nox",
        ".eggs",
        "site-packages",
        ".ipynb_checkpoints",
        ".hypothesis",
        # Ruby
        ".bundle",
        # Haskell
        ".stack-work",
        # JVM
        ".gradle",
        # Editors
        ".idea",
        ".vscode",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def is_hardcoded_dir(dirname: str) -> bool:
    """Check if directory is in the hardcoded (non-overridable) tier."""
    return dirname in HARDCODED_DIRS


def should_prune_dir(dirname: str, include_dirs: frozenset[str] = frozenset()) -> bool:
    """Return True when a directory must not be descended into.

    ``include_dirs`` opts tier 1 directories back in; tier 0 always wins.
    """
    if is_hardcoded_dir(dirname):
        return True
    return dirname in DEFAULT_PRUNABLE_DIRS and dirname not in include_dirs
