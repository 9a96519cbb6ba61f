"""Shared CLI helpers."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

import click

from coverview.config.store import ConfigStore
from coverview.core.errors import CoverviewError
from coverview.coverage.source import JsonRecordSource
from coverview.index.files import WalkFileLister
from coverview.view.provider import CoverageTreeProvider
from coverview.workspace import MonitoredRoot, resolve_roots

ROOTS_ARGUMENT = click.argument(
    "paths",
    nargs=-1,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)


@dataclass
class Workspace:
    roots: list[MonitoredRoot]
    config_store: ConfigStore
    provider: CoverageTreeProvider


def open_workspace(paths: Sequence[Path], *, operation: str) -> Workspace:
    """Resolve roots (default: current directory) and wire the provider.

    Raises:
        click.ClickException: If roots or their config are invalid.
    """
    try:
        roots = resolve_roots(paths or [Path.cwd()], operation=operation)
        config_store = ConfigStore.from_roots(roots)
    except CoverviewError as e:
        raise click.ClickException(str(e)) from e

    provider = CoverageTreeProvider(
        roots,
        config_store,
        JsonRecordSource(config_store),
        WalkFileLister(config_store),
    )
    return Workspace(roots=roots, config_store=config_store, provider=provider)
