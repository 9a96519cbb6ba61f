"""coverview watch command - keep the coverage tree in sync with coverage files."""

import asyncio
from pathlib import Path

import click
from rich.console import Console

from coverview.cli.render import render_tree, status_line
from coverview.cli.utils import ROOTS_ARGUMENT, Workspace, open_workspace
from coverview.core.errors import CoverviewError
from coverview.core.progress import status
from coverview.refresh.events import WatchfilesChangeSource
from coverview.refresh.orchestrator import RefreshOrchestrator


async def _watch(workspace: Workspace, console: Console, functions: bool) -> None:
    provider = workspace.provider

    def repaint() -> None:
        tree = provider.current
        if tree is None:
            return
        console.clear()
        console.print(render_tree(tree, functions=functions))
        console.print(status_line(provider.status), style="dim")

    provider.add_listener(repaint)
    orchestrator = RefreshOrchestrator(
        workspace.roots,
        workspace.config_store,
        WatchfilesChangeSource(),
    )
    orchestrator.add_listener(provider.request_refresh)

    try:
        async with orchestrator:
            await provider.refresh()
            status("Watching for coverage changes (Ctrl+C to stop)", style="info")
            await asyncio.Event().wait()
    finally:
        await provider.close()


@click.command()
@ROOTS_ARGUMENT
@click.option("--functions", is_flag=True, help="Include per-function hit counts")
def watch_command(paths: tuple[Path, ...], functions: bool) -> None:
    """Show the coverage tree and refresh it when coverage files change.

    PATHS are the monitored roots (default: current directory).
    """
    workspace = open_workspace(paths, operation="watch")
    try:
        asyncio.run(_watch(workspace, Console(), functions))
    except KeyboardInterrupt:
        status("Stopped", style="info")
    except CoverviewError as e:
        raise click.ClickException(str(e)) from e
