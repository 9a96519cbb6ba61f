"""coverview show command - print the coverage tree once."""

import asyncio
import json
from pathlib import Path

import click
from rich.console import Console

from coverview.cli.render import render_tree, tree_to_dict
from coverview.cli.utils import ROOTS_ARGUMENT, open_workspace
from coverview.core.errors import CoverviewError
from coverview.core.progress import pluralize, status
from coverview.index.builder import TreeIndex


async def _build(paths: tuple[Path, ...]) -> TreeIndex:
    workspace = open_workspace(paths, operation="show")
    try:
        return await workspace.provider.refresh()
    finally:
        await workspace.provider.close()


@click.command()
@ROOTS_ARGUMENT
@click.option("--functions", is_flag=True, help="Include per-function hit counts")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show_command(paths: tuple[Path, ...], functions: bool, as_json: bool) -> None:
    """Show the coverage tree of one or more roots.

    PATHS are the monitored roots (default: current directory).
    """
    try:
        tree = asyncio.run(_build(paths))
    except CoverviewError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(tree_to_dict(tree), indent=2))
        return

    Console().print(render_tree(tree, functions=functions))
    if tree.diagnostics:
        count = pluralize(len(tree.diagnostics), "diagnostic")
        status(f"{count} (run with -v for details)", style="warning")
