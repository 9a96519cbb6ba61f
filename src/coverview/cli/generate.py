"""coverview generate command - run each root's coverage command."""

import asyncio
from pathlib import Path

import click

from coverview.cli.utils import ROOTS_ARGUMENT, open_workspace
from coverview.core.errors import CommandError, CoverviewError
from coverview.core.progress import spinner, status


async def _generate(paths: tuple[Path, ...]) -> str:
    workspace = open_workspace(paths, operation="coverage generation")
    return await workspace.provider.generate_coverage()


@click.command()
@ROOTS_ARGUMENT
def generate_command(paths: tuple[Path, ...]) -> None:
    """Regenerate coverage by running each root's coverage_command.

    PATHS are the monitored roots (default: current directory).
    """
    try:
        with spinner("Generating coverage"):
            output = asyncio.run(_generate(paths))
    except CommandError as e:
        status(str(e), style="error")
        if e.stderr:
            click.echo(e.stderr, err=True)
        raise SystemExit(1) from e
    except CoverviewError as e:
        raise click.ClickException(str(e)) from e

    if output:
        click.echo(output)
    status("Coverage generated", style="success")
