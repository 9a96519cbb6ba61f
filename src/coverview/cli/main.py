"""coverview CLI."""

import locale

import click
import structlog

from coverview import __version__
from coverview.cli.generate import generate_command
from coverview.cli.show import show_command
from coverview.cli.watch import watch_command
from coverview.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="coverview")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """coverview - live hierarchical coverage view."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        structlog.get_logger().warning("collation_locale_unavailable", error=str(e))


cli.add_command(show_command, name="show")
cli.add_command(watch_command, name="watch")
cli.add_command(generate_command, name="generate")


if __name__ == "__main__":
    cli()
