"""Command-line interface for claudetracker."""

from pathlib import Path
from typing import Optional

import click

from ...constants import CONFIG_PATH
from ...infrastructure.factory import ServiceFactory
from .sessions_cmd import start, stop, watch
from .status_cmd import history, status


@click.group()
@click.option(
    "--config-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=CONFIG_PATH,
    show_default=True,
    help="Tracker configuration file",
)
@click.option(
    "--stats-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Override the stats file location from the configuration",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Path, stats_file: Optional[Path]):
    """Claude Tracker - Track Claude sessions against a monthly quota."""
    if ctx.obj is None:
        ctx.obj = ServiceFactory(config_path=config_file, stats_path=stats_file)
    ctx.call_on_close(ctx.obj.close)


# Register commands
cli.add_command(start)
cli.add_command(stop)
cli.add_command(watch)

cli.add_command(status)
cli.add_command(history)


# Aliases
@cli.command(name="begin", hidden=True)
@click.pass_context
def begin_alias(ctx):
    """Alias for 'start'."""
    ctx.forward(start)


@cli.command(name="end", hidden=True)
@click.pass_context
def end_alias(ctx):
    """Alias for 'stop'."""
    ctx.forward(stop)


__all__ = ['cli']
