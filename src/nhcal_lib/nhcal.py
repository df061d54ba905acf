# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys

import click
from click_help_colors import HelpColorsGroup

from nhcal_lib.monitor.cli import monitor
from nhcal_lib.show.cli import show
from nhcal_lib.submit.cli import submit

__version__ = "0.1.0"

# support both --help and -h
_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@click.group(
    cls=HelpColorsGroup,
    help_options_color="bright_blue",
    invoke_without_command=True,
    context_settings=_CONTEXT_SETTINGS,
)
@click.option(
    "--version",
    is_flag=True,
    help="Print the current version of nhcal and exit.",
)
@click.pass_context
def cli(ctx: click.Context, version: bool):
    """
    Run any nhcal command.

    nhcal automates simulation campaigns for the backward hadronic calorimeter:
    it builds the requested detector geometry, generates the job script,
    submits a batch of jobs, and tracks it until completion.
    """
    if version:
        print(__version__)
        sys.exit(0)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        sys.exit(0)


cli.add_command(submit)
cli.add_command(monitor)
cli.add_command(show)
