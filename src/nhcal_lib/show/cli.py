# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from rich.console import Console

from nhcal_lib.core.config import CFG
from nhcal_lib.core.error import NhcalError
from nhcal_lib.core.logger import get_logger
from nhcal_lib.parameters.options import parameter_options, resolve_parameters

from .presenter import ConfigPresenter

logger = get_logger(__name__)


@click.command(
    short_help="Display the configuration of a batch.",
    help=f"""Resolve and validate the parameters of a batch and display its configuration.

Every parameter is taken from the command line, then from its environment variable,
then from the defaults. Nothing is installed, built, written, or submitted.

Use `{CFG.binary_name} submit` with the same options to submit the batch.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@parameter_options
def show(**kwargs) -> NoReturn:
    """
    Display the resolved configuration of a batch without any side effects.
    """
    try:
        params, derived, defaults, _ = resolve_parameters(kwargs)
        console = Console()
        presenter = ConfigPresenter(params, derived, defaults)
        console.print(presenter.createConfigPanel(console))
        sys.exit(0)
    except NhcalError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
