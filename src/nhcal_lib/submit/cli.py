# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from click_option_group import optgroup
from rich.console import Console

from nhcal_lib.batch import BatchMeta
from nhcal_lib.core.common import current_user
from nhcal_lib.core.config import CFG
from nhcal_lib.core.error import NhcalError
from nhcal_lib.core.logger import get_logger
from nhcal_lib.monitor.cli import monitor_jobs
from nhcal_lib.monitor.machine import MonitorOutcome
from nhcal_lib.parameters.options import parameter_options, resolve_parameters
from nhcal_lib.show.presenter import ConfigPresenter

from .campaign import Campaign

logger = get_logger(__name__)


@click.command(
    short_help="Submit a simulation batch.",
    help=f"""Prepare and submit a batch of simulation jobs for the backward hadronic calorimeter.

Every parameter is taken from the command line, then from its environment variable,
then from the defaults. The parameters are validated before anything is installed or built.

The missing parts of the toolchain (eic-shell, EPIC, EICrecon) are installed,
a custom detector geometry is built if needed, and the job script
and the submission file `{CFG.paths.descriptor_name}` are written into the current directory.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@parameter_options
@optgroup.group(f"{click.style('Submission', fg='yellow')}")
@optgroup.option(
    "--no-submit",
    is_flag=True,
    help="Only generate the job script and the submission file without submitting.",
)
@optgroup.option(
    "--monitor",
    "monitor_after",
    is_flag=True,
    help="Track the submitted jobs until they finish.",
)
@optgroup.option(
    "--batch-system",
    type=str,
    default=None,
    help=f"Name of the batch system to submit the jobs to. If not specified, the environment variable '{CFG.env_vars.batch_system}' is used or the batch system is auto-detected.",
)
def submit(
    no_submit: bool, monitor_after: bool, batch_system: str | None, **kwargs
) -> NoReturn:
    """
    Prepare and submit a simulation batch.
    """
    try:
        params, derived, defaults, base_dir = resolve_parameters(kwargs)

        console = Console()
        console.print(ConfigPresenter(params, derived, defaults).createConfigPanel(console))

        # no batch system is needed to only generate the files
        BatchSystem = None if no_submit else BatchMeta.obtain(batch_system)
        campaign = Campaign.fromConfig(params, derived, defaults, base_dir, BatchSystem)

        handle = campaign.run(submit=not no_submit)
        if handle and BatchSystem and monitor_after:
            outcome = monitor_jobs(
                BatchSystem,
                current_user(),
                CFG.monitor.running_time_limit_hours,
                CFG.monitor.poll_interval,
                derived.log_dir,
            )
            logger.debug(f"Monitoring of batch '{handle}' finished: {outcome}.")
            sys.exit(0 if outcome == MonitorOutcome.DONE else CFG.exit_codes.default)

        sys.exit(0)
    except NhcalError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
