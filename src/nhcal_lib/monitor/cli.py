# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from pathlib import Path
from typing import NoReturn

import click
from click_help_colors import HelpColorsCommand
from click_option_group import optgroup
from rich.console import Console

from nhcal_lib.batch import BatchInterface, BatchMeta
from nhcal_lib.core.common import current_user
from nhcal_lib.core.config import CFG
from nhcal_lib.core.error import NhcalError
from nhcal_lib.core.logger import get_logger
from nhcal_lib.submit.record import CampaignRecord

from .failures import scan_job_failures
from .machine import MonitorOutcome
from .monitor import JobMonitor
from .presenter import MonitorPresenter

logger = get_logger(__name__)


@click.command(
    short_help="Track the jobs of a user until they finish.",
    help=f"""Track all jobs of a user until they finish, run out of time, or get stuck.

The batch system is queried every `--poll-interval` seconds. When the time limit
is exceeded, or when only held jobs remain, all remaining jobs of the user are removed.

If `--log-dir` is specified, the scheduler logs in the directory are scanned
for failed jobs once monitoring stops.

`{CFG.binary_name} monitor` exits with 0 if all jobs finished and with 1 otherwise.""",
    cls=HelpColorsCommand,
    help_options_color="bright_blue",
)
@optgroup.group(f"{click.style('Monitor settings', fg='yellow')}")
@optgroup.option(
    "--user",
    type=str,
    default=None,
    help="Owner of the monitored jobs. Defaults to the current user.",
)
@optgroup.option(
    "--time-limit",
    type=click.FloatRange(min=0, min_open=True),
    default=CFG.monitor.running_time_limit_hours,
    show_default=True,
    help="Limit on the monitoring time in hours.",
)
@optgroup.option(
    "--poll-interval",
    type=click.IntRange(min=1),
    default=CFG.monitor.poll_interval,
    show_default=True,
    help="Interval between queries of the batch system in seconds.",
)
@optgroup.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory with the scheduler logs of the monitored batch.",
)
@optgroup.option(
    "--batch-system",
    type=str,
    default=None,
    help=f"Name of the batch system to query. If not specified, the environment variable '{CFG.env_vars.batch_system}' is used or the batch system is auto-detected.",
)
def monitor(
    user: str | None,
    time_limit: float,
    poll_interval: int,
    log_dir: Path | None,
    batch_system: str | None,
) -> NoReturn:
    """
    Track all jobs of a user until they finish.
    """
    try:
        BatchSystem = BatchMeta.obtain(batch_system)
        outcome = monitor_jobs(
            BatchSystem, user or current_user(), time_limit, poll_interval, log_dir
        )
        sys.exit(0 if outcome == MonitorOutcome.DONE else CFG.exit_codes.default)
    except NhcalError as e:
        logger.error(e)
        sys.exit(CFG.exit_codes.default)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def monitor_jobs(
    batch_system: type[BatchInterface],
    user: str,
    time_limit_hours: float,
    poll_interval: int,
    log_dir: Path | None = None,
) -> MonitorOutcome:
    """
    Monitor the jobs of a user, printing progress to the terminal.

    Args:
        batch_system (type[BatchInterface]): The batch system to query.
        user (str): Owner of the monitored jobs.
        time_limit_hours (float): Limit on the monitoring time in hours.
        poll_interval (int): Interval between queries in seconds.
        log_dir (Path | None): Directory with the scheduler logs to scan
            for failed jobs once monitoring stops.

    Returns:
        MonitorOutcome: The terminal state of the monitor.
    """
    if log_dir and (record_file := log_dir.parent / CFG.paths.campaign_record).is_file():
        record = CampaignRecord.fromFile(record_file)
        logger.info(
            f"Monitoring batch '{record.batch_id}' ({record.job_count} jobs) "
            f"submitted at {record.submission_time.strftime(CFG.date_formats.standard)}."
        )

    presenter = MonitorPresenter(Console())
    job_monitor = JobMonitor(
        batch_system,
        user,
        int(time_limit_hours * 3600),
        poll_interval,
        CFG.monitor.max_failed_polls,
        on_progress=presenter.showProgress,
    )

    outcome = job_monitor.run()
    presenter.showOutcome(outcome, user)

    if log_dir:
        report_failures(log_dir)

    return outcome


def report_failures(log_dir: Path) -> None:
    """Log every failed job found in the scheduler logs."""
    if not log_dir.is_dir():
        logger.warning(f"Log directory '{log_dir}' does not exist.")
        return

    if not (failures := scan_job_failures(log_dir)):
        logger.info("No failed jobs found.")
        return

    for failure in failures:
        logger.warning(failure)
    logger.warning(f"{len(failures)} job(s) failed.")
