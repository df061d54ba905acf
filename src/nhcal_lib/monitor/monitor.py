# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Callable
from dataclasses import replace
from time import sleep

from nhcal_lib.batch.interface import BatchInterface
from nhcal_lib.core.error import SchedulerError
from nhcal_lib.core.logger import get_logger

from .machine import (
    MonitorAction,
    MonitorOutcome,
    MonitorState,
    Progress,
    transition,
)

logger = get_logger(__name__)


class JobMonitor:
    """
    Tracks all jobs of a user until they finish, get stuck, or run out of time.

    The monitor does not need to know how or when the jobs were submitted:
    it only repeatedly queries the batch system for a summary of the user's jobs.
    Queries are performed one at a time, separated by a blocking sleep.
    """

    def __init__(
        self,
        batch_system: type[BatchInterface],
        user: str,
        running_time_limit: int,
        poll_interval: int,
        max_failed_polls: int,
        on_progress: Callable[[Progress], None] | None = None,
        wait: Callable[[float], None] = sleep,
    ):
        """
        Initialize the monitor.

        Args:
            batch_system (type[BatchInterface]): The batch system to query.
            user (str): Owner of the monitored jobs.
            running_time_limit (int): Limit on the monitoring time in seconds.
                When exceeded, all remaining jobs are removed.
            poll_interval (int): Interval between queries in seconds.
            max_failed_polls (int): Number of consecutive failed queries after
                which monitoring is aborted.
            on_progress (Callable[[Progress], None] | None): Called with the progress
                of the batch after every non-terminal query.
            wait (Callable[[float], None]): Function used to wait between queries.
        """
        self._batch_system = batch_system
        self._user = user
        self._running_time_limit = running_time_limit
        self._poll_interval = poll_interval
        self._max_failed_polls = max_failed_polls
        self._on_progress = on_progress
        self._wait = wait
        self._state = MonitorState()

    @property
    def state(self) -> MonitorState:
        return self._state

    def run(self) -> MonitorOutcome:
        """
        Poll the batch system until a terminal state is reached.

        A failed query never stops monitoring on its own: it is retried
        in the next cycle. Monitoring is aborted only after `max_failed_polls`
        consecutive failures or when interrupted by the user.

        Returns:
            MonitorOutcome: The terminal state.
        """
        try:
            while True:
                if (outcome := self._cycle()).isTerminal():
                    return outcome
                self._wait(self._poll_interval)
        except KeyboardInterrupt:
            logger.warning("Monitoring interrupted.")
            return MonitorOutcome.ABORTED

    def _cycle(self) -> MonitorOutcome:
        """Perform one query and act upon the result."""
        try:
            snapshot = self._batch_system.query(self._user)
        except SchedulerError as e:
            return self._onFailedQuery(e)

        step = transition(
            self._state, snapshot, self._running_time_limit, self._poll_interval
        )
        self._state = step.state

        if step.action == MonitorAction.REMOVE:
            self._removeJobs()

        if step.progress and self._on_progress:
            self._on_progress(step.progress)

        return step.outcome

    def _onFailedQuery(self, error: SchedulerError) -> MonitorOutcome:
        failed = self._state.failed_polls + 1
        self._state = replace(
            self._state,
            failed_polls=failed,
            elapsed_seconds=self._state.elapsed_seconds + self._poll_interval,
        )

        if failed >= self._max_failed_polls:
            logger.error(f"{error} Giving up after {failed} failed attempts.")
            return MonitorOutcome.ABORTED

        logger.warning(f"{error} Retrying in {self._poll_interval} seconds.")
        return MonitorOutcome.POLLING

    def _removeJobs(self) -> None:
        try:
            self._batch_system.remove(self._user)
            logger.info(f"Removed all remaining jobs of user '{self._user}'.")
        except SchedulerError as e:
            logger.error(e)
