# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Pure state machine deciding what to do with a batch after each status query.

States: POLLING → {DONE, TIMED_OUT, HELD, ABORTED}. All but POLLING are terminal.
`transition` only classifies a snapshot; performing the resulting action
(sleeping, removing jobs) is left to `JobMonitor`.
"""

from dataclasses import dataclass, replace
from enum import Enum

from nhcal_lib.batch.interface import JobQueueSnapshot


class MonitorOutcome(Enum):
    """
    State of the job monitor.
    """

    POLLING = 1
    DONE = 2
    TIMED_OUT = 3
    HELD = 4
    ABORTED = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    def isTerminal(self) -> bool:
        return self != MonitorOutcome.POLLING

    def needsResubmission(self) -> bool:
        """Check whether the outcome leaves jobs of the batch unfinished."""
        return self in {MonitorOutcome.TIMED_OUT, MonitorOutcome.HELD}


class MonitorAction(Enum):
    """
    Action requested by a transition.
    """

    # Wait for the poll interval before the next query.
    SLEEP = 1
    # Remove all remaining jobs of the user.
    REMOVE = 2
    # Nothing to do.
    NONE = 3


@dataclass(frozen=True)
class MonitorState:
    """
    State of one monitor invocation, replaced after every query.
    """

    # Time spent monitoring in seconds.
    elapsed_seconds: int = 0

    # Number of remaining jobs reported by the first query.
    total_jobs_at_first_poll: int = 0

    # True until the first query succeeds.
    is_first_poll: bool = True

    # Number of consecutive failed queries.
    failed_polls: int = 0


@dataclass(frozen=True)
class Progress:
    """
    Progress of the batch reported after a non-terminal transition.
    """

    completed: int
    total: int
    elapsed_seconds: int
    time_limit: int
    poll_interval: int

    @property
    def percent_done(self) -> int:
        """Completed jobs in whole percent, rounded down."""
        return self.completed * 100 // self.total if self.total else 100

    @property
    def percent_of_limit(self) -> int:
        """Elapsed time in whole percent of the time limit, rounded down."""
        return self.elapsed_seconds * 100 // self.time_limit if self.time_limit else 100


@dataclass(frozen=True)
class Transition:
    """
    Result of feeding one snapshot into the state machine.
    """

    state: MonitorState
    action: MonitorAction
    outcome: MonitorOutcome
    progress: Progress | None = None


def transition(
    state: MonitorState,
    snapshot: JobQueueSnapshot,
    running_time_limit: int,
    poll_interval: int,
) -> Transition:
    """
    Classify a snapshot of the user's jobs.

    The conditions are evaluated in order:
      1. no job remains → DONE,
      2. the elapsed time exceeds the limit → TIMED_OUT, remove all jobs,
      3. some jobs are held and none is idle or running → HELD, remove all jobs,
      4. otherwise keep POLLING, advance the elapsed time by one interval, sleep.

    Args:
        state (MonitorState): The current state.
        snapshot (JobQueueSnapshot): The latest snapshot of the user's jobs.
        running_time_limit (int): Limit on the elapsed time in seconds.
        poll_interval (int): Interval between queries in seconds.

    Returns:
        Transition: The new state, the action to take, and the outcome.
    """
    if state.is_first_poll:
        # the baseline is never recomputed, even if more jobs are submitted later
        state = replace(
            state,
            total_jobs_at_first_poll=snapshot.total_remaining,
            is_first_poll=False,
        )
    state = replace(state, failed_polls=0)

    if snapshot.total_remaining == 0:
        return Transition(state, MonitorAction.NONE, MonitorOutcome.DONE)

    if state.elapsed_seconds > running_time_limit:
        return Transition(state, MonitorAction.REMOVE, MonitorOutcome.TIMED_OUT)

    if snapshot.held > 0 and snapshot.idle == 0 and snapshot.running == 0:
        return Transition(state, MonitorAction.REMOVE, MonitorOutcome.HELD)

    state = replace(state, elapsed_seconds=state.elapsed_seconds + poll_interval)
    progress = Progress(
        completed=state.total_jobs_at_first_poll - snapshot.total_remaining,
        total=state.total_jobs_at_first_poll,
        elapsed_seconds=state.elapsed_seconds,
        time_limit=running_time_limit,
        poll_interval=poll_interval,
    )
    return Transition(state, MonitorAction.SLEEP, MonitorOutcome.POLLING, progress)
