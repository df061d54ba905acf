# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Tracking of a submitted batch until completion.

- `transition` is a pure function classifying one `JobQueueSnapshot` given the
  current `MonitorState`: DONE when no job remains, TIMED_OUT when the time limit
  is exceeded, HELD when only held jobs remain, otherwise POLLING.

- `JobMonitor` runs the synchronous polling loop against a batch system,
  removes all of the user's jobs on TIMED_OUT or HELD, and tolerates failed queries.

- `MonitorPresenter` prints the in-place progress line and the final outcome.

- `scan_job_failures` reports job instances that exited unsuccessfully.
"""

from .failures import scan_job_failures
from .machine import MonitorAction, MonitorOutcome, MonitorState, Progress, transition
from .monitor import JobMonitor
from .presenter import MonitorPresenter

__all__ = [
    "JobMonitor",
    "MonitorAction",
    "MonitorOutcome",
    "MonitorPresenter",
    "MonitorState",
    "Progress",
    "scan_job_failures",
    "transition",
]
