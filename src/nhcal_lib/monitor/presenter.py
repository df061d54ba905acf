# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from rich.console import Console
from rich.text import Text

from nhcal_lib.core.common import format_duration_hms

from .machine import MonitorOutcome, Progress


class MonitorPresenter:
    """
    Prints the progress of a monitored batch on a single, repeatedly overwritten line.
    """

    def __init__(self, console: Console):
        self._console = console
        self._line_open = False

    def showProgress(self, progress: Progress) -> None:
        """Overwrite the progress line with the current progress."""
        self._console.print(self.formatProgress(progress), end="\r")
        self._line_open = True

    def showOutcome(self, outcome: MonitorOutcome, user: str) -> None:
        """Terminate the progress line and announce the terminal state."""
        if self._line_open:
            self._console.print()
            self._line_open = False

        self._console.print(self.formatOutcome(outcome, user))
        if outcome.needsResubmission():
            self._console.print(Text("Further resubmission needed.", style="bright_yellow"))

    @staticmethod
    def formatProgress(progress: Progress) -> Text:
        """
        Format the progress line.

        Example:
            Jobs: 3/10 (30% done) | Time: 0h 1m 40s (3% of limit) | Waiting 10s...
        """
        return (
            Text("Jobs: ", style="default")
            + Text(f"{progress.completed}/{progress.total}", style="bold")
            + Text(f" ({progress.percent_done}% done) | Time: ", style="default")
            + Text(format_duration_hms(progress.elapsed_seconds), style="bold")
            + Text(
                f" ({progress.percent_of_limit}% of limit) | Waiting {progress.poll_interval}s...",
                style="default",
            )
        )

    @staticmethod
    def formatOutcome(outcome: MonitorOutcome, user: str) -> Text:
        """Format the final line announcing the terminal state."""
        match outcome:
            case MonitorOutcome.DONE:
                return Text(f"Jobs for user {user} are finished! ", style="default") + Text(
                    "DONE", style="bright_green bold"
                )
            case MonitorOutcome.TIMED_OUT:
                return Text(
                    f"Jobs for user {user} are running for too long! ", style="default"
                ) + Text("TIMED OUT", style="bright_red bold")
            case MonitorOutcome.HELD:
                return Text(
                    f"Only held jobs remain for user {user}. ", style="default"
                ) + Text("HELD", style="bright_red bold")
            case _:
                return Text(f"Monitoring of jobs for user {user} ", style="default") + Text(
                    "ABORTED", style="bright_yellow bold"
                )
