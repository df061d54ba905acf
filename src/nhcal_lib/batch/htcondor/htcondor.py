# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import shlex
import shutil
from pathlib import Path

from nhcal_lib.batch.interface import (
    BatchHandle,
    BatchInterface,
    BatchMeta,
    JobQueueSnapshot,
    batch_system,
)
from nhcal_lib.core.common import run_bash
from nhcal_lib.core.error import SchedulerError, SubmissionError
from nhcal_lib.core.logger import get_logger

from .common import parse_condor_q_totals, parse_condor_submit

logger = get_logger(__name__)


@batch_system
class HTCondor(BatchInterface, metaclass=BatchMeta):
    def envName() -> str:
        return "HTCondor"

    def isAvailable() -> bool:
        return shutil.which("condor_submit") is not None

    def submit(descriptor: Path) -> BatchHandle:
        result = run_bash(f"condor_submit {shlex.quote(str(descriptor))}")

        if result.returncode != 0:
            raise SubmissionError(
                f"Failed to submit '{descriptor}': {result.stderr.strip()}."
            )

        return parse_condor_submit(result.stdout)

    def query(user: str) -> JobQueueSnapshot:
        result = run_bash(f"condor_q {shlex.quote(user)}")

        if result.returncode != 0:
            raise SchedulerError(
                f"Could not query jobs of user '{user}': {result.stderr.strip()}."
            )

        return parse_condor_q_totals(result.stdout, user)

    def remove(user: str) -> None:
        result = run_bash(f"condor_rm {shlex.quote(user)}")

        if result.returncode != 0:
            raise SchedulerError(
                f"Failed to remove jobs of user '{user}': {result.stderr.strip()}."
            )
