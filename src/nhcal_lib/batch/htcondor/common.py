# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re

from nhcal_lib.batch.interface import BatchHandle, JobQueueSnapshot
from nhcal_lib.core.error import SchedulerError, SubmissionError
from nhcal_lib.core.logger import get_logger

logger = get_logger(__name__)

# e.g. '10 job(s) submitted to cluster 1234.'
_SUBMITTED_PATTERN = re.compile(r"(\d+)\s+job\(s\)\s+submitted\s+to\s+cluster\s+(\d+)")

# e.g. '1 completed', '3 idle'
_COUNT_PATTERN = re.compile(
    r"(\d+)\s+(completed|removed|idle|running|held|suspended)\b"
)


def parse_condor_submit(output: str) -> BatchHandle:
    """
    Parse the output of condor_submit.

    Args:
        output (str): Standard output of condor_submit.

    Returns:
        BatchHandle: Handle of the submitted cluster.

    Raises:
        SubmissionError: If the output does not report a submitted cluster.
    """
    if not (match := _SUBMITTED_PATTERN.search(output)):
        raise SubmissionError(
            f"Could not find the submitted cluster in the output of condor_submit: '{output.strip()}'."
        )

    return BatchHandle(batch_id=match.group(2), job_count=int(match.group(1)))


def parse_condor_q_totals(output: str, user: str) -> JobQueueSnapshot:
    """
    Parse the summary line of a user's jobs from the output of condor_q.

    Example of the summary line:
        Total for user: 10 jobs; 1 completed, 2 removed, 3 idle, 0 running, 4 held, 0 suspended

    Args:
        output (str): Standard output of condor_q.
        user (str): Name of the user.

    Returns:
        JobQueueSnapshot: The parsed summary.

    Raises:
        SchedulerError: If the summary line is missing or malformed.
    """
    line_pattern = re.compile(
        rf"^\s*Total for {re.escape(user)}:\s*(\d+)\s+jobs?;(.*)$", re.MULTILINE
    )
    if not (match := line_pattern.search(output)):
        raise SchedulerError(f"Could not find the summary of jobs of user '{user}' in condor_q output.")

    counts = {state: int(n) for n, state in _COUNT_PATTERN.findall(match.group(2))}
    logger.debug(f"Parsed condor_q totals for '{user}': {match.group(1)} jobs, {counts}.")

    return JobQueueSnapshot(total_remaining=int(match.group(1)), **counts)
