# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from pathlib import Path

from nhcal_lib.core.error import JobFailure
from nhcal_lib.core.logger import get_logger

logger = get_logger(__name__)

# Header of a 'job terminated' event in an HTCondor user log,
# e.g. '005 (1234.000.000) 2025-01-01 12:00:00 Job terminated.'
_TERMINATED_PATTERN = re.compile(r"^005 \((\d+)\.(\d+)\.\d+\)")

# e.g. '(1) Normal termination (return value 2)'
_RETURN_VALUE_PATTERN = re.compile(r"\(return value (\d+)\)")

# e.g. '(0) Abnormal termination (signal 9)'
_SIGNAL_PATTERN = re.compile(r"\(signal (\d+)\)")


def parse_user_log(text: str) -> list[JobFailure]:
    """
    Find jobs that terminated unsuccessfully in an HTCondor user log.

    Jobs killed by a signal are reported with exit code 128 + signal.

    Args:
        text (str): Content of the user log.

    Returns:
        list[JobFailure]: The failed jobs, in the order of the log.
    """
    failures = []
    current: tuple[str, str] | None = None

    for line in text.splitlines():
        if match := _TERMINATED_PATTERN.match(line):
            # process ids are zero-padded in the log
            current = (match.group(1), str(int(match.group(2))))
            continue

        if current is None:
            continue

        if match := _RETURN_VALUE_PATTERN.search(line):
            if (code := int(match.group(1))) != 0:
                failures.append(JobFailure(*current, code))
            current = None
        elif match := _SIGNAL_PATTERN.search(line):
            failures.append(JobFailure(*current, 128 + int(match.group(1))))
            current = None
        elif line.strip() == "...":
            current = None

    return failures


def scan_job_failures(log_dir: Path) -> list[JobFailure]:
    """
    Collect failed job instances from all HTCondor user logs in a directory.

    Args:
        log_dir (Path): Directory with the per-instance `*.log` files.

    Returns:
        list[JobFailure]: The failed jobs.
    """
    failures = []
    for log in sorted(log_dir.glob("*.log")):
        logger.debug(f"Scanning user log '{log}'.")
        failures.extend(parse_user_log(log.read_text(errors="replace")))

    return failures
