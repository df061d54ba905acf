# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout nhcal.

Every failure that happens before the batch is submitted is fatal to the whole
run and is reported through one of the `NhcalError` subclasses below. Each
exception carries an associated exit code used by nhcal commands to report
failures consistently; the accompanying message tells the failures apart.
"""

from nhcal_lib.core.config import CFG


class NhcalError(Exception):
    """Common exception type for all recoverable nhcal errors."""

    exit_code = CFG.exit_codes.default


class ConfigurationError(NhcalError):
    """Raised when a parameter cannot be parsed or is out of range."""

    pass


class ToolchainMissingError(NhcalError):
    """Raised when a required toolchain component is not installed."""

    pass


class PatchApplicationError(NhcalError):
    """Raised when a geometry-source edit does not match anything in the target file."""

    pass


class TemplateError(NhcalError):
    """Raised when a template cannot be fully rendered."""

    pass


class BuildError(NhcalError):
    """Raised when installing or compiling a toolchain component fails."""

    pass


class SubmissionError(NhcalError):
    """Raised when the batch system rejects a submission descriptor."""

    pass


class SchedulerError(NhcalError):
    """Raised when the batch system cannot be queried or cannot remove jobs."""

    pass


class JobFailure(NhcalError):
    """
    Failure of a single job instance.

    Scoped to one instance of the batch: it is reported, never raised
    to abort monitoring of the remaining jobs.
    """

    def __init__(self, cluster_id: str, process_id: str, exit_code: int):
        super().__init__(
            f"Job '{cluster_id}.{process_id}' failed with exit code {exit_code}."
        )
        self.cluster_id = cluster_id
        self.process_id = process_id
        self.job_exit_code = exit_code
