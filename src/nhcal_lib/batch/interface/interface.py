# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from abc import ABC
from pathlib import Path

from .snapshot import BatchHandle, JobQueueSnapshot


class BatchInterface(ABC):
    """
    Abstract base class for batch system integrations.

    Concrete batch system classes must implement these methods to allow
    nhcal to submit and track batches of jobs uniformly.

    All functions should raise an NhcalError subclass when encountering an error.
    """

    @staticmethod
    def envName() -> str:
        """
        Return the name of the batch system environment.

        Returns:
            str: The batch system name.
        """
        raise NotImplementedError(
            "envName method is not implemented for this batch system implementation"
        )

    @staticmethod
    def isAvailable() -> bool:
        """
        Determine whether the batch system is available on the current host.

        Returns:
            bool: True if the batch system is available, False otherwise.
        """
        raise NotImplementedError(
            "isAvailable method is not implemented for this batch system implementation"
        )

    @staticmethod
    def submit(descriptor: Path) -> BatchHandle:
        """
        Submit a batch of jobs described by a submission descriptor.

        Args:
            descriptor (Path): Path to the submission descriptor.

        Returns:
            BatchHandle: Handle of the submitted batch.

        Raises:
            SubmissionError: If the batch system rejects the descriptor.
        """
        raise NotImplementedError(
            "submit method is not implemented for this batch system implementation"
        )

    @staticmethod
    def query(user: str) -> JobQueueSnapshot:
        """
        Get a summary of all jobs of `user`.

        Args:
            user (str): Name of the user.

        Returns:
            JobQueueSnapshot: Current state of the user's jobs.

        Raises:
            SchedulerError: If the batch system cannot be queried.
        """
        raise NotImplementedError(
            "query method is not implemented for this batch system implementation"
        )

    @staticmethod
    def remove(user: str) -> None:
        """
        Remove all jobs of `user` from the batch system.

        Args:
            user (str): Name of the user.

        Raises:
            SchedulerError: If the jobs could not be removed.
        """
        raise NotImplementedError(
            "remove method is not implemented for this batch system implementation"
        )
