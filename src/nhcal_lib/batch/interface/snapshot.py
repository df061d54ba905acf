# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass


@dataclass(frozen=True)
class JobQueueSnapshot:
    """
    Point-in-time summary of the jobs of one user, as reported by the batch system.
    """

    # Number of jobs still known to the batch system.
    total_remaining: int

    # Number of jobs that have completed.
    completed: int = 0

    # Number of jobs that have been removed.
    removed: int = 0

    # Number of jobs waiting to be started.
    idle: int = 0

    # Number of running jobs.
    running: int = 0

    # Number of held jobs.
    held: int = 0

    # Number of suspended jobs.
    suspended: int = 0


@dataclass(frozen=True)
class BatchHandle:
    """
    Handle of a submitted batch.
    """

    # Identifier assigned to the batch by the batch system.
    batch_id: str

    # Number of jobs in the batch.
    job_count: int

    def __str__(self) -> str:
        return self.batch_id
