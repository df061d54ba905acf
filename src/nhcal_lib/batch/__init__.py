# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Batch system integration of nhcal.

Importing this package registers all supported batch-system backends.
"""

from .htcondor import HTCondor
from .interface import BatchHandle, BatchInterface, BatchMeta, JobQueueSnapshot

__all__ = [
    "BatchHandle",
    "BatchInterface",
    "BatchMeta",
    "HTCondor",
    "JobQueueSnapshot",
]
