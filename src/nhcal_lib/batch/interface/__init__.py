# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Abstractions for integrating nhcal with batch scheduling systems.

- `BatchInterface`: the narrow interface every batch-system backend implements:
  submitting a batch, summarizing a user's jobs, and removing them.

- `JobQueueSnapshot` and `BatchHandle`: the values exchanged with a backend.

- `BatchMeta`: a metaclass that registers available batch-system backends
  and selects one by name, from an environment variable, or by probing system
  availability. The `@batch_system` decorator registers implementations.
"""

from .interface import BatchInterface
from .meta import BatchMeta, batch_system
from .snapshot import BatchHandle, JobQueueSnapshot

__all__ = [
    "BatchHandle",
    "BatchInterface",
    "BatchMeta",
    "JobQueueSnapshot",
    "batch_system",
]
