# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Generation of the job script and the batch submission descriptor.

- `Template` is a text template with a closed set of `@NAME@` slots. Rendering
  fails with a `TemplateError` if any slot is left unfilled, so no generated
  file ever contains a placeholder.

- `ScriptGenerator` produces the executable job script taking seven positional
  arguments (batch id, instance id, momentum, phi, theta, particle, number of
  events) and running simulation, reconstruction, and analysis.

- `JobDescriptor` describes a batch of identical jobs and renders it into an
  HTCondor submit description.

- `JobOutputFiles` derives collision-free output file names of one job instance.
"""

from .descriptor import JobDescriptor
from .naming import JobOutputFiles, file_stem
from .script import ScriptGenerator
from .template import Template

__all__ = [
    "JobDescriptor",
    "JobOutputFiles",
    "ScriptGenerator",
    "Template",
    "file_stem",
]
