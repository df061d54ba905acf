# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the nhcal command-line tool.

This package provides the internal logic behind nhcal's simulation campaigns
for the backward hadronic calorimeter. It resolves and validates detector and
beam parameters, installs the simulation toolchain, builds custom detector
geometries, generates job scripts and submission files, and submits and tracks
batches of jobs in a batch system. All nhcal CLI commands ultimately delegate
to the functionality implemented here.
"""

from .nhcal import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "batch",
    "core",
    "generate",
    "materialize",
    "monitor",
    "parameters",
    "show",
    "submit",
    "toolchain",
]
