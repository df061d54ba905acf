# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Materialization of a detector configuration.

`ConfigMaterializer` decides whether the requested geometry differs from the
default one and, if so, creates a patched working copy of the EPIC geometry
sources keyed by the detector configuration identifier and builds it.
A working copy that is already built is reused without any further work.

`PatchEdit` is one entry of the patch plan: a single regular-expression edit
of a geometry source file. An edit that matches nothing aborts the whole
materialization before anything is written or built.
"""

from .materializer import ConfigMaterializer
from .patch import PatchEdit

__all__ = ["ConfigMaterializer", "PatchEdit"]
