# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Installation of the simulation toolchain.

nhcal treats the toolchain as an external collaborator: it only needs to know
whether a component is installed at a given path and how to build it if not.

- `ToolchainComponent` describes one buildable component (EPIC geometry,
  EICrecon reconstruction) together with the marker file proving its installation.

- `ToolchainInstaller` is the narrow interface used by the rest of nhcal,
  `EicShellInstaller` its implementation running git and CMake inside eic-shell.
"""

from .component import ToolchainComponent, eicrecon_component, epic_component
from .installer import EicShellInstaller, ToolchainInstaller

__all__ = [
    "EicShellInstaller",
    "ToolchainComponent",
    "ToolchainInstaller",
    "eicrecon_component",
    "epic_component",
]
