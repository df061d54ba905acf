# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Self

from nhcal_lib.core.config import CFG


@dataclass(frozen=True)
class ToolchainComponent:
    """
    A toolchain component built from source with CMake.
    """

    # Human-readable name of the component.
    name: str

    # Directory with the source code. The component is installed into `install/` inside it.
    source_dir: Path

    # Path of the file proving a finished installation, relative to `source_dir`.
    marker: str

    # Repository the source code is cloned from.
    repository: str | None = None

    # Component whose environment must be sourced before building this one.
    requires: "ToolchainComponent | None" = None

    # Whether to compile using ccache.
    use_ccache: bool = False

    @property
    def marker_path(self) -> Path:
        """Absolute path to the marker file."""
        return self.source_dir / self.marker

    def relocated(self, source_dir: Path) -> Self:
        """
        Get a copy of the component living in another directory.

        Used for working copies of a component with modified sources.
        The copy is never cloned from the repository.
        """
        return replace(self, source_dir=source_dir, repository=None)


def epic_component(base_dir: Path) -> ToolchainComponent:
    """Get the base EPIC detector-geometry component."""
    return ToolchainComponent(
        name="EPIC",
        source_dir=base_dir / CFG.toolchain.epic_dir,
        marker=CFG.toolchain.epic_marker,
        repository=CFG.toolchain.epic_repository,
        use_ccache=True,
    )


def eicrecon_component(base_dir: Path, epic: ToolchainComponent) -> ToolchainComponent:
    """Get the EICrecon reconstruction component built against `epic`."""
    return ToolchainComponent(
        name="EICrecon",
        source_dir=base_dir / CFG.toolchain.eicrecon_dir,
        marker=CFG.toolchain.eicrecon_marker,
        repository=CFG.toolchain.eicrecon_repository,
        requires=epic,
    )
