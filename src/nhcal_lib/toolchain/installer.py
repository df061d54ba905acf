# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
import shlex
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from nhcal_lib.core.common import run_bash
from nhcal_lib.core.error import BuildError, ToolchainMissingError
from nhcal_lib.core.logger import get_logger

from .component import ToolchainComponent

logger = get_logger(__name__, show_time=True)


class ToolchainInstaller(ABC):
    """
    Interface for installing and building toolchain components.

    All methods should raise an NhcalError subclass when encountering an error.
    """

    def isInstalled(self, component: ToolchainComponent) -> bool:
        """
        Check whether the component is installed.

        A component is installed if its marker file exists.
        """
        return component.marker_path.is_file()

    def ensure(self, component: ToolchainComponent) -> None:
        """
        Make sure that the component is installed, cloning and building it if needed.

        Raises:
            ToolchainMissingError: If a prerequisite component is not installed.
            BuildError: If cloning or building the component fails.
        """
        if self.isInstalled(component):
            logger.info(f"{component.name} already installed at '{component.source_dir}'.")
            return

        self._ensurePrerequisite(component)

        if component.source_dir.exists():
            logger.info(f"Removing incomplete {component.name} installation.")
            shutil.rmtree(component.source_dir)

        logger.info(f"Setting up {component.name} in '{component.source_dir}'.")
        self.fetch(component)
        self.build(component)
        logger.info(f"{component.name} setup completed successfully.")

    @abstractmethod
    def fetch(self, component: ToolchainComponent) -> None:
        """
        Obtain the source code of the component.

        Raises:
            BuildError: If the source code cannot be obtained.
        """

    @abstractmethod
    def build(self, component: ToolchainComponent) -> None:
        """
        Compile and install the component from its source directory.

        Raises:
            ToolchainMissingError: If a prerequisite component is not installed.
            BuildError: If the build fails or does not produce the marker file.
        """

    def _ensurePrerequisite(self, component: ToolchainComponent) -> None:
        if (required := component.requires) and not self.isInstalled(required):
            raise ToolchainMissingError(
                f"{required.name} installation not found at '{required.marker_path}'. "
                f"{required.name} must be installed before {component.name}."
            )


class EicShellInstaller(ToolchainInstaller):
    """
    Installs toolchain components using git and CMake inside eic-shell.
    """

    def __init__(self, eic_shell: Path, installer_url: str, threads: int = 0):
        """
        Initialize the installer.

        Args:
            eic_shell (Path): Path to the eic-shell executable.
            installer_url (str): URL of the eic-shell installation script.
            threads (int): Number of compilation threads. Zero means all available CPUs.
        """
        self._eic_shell = eic_shell
        self._installer_url = installer_url
        self._threads = threads or os.cpu_count() or 1

    @property
    def eic_shell(self) -> Path:
        return self._eic_shell

    def ensureShell(self) -> None:
        """
        Install eic-shell if it is not available.

        Raises:
            BuildError: If eic-shell cannot be installed.
        """
        if self._eic_shell.is_file():
            logger.debug(f"Using eic-shell at '{self._eic_shell}'.")
            return

        logger.info("Installing eic-shell...")
        self._eic_shell.parent.mkdir(parents=True, exist_ok=True)
        result = run_bash(
            f"cd {shlex.quote(str(self._eic_shell.parent))} && curl -L {shlex.quote(self._installer_url)} | bash"
        )
        if result.returncode != 0 or not self._eic_shell.is_file():
            raise BuildError(f"Failed to install eic-shell: {result.stderr.strip()}.")

    def fetch(self, component: ToolchainComponent) -> None:
        if not component.repository:
            raise BuildError(f"No repository to clone {component.name} from.")

        component.source_dir.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Cloning {component.name} repository...")
        result = run_bash(
            f"git clone {shlex.quote(component.repository)} {shlex.quote(str(component.source_dir))}"
        )
        if result.returncode != 0:
            raise BuildError(
                f"Failed to clone {component.name} repository: {result.stderr.strip()}."
            )

    def build(self, component: ToolchainComponent) -> None:
        self._ensurePrerequisite(component)

        logger.info(
            f"Building and installing {component.name} (this may take several minutes)..."
        )
        result = run_bash(self._translateBuild(component))
        if result.returncode != 0:
            raise BuildError(f"Failed to build {component.name}: {result.stderr.strip()}.")

        if not self.isInstalled(component):
            raise BuildError(
                f"{component.name} installation incomplete - missing '{component.marker_path}'."
            )

    def _translateBuild(self, component: ToolchainComponent) -> str:
        """Construct the command building the component inside eic-shell."""
        lines = [f"cd {shlex.quote(str(component.source_dir))} || exit 1"]

        if component.requires:
            lines.append(f"source {shlex.quote(str(component.requires.marker_path))}")

        configure = ["cmake -B build -S .", "-DCMAKE_INSTALL_PREFIX=install"]
        if component.use_ccache:
            lines.append('export CC="ccache gcc"')
            lines.append('export CXX="ccache g++"')
            configure += [
                "-DCMAKE_C_COMPILER_LAUNCHER=ccache",
                "-DCMAKE_CXX_COMPILER_LAUNCHER=ccache",
            ]

        lines.append(" ".join(configure) + " || exit 1")
        lines.append(f"cmake --build build -j{self._threads} -- install || exit 1")

        script = "\n".join(lines)
        return f"cat <<'NHCAL_EOF' | {shlex.quote(str(self._eic_shell))}\n{script}\nNHCAL_EOF\n"
