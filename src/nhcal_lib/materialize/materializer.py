# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import shutil
from pathlib import Path

import yaml

from nhcal_lib.core.common import format_number, load_yaml_dumper, load_yaml_loader
from nhcal_lib.core.error import PatchApplicationError, ToolchainMissingError
from nhcal_lib.core.logger import get_logger
from nhcal_lib.parameters import DerivedConfig, Parameters
from nhcal_lib.toolchain import ToolchainComponent, ToolchainInstaller

from .patch import BACKWARD_HCAL_FILE, DEFINITIONS_FILE, PatchEdit

logger = get_logger(__name__, show_time=True)

# Record of the edits applied to a working copy, relative to its source directory.
APPLIED_PATCHES_FILE = "nhcal_patches.yaml"


class ConfigMaterializer:
    """
    Prepares the detector geometry requested by a set of parameters.

    For the default geometry, the base EPIC installation is used as is.
    For a custom geometry, a working copy of the EPIC sources is created
    next to the output directory (i.e. shared by all samples with the same
    detector configuration identifier), patched, and built.
    """

    def __init__(
        self,
        installer: ToolchainInstaller,
        base_epic: ToolchainComponent,
        defaults: Parameters,
        copy_excludes: list[str] | None = None,
    ):
        """
        Initialize the materializer.

        Args:
            installer (ToolchainInstaller): Installer used to build the working copy.
            base_epic (ToolchainComponent): The base EPIC installation.
            defaults (Parameters): The default parameters describing the base geometry.
            copy_excludes (list[str] | None): Names of files and directories
                not copied into the working copy.
        """
        self._installer = installer
        self._base_epic = base_epic
        self._defaults = defaults
        self._copy_excludes = copy_excludes or []

    def requiresCustomBuild(self, params: Parameters) -> bool:
        """
        Check whether the parameters describe a non-default geometry.

        Only tile size, absorber thickness, scintillator thickness
        and number of layers affect the geometry.
        """
        return bool(params.changedGeometry(self._defaults))

    def workingCopy(self, derived: DerivedConfig) -> ToolchainComponent:
        """Get the EPIC working copy associated with the detector configuration."""
        return self._base_epic.relocated(derived.detector_dir / self._base_epic.source_dir.name)

    def patchPlan(self, params: Parameters, derived: DerivedConfig) -> list[PatchEdit]:
        """
        Construct the edits turning the default geometry into the requested one.

        Only the parameters differing from the defaults are edited.

        Args:
            params (Parameters): The requested parameters.
            derived (DerivedConfig): The derived configuration of `params`.

        Returns:
            list[PatchEdit]: The ordered edits.
        """
        changed = params.changedGeometry(self._defaults)
        plan = []

        if "tile_size" in changed:
            # grid sizes are expressed in mm
            size = f"{format_number(params.tile_size * 10)} * mm"
            plan.append(PatchEdit.attribute(BACKWARD_HCAL_FILE, "grid_size_x", size))
            plan.append(PatchEdit.attribute(BACKWARD_HCAL_FILE, "grid_size_y", size))

        if "absorber_thickness" in changed:
            plan.append(
                PatchEdit.constant(
                    BACKWARD_HCAL_FILE,
                    "HcalEndcapNSteelThickness",
                    format_number(params.absorber_thickness),
                )
            )

        if "scintillator_thickness" in changed:
            plan.append(
                PatchEdit.constant(
                    BACKWARD_HCAL_FILE,
                    "HcalEndcapNPolystyreneThickness",
                    format_number(params.scintillator_thickness),
                )
            )

        # the number of layers is derived by EPIC from the total length
        # and the thickness of a single layer
        if derived.total_length != self._defaults.totalLength():
            plan.append(
                PatchEdit.constant(
                    DEFINITIONS_FILE,
                    "HcalEndcapN_length",
                    format_number(derived.total_length),
                )
            )

        return plan

    def materialize(
        self, params: Parameters, derived: DerivedConfig
    ) -> ToolchainComponent | None:
        """
        Make the requested geometry available.

        Args:
            params (Parameters): The requested parameters.
            derived (DerivedConfig): The derived configuration of `params`.

        Returns:
            ToolchainComponent | None: The built working copy for a custom geometry,
                None if the base installation should be used.

        Raises:
            ToolchainMissingError: If the base EPIC installation does not exist.
            PatchApplicationError: If an edit does not match the geometry sources.
            BuildError: If building the working copy fails.
        """
        if not self.requiresCustomBuild(params):
            logger.info("No custom EPIC compilation needed - using default parameters.")
            return None

        work = self.workingCopy(derived)
        plan = self.patchPlan(params, derived)
        if self._installer.isInstalled(work):
            if self._readAppliedPlan(work) == _describe_plan(plan):
                logger.info(f"Custom EPIC already compiled at '{work.source_dir}'.")
                return work

            # the working copy is shared by all layer gaps of one detector configuration
            logger.warning(
                f"Custom EPIC at '{work.source_dir}' was compiled with different "
                "geometry edits. Recompiling."
            )

        if not self._installer.isInstalled(self._base_epic):
            raise ToolchainMissingError(
                f"EPIC installation not found at '{self._base_epic.marker_path}'."
            )

        logger.info(
            f"Compiling EPIC with custom specifications: tile size {format_number(params.tile_size)} cm, "
            f"absorber thickness {format_number(params.absorber_thickness)} cm, "
            f"scintillator thickness {format_number(params.scintillator_thickness)} cm, "
            f"number of layers {params.n_layers}."
        )

        # all edits are resolved before anything is copied or written
        patched = self._patchSources(plan)

        self._copySources(work.source_dir)
        for file, content in patched.items():
            target = work.source_dir / file
            shutil.copy2(target, target.with_name(target.name + ".backup"))
            target.write_text(content)
            logger.debug(f"Patched '{target}'.")

        logger.info("Compiling custom EPIC...")
        self._installer.build(work)
        self._writeAppliedPlan(work, plan)
        return work

    @staticmethod
    def _readAppliedPlan(work: ToolchainComponent) -> list[dict[str, str]] | None:
        """
        Load the edits recorded in a working copy.

        Returns:
            list[dict[str, str]] | None: The recorded edits or None if the record
                is missing or cannot be parsed.
        """
        file = work.source_dir / APPLIED_PATCHES_FILE
        try:
            with file.open() as input:
                return yaml.load(input, Loader=load_yaml_loader())
        except FileNotFoundError:
            logger.debug(f"No record of applied edits found at '{file}'.")
        except yaml.YAMLError as e:
            logger.warning(f"Could not parse record of applied edits '{file}': {e}.")
        return None

    @staticmethod
    def _writeAppliedPlan(work: ToolchainComponent, plan: list[PatchEdit]) -> None:
        """Store the applied edits in the working copy."""
        with (work.source_dir / APPLIED_PATCHES_FILE).open("w") as output:
            yaml.dump(
                _describe_plan(plan),
                output,
                Dumper=load_yaml_dumper(),
                default_flow_style=False,
                sort_keys=False,
            )

    def _patchSources(self, plan: list[PatchEdit]) -> dict[str, str]:
        """
        Apply the edits to the base geometry sources in memory.

        Returns:
            dict[str, str]: New content of each edited file, keyed by its relative path.
        """
        contents: dict[str, str] = {}
        for edit in plan:
            if edit.file not in contents:
                source = self._base_epic.source_dir / edit.file
                if not source.is_file():
                    raise PatchApplicationError(
                        f"Geometry source '{source}' does not exist."
                    )
                contents[edit.file] = source.read_text()
            contents[edit.file] = edit.apply(contents[edit.file])
            logger.info(f"'{edit.parameter}' updated to '{edit.value}'.")

        return contents

    def _copySources(self, target: Path) -> None:
        """Copy the base EPIC sources into the working copy directory."""
        if target.exists():
            logger.info(f"Removing previous working copy '{target}'.")
            shutil.rmtree(target)

        logger.info(f"Copying EPIC to '{target}'...")
        shutil.copytree(
            self._base_epic.source_dir,
            target,
            symlinks=True,
            ignore=shutil.ignore_patterns(*self._copy_excludes),
        )


def _describe_plan(plan: list[PatchEdit]) -> list[dict[str, str]]:
    return [
        {"file": edit.file, "parameter": edit.parameter, "value": edit.value}
        for edit in plan
    ]
