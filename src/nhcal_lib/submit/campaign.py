# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from datetime import datetime
from pathlib import Path
from typing import Self

from nhcal_lib.batch import BatchHandle, BatchInterface
from nhcal_lib.core.common import current_user, format_number, user_path
from nhcal_lib.core.config import CFG
from nhcal_lib.core.error import SubmissionError
from nhcal_lib.core.logger import get_logger
from nhcal_lib.generate import JobDescriptor, ScriptGenerator
from nhcal_lib.materialize import ConfigMaterializer
from nhcal_lib.parameters import DerivedConfig, Parameters
from nhcal_lib.toolchain import (
    EicShellInstaller,
    ToolchainComponent,
    eicrecon_component,
    epic_component,
)

from .record import CampaignRecord

logger = get_logger(__name__, show_time=True)


class Campaign:
    """
    Runs the submission pipeline of one batch.

    The parameters must already be resolved and validated: the campaign
    installs the toolchain, prepares the output directory, materializes the
    detector geometry, generates the job script and the submission descriptor,
    and submits the batch.
    """

    def __init__(
        self,
        params: Parameters,
        derived: DerivedConfig,
        defaults: Parameters,
        base_dir: Path,
        submit_dir: Path,
        installer: EicShellInstaller,
        batch_system: type[BatchInterface] | None,
    ):
        """
        Initialize the campaign.

        Args:
            params (Parameters): The resolved parameters.
            derived (DerivedConfig): The validated derived configuration.
            defaults (Parameters): The default parameters describing the base geometry.
            base_dir (Path): Base directory for installations and outputs.
            submit_dir (Path): Directory where the job script and descriptor are written.
            installer (EicShellInstaller): Installer of the toolchain components.
            batch_system (type[BatchInterface] | None): The batch system to submit to.
                None if the batch is only prepared.
        """
        self._params = params
        self._derived = derived
        self._base_dir = base_dir
        self._submit_dir = submit_dir
        self._installer = installer
        self._batch_system = batch_system

        self._epic = epic_component(base_dir)
        self._eicrecon = eicrecon_component(base_dir, self._epic)
        self._materializer = ConfigMaterializer(
            installer, self._epic, defaults, CFG.toolchain.copy_excludes
        )
        self._generator = ScriptGenerator(
            installer.eic_shell,
            self._epic,
            self._eicrecon,
            CFG.toolchain.detector_config,
            submit_dir / CFG.paths.analysis_macro,
        )

    @classmethod
    def fromConfig(
        cls,
        params: Parameters,
        derived: DerivedConfig,
        defaults: Parameters,
        base_dir: Path,
        batch_system: type[BatchInterface] | None,
        submit_dir: Path | None = None,
    ) -> Self:
        """Create a campaign using the toolchain settings of the global configuration."""
        installer = EicShellInstaller(
            user_path(CFG.paths.eic_shell),
            CFG.toolchain.eic_shell_installer,
            CFG.toolchain.build_threads,
        )
        return cls(
            params,
            derived,
            defaults,
            base_dir,
            submit_dir or Path.cwd(),
            installer,
            batch_system,
        )

    @property
    def script_path(self) -> Path:
        return (
            self._submit_dir
            / f"{CFG.paths.script_prefix}{self._derived.detector_config_id}.sh"
        )

    @property
    def descriptor_path(self) -> Path:
        return self._submit_dir / CFG.paths.descriptor_name

    def prepare(self) -> Path:
        """
        Perform all steps preceding the submission.

        Returns:
            Path: Path to the written submission descriptor.

        Raises:
            ToolchainMissingError: If a required installation is missing.
            BuildError: If installing or building a component fails.
            PatchApplicationError: If the geometry sources cannot be patched.
            TemplateError: If the job script or descriptor cannot be rendered.
        """
        self.prepareToolchain()
        self.prepareOutput()
        custom_epic = self._materializer.materialize(self._params, self._derived)
        return self.generate(custom_epic)

    def prepareToolchain(self) -> None:
        """Make sure that eic-shell, EPIC, and EICrecon are installed."""
        self._installer.ensureShell()
        self._installer.ensure(self._epic)
        self._installer.ensure(self._eicrecon)

    def prepareOutput(self) -> None:
        """Create the output and log directories and clear logs of previous runs."""
        self._derived.log_dir.mkdir(parents=True, exist_ok=True)

        for file in self._derived.log_dir.glob("*.*"):
            if file.is_file():
                file.unlink()

        logger.info(f"Output directory: '{self._derived.output_dir}'.")

    def generate(self, custom_epic: ToolchainComponent | None) -> Path:
        """
        Write the job script and the submission descriptor.

        Returns:
            Path: Path to the written submission descriptor.
        """
        script = self._generator.generate(self._derived, custom_epic, self.script_path)
        descriptor = JobDescriptor.fromParameters(
            self._params, self._derived, script, self._submit_dir
        )
        return descriptor.write(self.descriptor_path)

    def submit(self, descriptor: Path) -> BatchHandle:
        """
        Submit the batch and store the campaign record in the output directory.

        Raises:
            SubmissionError: If the batch system rejects the submission.
        """
        if self._batch_system is None:
            raise SubmissionError("No batch system to submit the jobs to.")

        handle = self._batch_system.submit(descriptor)
        logger.info(
            f"Submitted {handle.job_count} job(s) to cluster '{handle.batch_id}'."
        )

        record = CampaignRecord(
            username=current_user(),
            batch_system=str(self._batch_system),
            batch_id=handle.batch_id,
            job_count=handle.job_count,
            submission_time=datetime.now(),
            detector_config_id=self._derived.detector_config_id,
            simulation_config_id=self._derived.simulation_config_id,
            total_length=format_number(self._derived.total_length),
            output_dir=self._derived.output_dir,
            custom_geometry=self._materializer.requiresCustomBuild(self._params),
            parameters=self._params.toDict(),
        )
        record.toFile(self._derived.output_dir / CFG.paths.campaign_record)
        return handle

    def run(self, submit: bool = True) -> BatchHandle | None:
        """
        Run the whole pipeline.

        Args:
            submit (bool): Whether to submit the batch. If False, the pipeline
                stops after writing the job script and the descriptor.

        Returns:
            BatchHandle | None: Handle of the submitted batch or None if not submitted.
        """
        descriptor = self.prepare()
        if not submit:
            logger.info(
                f"Submission skipped. Submit the batch using '{descriptor}' when ready."
            )
            return None

        return self.submit(descriptor)
