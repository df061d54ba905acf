# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import stat
from pathlib import Path

from nhcal_lib.core.logger import get_logger
from nhcal_lib.parameters import DerivedConfig
from nhcal_lib.toolchain import ToolchainComponent

from .naming import JobOutputFiles, shell_file_stem
from .template import Template

logger = get_logger(__name__)

# Collections written by the reconstruction.
RECONSTRUCTION_COLLECTIONS = [
    "MCParticles",
    "HcalEndcapNClusters",
    "HcalEndcapNTruthClusters",
    "EcalEndcapNClusters",
    "EcalEndcapNTruthClusters",
    "HcalBarrelClusters",
    "HcalBarrelTruthClusters",
]

JOB_SCRIPT = Template(
    "job script",
    r"""#!/bin/bash
# Generated by nhcal. Runs simulation, reconstruction, and analysis of one job.
cd "@OUTPUT_DIR@" || exit 1

if [[ $# -ne 7 ]]; then
    echo "Usage: $0 <Cluster> <Process> <Momentum> <Phi> <Theta> <Particle> <NumberOfEvents>" >&2
    exit 1
fi
export CLUSTER="$1"
export PROCESS="$2"
export GUN_MOMENTUM="$3"
export GUN_PHI="$4"
export GUN_THETA="$5"
export PARTICLE="$6"
export NUMBER_OF_EVENTS="$7"

export FILENAME="@FILE_STEM@"
export DDSIM_FILE="@SIMULATION_FILE@"
export EICRECON_FILE="@RECONSTRUCTION_FILE@"
export ANALYSIS_FILE="@ANALYSIS_FILE@"

# narrow ranges around the requested values (single-angle, single-momentum gun)
export GUN_THETA_MIN=$(echo "$GUN_THETA - 0.0001" | bc -l)
export GUN_THETA_MAX=$(echo "$GUN_THETA + 0.0001" | bc -l)
export GUN_PHI_MIN=$(echo "$GUN_PHI - 0.0001" | bc -l)
export GUN_PHI_MAX=$(echo "$GUN_PHI + 0.0001" | bc -l)
export GUN_MOMENTUM_MIN=$(echo "$GUN_MOMENTUM - 0.00001" | bc -l)
export GUN_MOMENTUM_MAX=$(echo "$GUN_MOMENTUM + 0.00001" | bc -l)

cat << 'NHCAL_JOB_EOF' | "@EIC_SHELL@"
    if [[ -f "@CUSTOM_EPIC_SETUP@" ]]; then
        source "@CUSTOM_EPIC_SETUP@" epic
    elif [[ -f "@BASE_EPIC_SETUP@" ]]; then
        source "@BASE_EPIC_SETUP@" epic
    else
        echo "EPIC installation not found" >&2
        exit 1
    fi

    echo "Running simulation..."
    if ! ddsim \
            --compactFile "$DETECTOR_PATH/@DETECTOR_CONFIG@" \
            --numberOfEvents "$NUMBER_OF_EVENTS" \
            --random.seed "$(date +%N)" \
            --enableGun \
            --gun.particle "$PARTICLE" \
            --gun.thetaMin "${GUN_THETA_MIN}*degree" \
            --gun.thetaMax "${GUN_THETA_MAX}*degree" \
            --gun.phiMin "${GUN_PHI_MIN}*degree" \
            --gun.phiMax "${GUN_PHI_MAX}*degree" \
            --gun.distribution uniform \
            --gun.momentumMin "${GUN_MOMENTUM_MIN}*GeV" \
            --gun.momentumMax "${GUN_MOMENTUM_MAX}*GeV" \
            --outputFile "$DDSIM_FILE"; then
        echo "Simulation failed" >&2
        exit 1
    fi

    if [[ -f "@EICRECON_SETUP@" ]]; then
        source "@EICRECON_SETUP@" epic
    else
        echo "EICrecon installation not found" >&2
        exit 1
    fi

    echo "Running reconstruction..."
    if ! eicrecon "$DDSIM_FILE" \
            -Ppodio:output_file="$EICRECON_FILE" \
            -Ppodio:output_collections="@COLLECTIONS@"; then
        echo "Reconstruction failed" >&2
        exit 1
    fi

    echo "Running analysis..."
    analysis_script="@ANALYSIS_MACRO@"
    if [[ ! -f "$analysis_script" ]]; then
        echo "Analysis script not found: $analysis_script" >&2
        exit 1
    fi
    if ! root -l -b -q "${analysis_script}(\"${EICRECON_FILE}\", \"${ANALYSIS_FILE}\")"; then
        echo "Analysis failed" >&2
        exit 1
    fi
    echo "Job completed successfully"
NHCAL_JOB_EOF
""",
)


class ScriptGenerator:
    """
    Generates the executable script run by every job of the batch.

    The script takes seven positional arguments supplied at dispatch time:
    batch id, instance id, momentum, phi, theta, particle, and number of events.
    """

    def __init__(
        self,
        eic_shell: Path,
        base_epic: ToolchainComponent,
        eicrecon: ToolchainComponent,
        detector_config: str,
        analysis_macro: Path,
    ):
        self._eic_shell = eic_shell
        self._base_epic = base_epic
        self._eicrecon = eicrecon
        self._detector_config = detector_config
        self._analysis_macro = analysis_macro

    def render(self, derived: DerivedConfig, custom_epic: ToolchainComponent | None) -> str:
        """
        Render the job script.

        Args:
            derived (DerivedConfig): The derived configuration of the batch.
            custom_epic (ToolchainComponent | None): Working copy of EPIC with
                the custom geometry, or None for the default geometry.

        Returns:
            str: Content of the job script.

        Raises:
            TemplateError: If the script cannot be fully rendered.
        """
        # the base installation doubles as the fallback for a custom geometry
        custom_setup = (custom_epic or self._base_epic).marker_path
        files = JobOutputFiles.fromStem("${FILENAME}")

        return JOB_SCRIPT.render(
            {
                "OUTPUT_DIR": derived.output_dir,
                "FILE_STEM": shell_file_stem(),
                "SIMULATION_FILE": files.simulation,
                "RECONSTRUCTION_FILE": files.reconstruction,
                "ANALYSIS_FILE": files.analysis,
                "EIC_SHELL": self._eic_shell,
                "CUSTOM_EPIC_SETUP": custom_setup,
                "BASE_EPIC_SETUP": self._base_epic.marker_path,
                "EICRECON_SETUP": self._eicrecon.marker_path,
                "DETECTOR_CONFIG": self._detector_config,
                "COLLECTIONS": ",".join(RECONSTRUCTION_COLLECTIONS),
                "ANALYSIS_MACRO": self._analysis_macro,
            }
        )

    def generate(
        self,
        derived: DerivedConfig,
        custom_epic: ToolchainComponent | None,
        target: Path,
    ) -> Path:
        """
        Render the job script, write it, and make it executable.

        The script is written only if it renders without errors.

        Args:
            derived (DerivedConfig): The derived configuration of the batch.
            custom_epic (ToolchainComponent | None): Working copy of EPIC with
                the custom geometry, or None for the default geometry.
            target (Path): Path of the script to create.

        Returns:
            Path: Path to the written script.

        Raises:
            TemplateError: If the script cannot be fully rendered.
        """
        content = self.render(derived, custom_epic)
        target.write_text(content)
        target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        logger.info(f"Job script generated: '{target}'.")
        return target
