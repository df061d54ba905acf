# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass
from typing import Self

# Stem of all output files of one job instance.
# Shared by nhcal and the generated job script so that both agree on file names.
FILE_STEM_FORMAT = (
    "{particle}_{events}events_p{momentum}gev_phi{phi}_theta{theta}_job{batch}_{instance}"
)


@dataclass(frozen=True)
class JobOutputFiles:
    """Names of the output files of one job instance."""

    # Output of the simulation.
    simulation: str

    # Output of the reconstruction.
    reconstruction: str

    # Output of the analysis macro.
    analysis: str

    @classmethod
    def fromStem(cls, stem: str) -> Self:
        return cls(
            simulation=f"sim_{stem}.edm4hep.root",
            reconstruction=f"eicrecon_{stem}.edm4eic.root",
            analysis=f"ana_{stem}.root",
        )


def file_stem(
    particle: str,
    events: int | str,
    momentum: str,
    phi: str,
    theta: str,
    batch_id: str,
    instance_id: str,
) -> str:
    """Construct the stem of the output files of a job instance."""
    return FILE_STEM_FORMAT.format(
        particle=particle,
        events=events,
        momentum=momentum,
        phi=phi,
        theta=theta,
        batch=batch_id,
        instance=instance_id,
    )


def shell_file_stem() -> str:
    """Get the file stem as a shell expression using the job script's variables."""
    return file_stem(
        "${PARTICLE}",
        "${NUMBER_OF_EVENTS}",
        "${GUN_MOMENTUM}",
        "${GUN_PHI}",
        "${GUN_THETA}",
        "${CLUSTER}",
        "${PROCESS}",
    )
