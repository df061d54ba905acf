# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass, fields
from decimal import Decimal

from nhcal_lib.core.common import format_number

# Parameters that change the detector geometry and thus require a custom build.
GEOMETRY_FIELDS = (
    "tile_size",
    "absorber_thickness",
    "scintillator_thickness",
    "n_layers",
)


@dataclass(frozen=True)
class Parameters:
    """
    Immutable record of the detector and beam parameters of one campaign.

    Lengths, momentum and angles are stored as Decimals so that they are
    reproduced exactly (and deterministically) in identifiers and file names.
    """

    # Tile size in cm.
    tile_size: Decimal

    # Absorber (steel) thickness in cm.
    absorber_thickness: Decimal

    # Scintillator (polystyrene) thickness in cm.
    scintillator_thickness: Decimal

    # Gap between two layers in cm.
    layer_gap: Decimal

    # Number of layers.
    n_layers: int

    # Momentum of the shot particle in GeV.
    momentum: Decimal

    # Azimuthal angle of the shot particle in degrees.
    phi: Decimal

    # Polar angle of the shot particle in degrees.
    theta: Decimal

    # Name of the shot particle.
    particle: str

    # Number of events simulated by a single job.
    events_per_job: int

    # Number of jobs in the batch.
    job_count: int

    def totalLength(self) -> Decimal:
        """
        Total length of the calorimeter in cm.

        Returns:
            Decimal: n_layers x (absorber + scintillator + gap).
        """
        return self.n_layers * (
            self.absorber_thickness + self.scintillator_thickness + self.layer_gap
        )

    def detectorConfigId(self) -> str:
        """
        Identifier of the detector geometry.

        Encodes every parameter that changes the geometry.
        """
        return (
            f"nhcal_only_tile{format_number(self.tile_size)}cm"
            f"_absorber{format_number(self.absorber_thickness)}cm"
            f"_scintillator{format_number(self.scintillator_thickness)}cm"
            f"_{self.n_layers}layers"
        )

    def simulationConfigId(self) -> str:
        """
        Identifier of the simulated sample.

        Encodes the particle gun settings and the number of events per job.
        """
        return (
            f"{self.particle}_p{format_number(self.momentum)}gev"
            f"_phi{format_number(self.phi)}"
            f"_theta{format_number(self.theta)}"
            f"_{self.events_per_job}events"
        )

    def changedGeometry(self, defaults: "Parameters") -> list[str]:
        """
        Get the geometry parameters that differ from the defaults.

        Values are compared numerically, i.e. '4.0' equals '4'.

        Args:
            defaults (Parameters): The default parameters.

        Returns:
            list[str]: Names of the changed geometry parameters.
        """
        return [
            name
            for name in GEOMETRY_FIELDS
            if getattr(self, name) != getattr(defaults, name)
        ]

    def toDict(self) -> dict[str, str | int]:
        """Convert the parameters into a dictionary of printable values."""
        result: dict[str, str | int] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            result[f.name] = format_number(value) if isinstance(value, Decimal) else value
        return result
