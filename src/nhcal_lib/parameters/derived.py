# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Self

from .parameters import Parameters


@dataclass(frozen=True)
class DerivedConfig:
    """
    Values computed from a `Parameters` record.

    Identical parameters always produce identical identifiers
    and thus the same output directory.
    """

    # Total length of the calorimeter in cm.
    total_length: Decimal

    # Identifier of the detector geometry.
    detector_config_id: str

    # Identifier of the simulated sample.
    simulation_config_id: str

    # Directory collecting the outputs of all jobs of the batch.
    output_dir: Path

    @classmethod
    def fromParameters(
        cls, params: Parameters, base_dir: Path, output_subdir: str = "output"
    ) -> Self:
        """
        Compute the derived configuration.

        Args:
            params (Parameters): The resolved parameters.
            base_dir (Path): Base directory for installations and outputs.
            output_subdir (str): Name of the output directory inside `base_dir`.

        Returns:
            DerivedConfig: The derived configuration. No validation is performed.
        """
        detector_id = params.detectorConfigId()
        simulation_id = params.simulationConfigId()
        return cls(
            total_length=params.totalLength(),
            detector_config_id=detector_id,
            simulation_config_id=simulation_id,
            output_dir=base_dir / output_subdir / detector_id / simulation_id,
        )

    @property
    def detector_dir(self) -> Path:
        """Directory shared by all samples simulated with this geometry."""
        return self.output_dir.parent

    @property
    def log_dir(self) -> Path:
        """Directory for per-job scheduler logs."""
        return self.output_dir / "log"
