# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Self

import yaml

from nhcal_lib.core.common import load_yaml_dumper, load_yaml_loader
from nhcal_lib.core.config import CFG
from nhcal_lib.core.error import NhcalError
from nhcal_lib.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class CampaignRecord:
    """
    Record of a submitted batch stored in its output directory.
    """

    # Name of the user who submitted the batch.
    username: str

    # Name of the batch system used.
    batch_system: str

    # Identifier of the submitted batch.
    batch_id: str

    # Number of submitted jobs.
    job_count: int

    # Submission timestamp.
    submission_time: datetime

    # Identifier of the detector geometry.
    detector_config_id: str

    # Identifier of the simulated sample.
    simulation_config_id: str

    # Total length of the calorimeter in cm.
    total_length: str

    # Directory collecting the outputs of the batch.
    output_dir: Path

    # Whether a custom geometry build is used.
    custom_geometry: bool = False

    # Resolved parameters of the batch.
    parameters: dict[str, str | int] = field(default_factory=dict)

    @classmethod
    def fromFile(cls, file: Path) -> Self:
        """
        Load a campaign record from a YAML file.

        Raises:
            NhcalError: If the file does not exist or cannot be parsed.
        """
        try:
            with file.open() as input:
                data: dict[str, object] = yaml.load(input, Loader=load_yaml_loader())
        except FileNotFoundError as e:
            raise NhcalError(f"Campaign record '{file}' does not exist.") from e
        except yaml.YAMLError as e:
            raise NhcalError(f"Could not parse campaign record '{file}': {e}.") from e

        try:
            data["submission_time"] = datetime.strptime(
                str(data["submission_time"]), CFG.date_formats.standard
            )
            data["output_dir"] = Path(str(data["output_dir"]))
            return cls(**data)
        except (KeyError, TypeError, ValueError) as e:
            raise NhcalError(f"Invalid campaign record '{file}': {e}.") from e

    def toFile(self, file: Path) -> None:
        """Export the record into a YAML file."""
        data = asdict(self)
        data["submission_time"] = self.submission_time.strftime(CFG.date_formats.standard)
        data["output_dir"] = str(self.output_dir)

        with file.open("w") as output:
            yaml.dump(
                data,
                output,
                Dumper=load_yaml_dumper(),
                default_flow_style=False,
                sort_keys=False,
            )
        logger.debug(f"Campaign record written to '{file}'.")
