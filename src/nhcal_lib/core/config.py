# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Configuration system for nhcal.

This module defines dataclasses representing all configurable aspects of nhcal,
including environment variable names, default detector and beam parameters,
validation limits, filesystem layout, toolchain locations, job monitor settings,
and exit codes.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self


@dataclass
class EnvironmentVariables:
    """Environment variable names used by nhcal."""

    # Enables nhcal debug mode.
    debug_mode: str = "NHCAL_DEBUG"
    # Name of the batch system used.
    batch_system: str = "NHCAL_BATCH_SYSTEM"
    # Overrides the base directory for installations and outputs.
    base_dir: str = "NHCAL_BASE_DIR"

    # Parameter overrides.
    tile_size: str = "TILE_SIZE"
    absorber_thickness: str = "ABSORBER_THICKNESS"
    scintillator_thickness: str = "SCINTILLATOR_THICKNESS"
    layer_gap: str = "LAYER_GAP"
    n_layers: str = "N_LAYERS"
    momentum: str = "MOMENTUM"
    phi: str = "PHI"
    theta: str = "THETA"
    particle: str = "PARTICLE"
    events_per_job: str = "NUMBER_OF_EVENTS"
    job_count: str = "JOBS"


@dataclass
class DefaultParameters:
    """Default values of the detector and beam parameters."""

    # Tile size in cm.
    tile_size: str = "10"
    # Absorber (steel) thickness in cm.
    absorber_thickness: str = "4"
    # Scintillator (polystyrene) thickness in cm.
    scintillator_thickness: str = "2.4"
    # Gap between layers in cm.
    layer_gap: str = "0.1"
    # Number of layers.
    n_layers: str = "10"
    # Particle momentum in GeV.
    momentum: str = "1"
    # Azimuthal angle in degrees.
    phi: str = "45"
    # Polar angle in degrees.
    theta: str = "170"
    # Particle shot by the particle gun.
    particle: str = "neutron"
    # Number of events simulated by one job.
    events_per_job: str = "10"
    # Number of jobs in the batch.
    job_count: str = "10"


@dataclass
class LimitSettings:
    """Validation limits for the detector parameters."""

    # Maximal total length of the nHCal in cm.
    maximum_length: str = "70"
    # Particles accepted by the particle gun.
    allowed_particles: list[str] = field(
        default_factory=lambda: [
            "neutron",
            "proton",
            "mu-",
            "mu+",
            "pi+",
            "pi-",
            "pi0",
            "e-",
            "e+",
            "gamma",
            "kaon0L",
        ]
    )


@dataclass
class PathSettings:
    """Filesystem layout used by nhcal."""

    # Base directory for installations and outputs. `{user}` is replaced by the current user.
    base_dir: str = "/gpfs02/eic/{user}"
    # Path to the eic-shell executable. `{user}` is replaced by the current user.
    eic_shell: str = "/eic/u/{user}/eic/eic-shell"
    # Name of the directory with simulation outputs inside the base directory.
    output_subdir: str = "output"
    # Name of the generated submission descriptor.
    descriptor_name: str = "generated.job"
    # Prefix of the generated job script.
    script_prefix: str = "generated_script_"
    # Name of the ROOT analysis macro (looked up in the submission directory).
    analysis_macro: str = "example_macro.C"
    # Name of the campaign record written into the output directory.
    campaign_record: str = "campaign.yaml"


@dataclass
class ToolchainSettings:
    """Settings for the simulation toolchain."""

    # URL of the eic-shell installer.
    eic_shell_installer: str = "https://github.com/eic/eic-shell/raw/main/install.sh"
    # Repository of the detector geometry.
    epic_repository: str = "https://github.com/eic/epic.git"
    # Repository of the reconstruction framework.
    eicrecon_repository: str = "https://github.com/eic/EICrecon.git"
    # Name of the EPIC directory inside the base directory.
    epic_dir: str = "epic"
    # Name of the EICrecon directory inside the base directory.
    eicrecon_dir: str = "EICrecon"
    # Marker file proving that EPIC is installed.
    epic_marker: str = "install/bin/thisepic.sh"
    # Marker file proving that EICrecon is installed.
    eicrecon_marker: str = "install/bin/eicrecon-this.sh"
    # Detector compact file used by the simulation.
    detector_config: str = "epic_backward_hcal_only.xml"
    # Number of threads used when compiling. Zero means all available.
    build_threads: int = 0
    # Directories not copied into a custom EPIC working copy.
    copy_excludes: list[str] = field(
        default_factory=lambda: ["build", "install", ".git"]
    )


@dataclass
class MonitorSettings:
    """Settings for the job monitor."""

    # Hard limit on the monitoring time in hours.
    running_time_limit_hours: float = 48
    # Interval (in seconds) between successive scheduler queries.
    poll_interval: int = 10
    # Number of consecutive failed queries after which monitoring is aborted.
    max_failed_polls: int = 30


@dataclass
class PresenterSettings:
    """Settings for the configuration panel."""

    # Minimal width of the configuration panel.
    min_width: int | None = 60
    # Maximal width of the configuration panel.
    max_width: int | None = None
    # Style of the border lines.
    border_style: str = "white"
    # Style of the title.
    title_style: str = "white bold"
    # Style used for the keys.
    key_style: str = "default bold"
    # Style used for the values.
    value_style: str = "white"
    # Style used for the section headers.
    section_style: str = "bright_blue bold"


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by nhcal.
    standard: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class ExitCodes:
    """Exit codes used for various errors."""

    # Returned for every failure of an nhcal command.
    default: int = 1
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 1


@dataclass
class Config:
    """Main configuration for nhcal."""

    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    defaults: DefaultParameters = field(default_factory=DefaultParameters)
    limits: LimitSettings = field(default_factory=LimitSettings)
    paths: PathSettings = field(default_factory=PathSettings)
    toolchain: ToolchainSettings = field(default_factory=ToolchainSettings)
    monitor: MonitorSettings = field(default_factory=MonitorSettings)
    presenter: PresenterSettings = field(default_factory=PresenterSettings)
    date_formats: DateFormats = field(default_factory=DateFormats)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)

    # Name of the nhcal binary.
    binary_name: str = "nhcal"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Load configuration from TOML file or use defaults.

        Args:
            config_path: Explicit path to config file. If None, searches standard locations.

        Returns:
            Config instance with loaded or default values.
        """
        if config_path is None:
            config_path = Config._get_config_path()

        try:
            if config_path and config_path.exists():
                with config_path.open("rb") as f:
                    config_data = tomllib.load(f)
                return _dict_to_dataclass(cls, config_data)
        except Exception as e:
            raise ValueError(f"Could not read nhcal config '{config_path}': {e}.")

        # no config found - use defaults
        return cls()

    @staticmethod
    def _get_config_path() -> Path | None:
        """
        Search for config file in standard locations (XDG compliant).
        Returns the first existing config file, or None.
        """
        config_locations: list[Path | None] = [
            Path(env_path) if (env_path := os.getenv("NHCAL_CONFIG")) else None,
            Path.cwd() / "nhcal_config.toml",
            Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
            / "nhcal"
            / "config.toml",
        ]

        for path in config_locations:
            if path and path.is_file():
                return path

        return None


def _dict_to_dataclass(cls, data: dict[str, Any]):
    """
    Recursively convert a dictionary to a dataclass instance.
    Handles nested dataclasses properly.
    """
    if not is_dataclass(cls):
        return data

    field_values = {}
    for field_info in fields(cls):
        field_name = field_info.name
        field_type = field_info.type

        if field_name in data:
            value = data[field_name]
            if is_dataclass(field_type) and isinstance(value, dict):
                field_values[field_name] = _dict_to_dataclass(field_type, value)
            else:
                field_values[field_name] = value

    return cls(**field_values)


# Global configuration for nhcal.
CFG = Config.load()
