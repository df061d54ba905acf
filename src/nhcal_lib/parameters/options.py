# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Command-line options shared by the nhcal commands accepting parameters.
"""

import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import click
from click_option_group import optgroup

from nhcal_lib.core.common import user_path
from nhcal_lib.core.config import CFG

from .derived import DerivedConfig
from .parameters import Parameters
from .resolver import ParameterResolver

# (option, parameter name, help)
_DETECTOR_OPTIONS = [
    ("--tile-size", "tile_size", "Tile size in cm."),
    ("--absorber-thickness", "absorber_thickness", "Absorber (steel) thickness in cm."),
    (
        "--scintillator-thickness",
        "scintillator_thickness",
        "Scintillator (polystyrene) thickness in cm.",
    ),
    ("--layer-gap", "layer_gap", "Gap between two layers in cm."),
    ("--n-layers", "n_layers", "Number of layers."),
]

_SIMULATION_OPTIONS = [
    ("--momentum", "momentum", "Momentum of the shot particle in GeV."),
    ("--phi", "phi", "Azimuthal angle of the shot particle in degrees."),
    ("--theta", "theta", "Polar angle of the shot particle in degrees."),
    ("--particle", "particle", "Particle shot by the particle gun."),
    ("--events", "events_per_job", "Number of events simulated by one job."),
    ("--jobs", "job_count", "Number of jobs in the batch."),
]

# Names of all parameters settable from the command line.
PARAMETER_NAMES = [name for _, name, _ in _DETECTOR_OPTIONS + _SIMULATION_OPTIONS]


def _add_group(func: Callable, title: str, options: list[tuple[str, str, str]]) -> Callable:
    for option, name, description in reversed(options):
        env_name = getattr(CFG.env_vars, name)
        default = getattr(CFG.defaults, name)
        func = optgroup.option(
            option,
            name,
            type=str,
            default=None,
            help=f"{description} Overrides '{env_name}'. Defaults to {default}.",
        )(func)
    return optgroup.group(f"{click.style(title, fg='yellow')}")(func)


def parameter_options(func: Callable) -> Callable:
    """Add the detector and particle gun options to a click command."""
    func = _add_group(func, "Particle gun", _SIMULATION_OPTIONS)
    return _add_group(func, "Detector geometry", _DETECTOR_OPTIONS)


def base_dir(env: Mapping[str, str] | None = None) -> Path:
    """Get the base directory for installations and outputs."""
    env = os.environ if env is None else env
    if value := env.get(CFG.env_vars.base_dir):
        return Path(value).expanduser()
    return user_path(CFG.paths.base_dir)


def resolve_parameters(
    options: Mapping[str, Any], env: Mapping[str, str] | None = None
) -> tuple[Parameters, DerivedConfig, Parameters, Path]:
    """
    Resolve and validate the parameters requested on the command line.

    Args:
        options (Mapping[str, Any]): Keyword arguments of the click command.
        env (Mapping[str, str] | None): Environment to read overrides from.
            Defaults to `os.environ`.

    Returns:
        tuple[Parameters, DerivedConfig, Parameters, Path]: The resolved parameters,
            their derived configuration, the default parameters, and the base directory.

    Raises:
        ConfigurationError: If the parameters are invalid.
    """
    env = os.environ if env is None else env
    resolver = ParameterResolver.fromConfig()

    params = resolver.resolve(env, {name: options.get(name) for name in PARAMETER_NAMES})
    root = base_dir(env)
    derived = resolver.derive(params, root)

    return params, derived, resolver.defaults(), root
