# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Mapping
from dataclasses import fields
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Self

from nhcal_lib.core.common import format_number
from nhcal_lib.core.config import (
    CFG,
    DefaultParameters,
    EnvironmentVariables,
    LimitSettings,
)
from nhcal_lib.core.error import ConfigurationError
from nhcal_lib.core.logger import get_logger

from .derived import DerivedConfig
from .parameters import Parameters

logger = get_logger(__name__)

# Fields holding integral counts. All the other numeric fields are Decimals.
_COUNT_FIELDS = {"n_layers", "events_per_job", "job_count"}

# Fields that must be strictly positive.
_POSITIVE_FIELDS = {
    "tile_size",
    "absorber_thickness",
    "scintillator_thickness",
    "n_layers",
    "momentum",
    "events_per_job",
    "job_count",
}


class ParameterResolver:
    """
    Turns defaults and overrides into a validated `Parameters` record.

    Resolution rule for every parameter: an explicit override (e.g. a command-line
    option) if set and non-empty, else the environment variable if set and non-empty,
    else the default. The resolver never touches the filesystem, so a doomed
    configuration is rejected before anything is installed or built.
    """

    def __init__(
        self,
        defaults: DefaultParameters,
        limits: LimitSettings,
        env_vars: EnvironmentVariables,
    ):
        self._defaults = defaults
        self._limits = limits
        self._env_vars = env_vars
        self._maximum_length = self._parseDecimal(
            "maximum_length", str(limits.maximum_length)
        )

    @classmethod
    def fromConfig(cls) -> Self:
        """Create a resolver using the global nhcal configuration."""
        return cls(CFG.defaults, CFG.limits, CFG.env_vars)

    def resolve(
        self,
        env: Mapping[str, str],
        overrides: Mapping[str, str | None] | None = None,
    ) -> Parameters:
        """
        Resolve, parse, and check the values of all parameters.

        Args:
            env (Mapping[str, str]): Environment-style overrides keyed by
                the environment variable names (e.g. 'TILE_SIZE').
            overrides (Mapping[str, str | None] | None): Explicit overrides keyed
                by the parameter names (e.g. 'tile_size'). Take precedence over `env`.

        Returns:
            Parameters: The resolved parameters.

        Raises:
            ConfigurationError: If a value cannot be parsed or is out of range.
        """
        overrides = overrides or {}
        values = {}
        for f in fields(Parameters):
            raw, source = self._pick(f.name, env, overrides)
            logger.debug(f"Parameter '{f.name}' = '{raw}' (from {source}).")
            values[f.name] = self._parse(f.name, raw, source)

        params = Parameters(**values)
        self._check(params)
        return params

    def defaults(self) -> Parameters:
        """
        Get the parsed default parameters.

        Raises:
            ConfigurationError: If the configured defaults are invalid.
        """
        return self.resolve({}, {})

    def derive(self, params: Parameters, base_dir: Path) -> DerivedConfig:
        """
        Compute and validate the derived configuration.

        Args:
            params (Parameters): The resolved parameters.
            base_dir (Path): Base directory for installations and outputs.

        Returns:
            DerivedConfig: The derived configuration.

        Raises:
            ConfigurationError: If the total length exceeds the maximal length.
        """
        derived = DerivedConfig.fromParameters(params, base_dir, CFG.paths.output_subdir)
        if derived.total_length > self._maximum_length:
            raise ConfigurationError(
                f"New length {format_number(derived.total_length)} cm exceeds maximum length "
                f"of {format_number(self._maximum_length)} cm."
            )

        return derived

    def _pick(
        self, name: str, env: Mapping[str, str], overrides: Mapping[str, str | None]
    ) -> tuple[str, str]:
        """Select the raw value of a parameter and describe where it came from."""
        if (value := overrides.get(name)) is not None and str(value).strip():
            return str(value).strip(), "command line"

        env_name = getattr(self._env_vars, name)
        if (value := env.get(env_name)) is not None and value.strip():
            return value.strip(), f"environment variable '{env_name}'"

        return str(getattr(self._defaults, name)).strip(), "defaults"

    def _parse(self, name: str, raw: str, source: str) -> Decimal | int | str:
        if name == "particle":
            return raw

        value = self._parseDecimal(name, raw, source)
        if name in _COUNT_FIELDS:
            if value != value.to_integral_value():
                raise ConfigurationError(
                    f"Invalid value '{raw}' of '{name}' ({source}): expected an integer."
                )
            return int(value)

        return value

    @staticmethod
    def _parseDecimal(name: str, raw: str, source: str = "configuration") -> Decimal:
        try:
            value = Decimal(raw)
        except InvalidOperation as e:
            raise ConfigurationError(
                f"Invalid value '{raw}' of '{name}' ({source}): expected a number."
            ) from e

        if not value.is_finite():
            raise ConfigurationError(
                f"Invalid value '{raw}' of '{name}' ({source}): expected a finite number."
            )

        return value

    def _check(self, params: Parameters) -> None:
        """Check the ranges of the individual parameters."""
        for name in _POSITIVE_FIELDS:
            if getattr(params, name) <= 0:
                raise ConfigurationError(
                    f"Parameter '{name}' must be positive, got '{getattr(params, name)}'."
                )

        if params.layer_gap < 0:
            raise ConfigurationError(
                f"Parameter 'layer_gap' must not be negative, got '{params.layer_gap}'."
            )

        if params.particle not in self._limits.allowed_particles:
            raise ConfigurationError(
                f"Unknown particle '{params.particle}'. "
                f"Supported particles: {', '.join(self._limits.allowed_particles)}."
            )
