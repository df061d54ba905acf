# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Detector and beam parameters of a simulation campaign.

`Parameters` is the immutable record of all user-tunable values,
`DerivedConfig` holds the values computed from it (total detector length,
configuration identifiers, output directory), and `ParameterResolver`
merges defaults with environment and command-line overrides, parses them,
and validates the result before any side effect takes place.
"""

from .derived import DerivedConfig
from .parameters import GEOMETRY_FIELDS, Parameters
from .resolver import ParameterResolver

__all__ = ["DerivedConfig", "GEOMETRY_FIELDS", "Parameters", "ParameterResolver"]
