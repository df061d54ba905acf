# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
General utility functions for the nhcal library.

This module provides helpers for number and duration formatting, YAML I/O,
running shell commands, and resolving user-specific paths.
"""

import getpass
import subprocess
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

import yaml
from rich.console import Console

from .logger import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def load_yaml_dumper() -> type[yaml.Dumper]:
    """Return the fastest available YAML dumper (CDumper if possible)."""
    try:
        from yaml import CDumper as Dumper  # type: ignore[attr-defined]

        logger.debug("Loaded YAML CDumper.")
    except ImportError:
        from yaml import Dumper

        logger.debug("Loaded default YAML dumper.")
    return Dumper


@lru_cache(maxsize=1)
def load_yaml_loader() -> type[yaml.SafeLoader]:
    """Return the fastest available safe YAML loader (CSafeLoader if possible)."""
    try:
        from yaml import CSafeLoader as SafeLoader  # type: ignore[attr-defined]

        logger.debug("Loaded YAML CLoader.")
    except ImportError:
        from yaml import SafeLoader

        logger.debug("Loaded default YAML loader.")

    return SafeLoader


def format_number(value: Decimal | int) -> str:
    """
    Format a number in its shortest plain decimal form.

    Trailing zeros are dropped and scientific notation is never used.

    Examples:
        Decimal("2.40") -> "2.4"
        Decimal("10.0") -> "10"
        Decimal("1E+2") -> "100"
        7               -> "7"

    Args:
        value (Decimal | int): The number to format.

    Returns:
        str: The formatted number.
    """
    if isinstance(value, int):
        return str(value)

    normalized = value.normalize()
    # normalize turns integral values into exponent form (e.g. 1E+1)
    if normalized == normalized.to_integral_value():
        normalized = normalized.quantize(Decimal(1))
    return format(normalized, "f")


def format_duration_hms(seconds: int) -> str:
    """
    Format a number of seconds as 'Xh Ym Zs'.

    Hours are not folded into days; all three units are always shown.

    Args:
        seconds (int): The duration in seconds.

    Returns:
        str: The formatted duration, e.g. '1h 2m 3s'.
    """
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}h {minutes}m {secs}s"


def current_user() -> str:
    """Return the name of the current user."""
    return getpass.getuser()


def user_path(template: str, user: str | None = None) -> Path:
    """
    Build a path from a template containing an optional `{user}` field.

    Args:
        template (str): Path template, e.g. '/gpfs02/eic/{user}'.
        user (str | None): Name of the user. Defaults to the current user.

    Returns:
        Path: The resolved path with `~` expanded.
    """
    return Path(template.format(user=user or current_user())).expanduser()


def run_bash(command: str) -> subprocess.CompletedProcess[str]:
    """
    Execute a command in bash and capture its output.

    The command is passed to bash through standard input so that
    multi-line scripts and here-documents work unchanged.

    Args:
        command (str): The command to execute.

    Returns:
        subprocess.CompletedProcess[str]: The finished process. The caller
            is responsible for checking the return code.
    """
    logger.debug(command)
    return subprocess.run(
        ["bash"],
        input=command,
        text=True,
        check=False,
        capture_output=True,
        errors="replace",
    )


def get_panel_width(
    console: Console, factor: int, min_width: int | None, max_width: int | None
) -> int:
    """
    Calculate the width of a panel relative to the console width, constrained by
    optional minimum and maximum width values.

    Args:
        console (Console): A rich Console providing the terminal size.
        factor (int): A divisor used to scale down the terminal width.
        min_width (int | None): The minimum panel width. If None, no lower bound is applied.
        max_width (int | None): The maximum panel width. If None, no upper bound is applied.

    Returns:
        int: The computed panel width.
    """
    panel_width = console.size.width // factor
    if min_width is not None:
        panel_width = max(panel_width, min_width)
    if max_width is not None:
        panel_width = min(panel_width, max_width)

    return panel_width
