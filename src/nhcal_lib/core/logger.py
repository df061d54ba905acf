# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .config import CFG


def debug_enabled() -> bool:
    """Check whether nhcal runs in debug mode."""
    return os.environ.get(CFG.env_vars.debug_mode) is not None


def get_logger(name: str, show_time: bool = False) -> logging.Logger:
    """
    Return a logger writing colored records to stderr.

    In debug mode, debug records and timestamps are shown as well.
    Requesting the same logger repeatedly does not duplicate its handler.
    """
    logger = logging.getLogger(name)
    level = logging.DEBUG if debug_enabled() else logging.INFO
    logger.setLevel(level)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(_make_handler(show_time or level == logging.DEBUG, level))
    logger.propagate = False

    return logger


def _make_handler(show_time: bool, level: int) -> RichHandler:
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        show_level=True,
        show_time=show_time,
        log_time_format=CFG.date_formats.standard,
        tracebacks_width=None,
        tracebacks_code_width=None,
    )
    handler.setLevel(level)
    return handler
