# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
from abc import ABCMeta

from nhcal_lib.core.config import CFG
from nhcal_lib.core.error import NhcalError
from nhcal_lib.core.logger import get_logger

from .interface import BatchInterface

logger = get_logger(__name__)


class BatchMeta(ABCMeta):
    """
    Metaclass for batch system classes.
    """

    # registry of supported batch systems
    _registry: dict[str, type[BatchInterface]] = {}

    def __str__(cls: type[BatchInterface]):
        """
        Get the string representation of the batch system class.
        """
        return cls.envName()

    @classmethod
    def register(mcs, batch_cls: type[BatchInterface]) -> None:
        """
        Register a batch system class in the metaclass registry.

        Args:
            batch_cls: Subclass of BatchInterface to register.
        """
        mcs._registry[batch_cls.envName()] = batch_cls

    @classmethod
    def fromStr(mcs, name: str) -> type[BatchInterface]:
        """
        Return the batch system class registered with the given name.

        Raises:
            NhcalError: If no class is registered for the given name.
        """
        try:
            return mcs._registry[name]
        except KeyError as e:
            raise NhcalError(f"No batch system registered as '{name}'.") from e

    @classmethod
    def guess(mcs) -> type[BatchInterface]:
        """
        Select the first registered batch system that reports itself as available.

        Raises:
            NhcalError: If no available batch system is found among the registered ones.
        """
        for BatchSystem in mcs._registry.values():
            if BatchSystem.isAvailable():
                logger.debug(f"Guessed batch system: {str(BatchSystem)}.")
                return BatchSystem

        raise NhcalError(
            "Could not guess a batch system. No registered batch system available."
        )

    @classmethod
    def obtain(mcs, name: str | None) -> type[BatchInterface]:
        """
        Obtain a batch system class by name, environment variable, or guessing.

        Args:
            name (str | None): Optional name of the batch system to obtain.
                If `None`, the environment variable is checked and,
                if it is not set either, the batch system is guessed.

        Returns:
            type[BatchInterface]: The selected batch system class.

        Raises:
            NhcalError: If the requested batch system is not registered
                or no batch system can be guessed.
        """
        if name:
            return mcs.fromStr(name)

        if name := os.environ.get(CFG.env_vars.batch_system):
            logger.debug(
                f"Using batch system name from an environment variable: {name}."
            )
            return mcs.fromStr(name)

        return mcs.guess()


def batch_system(cls: type[BatchInterface]) -> type[BatchInterface]:
    """Class decorator registering a batch system implementation."""
    BatchMeta.register(cls)
    return cls
