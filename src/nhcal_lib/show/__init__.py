# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Display of the resolved configuration of a batch.
"""

from .presenter import ConfigPresenter

__all__ = ["ConfigPresenter"]
