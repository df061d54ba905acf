# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core infrastructure for nhcal.

This module collects the foundational helpers used across the nhcal codebase:
configuration, the error taxonomy, structured logging, and small utilities
for formatting and running shell commands.
"""
