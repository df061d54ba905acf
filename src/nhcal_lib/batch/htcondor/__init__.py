# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
HTCondor backend for nhcal: batch submission, job summaries, and job removal
using condor_submit, condor_q, and condor_rm.
"""

from .htcondor import HTCondor

__all__ = ["HTCondor"]
