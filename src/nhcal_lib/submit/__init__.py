# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Submission of a simulation batch.

`Campaign` runs the submission pipeline for already resolved parameters:
toolchain installation, output directory preparation, geometry
materialization, job script and descriptor generation, and submission.
After a successful submission, a `CampaignRecord` is stored in the output
directory of the batch.
"""

from .campaign import Campaign
from .record import CampaignRecord

__all__ = ["Campaign", "CampaignRecord"]
