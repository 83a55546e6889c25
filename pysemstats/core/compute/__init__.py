"""Compute utilities shared by the conditional, ram and fit modules."""

from pysemstats.core.compute.timing import Timer
from pysemstats.core.compute.linalg import guarded_inverse, cov2cor

__all__ = ["Timer", "guarded_inverse", "cov2cor"]
