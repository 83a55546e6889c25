"""
Descriptive statistics for reporting.

Public API:
    descriptives(data, measurevar, groupvars)  - N, mean, sd, se, ci per group
"""

from pysemstats.descriptive.solvers import descriptives

__all__ = [
    "descriptives",
]
