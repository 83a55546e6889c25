"""
Conditional moments of partially observed multivariate-normal rows.

Public API:
    condition(mean, cov, row)       - Condition one row
    conditionals(data, mean, cov)   - Condition every row of a dataset
"""

from pysemstats.conditional.solvers import condition, conditionals
from pysemstats.conditional.design import MomentDesign
from pysemstats.conditional.patterns import (
    MissingnessPattern,
    identify_missingness_patterns,
)
from pysemstats.conditional.solution import (
    ConditionalMoments,
    ConditionalParams,
    ConditionalSolution,
)

__all__ = [
    "condition",
    "conditionals",
    "MomentDesign",
    "MissingnessPattern",
    "identify_missingness_patterns",
    "ConditionalMoments",
    "ConditionalParams",
    "ConditionalSolution",
]
