"""
Fit statistics for structural equation models.

Public API:
    fit_indices(model, independence, ...)  - The standard fit-index table
    rmsea(chi, df, n_obs)                  - RMSEA with confidence interval
    loglik(summary)                        - Log-likelihood with AIC/BIC
    compare_models(base, comparison)       - Likelihood-ratio comparisons
    residual_correlations(obs, implied)    - Observed minus implied correlation
    saturated_models(data)                 - Closed-form reference models
"""

from pysemstats.fit.solvers import (
    fit_indices,
    rmsea,
    loglik,
    compare_models,
    residual_correlations,
    saturated_models,
)
from pysemstats.fit.design import ModelSummary, FitDesign
from pysemstats.fit._indices import INDEX_NAMES
from pysemstats.fit._saturated import SaturatedLikelihoods
from pysemstats.fit.solution import (
    format_pvalue,
    RMSEASolution,
    FitIndicesParams,
    FitIndicesSolution,
    LogLik,
    ComparisonRow,
    ComparisonSolution,
)

__all__ = [
    "fit_indices",
    "rmsea",
    "loglik",
    "compare_models",
    "residual_correlations",
    "saturated_models",
    "ModelSummary",
    "FitDesign",
    "INDEX_NAMES",
    "SaturatedLikelihoods",
    "format_pvalue",
    "RMSEASolution",
    "FitIndicesParams",
    "FitIndicesSolution",
    "LogLik",
    "ComparisonRow",
    "ComparisonSolution",
]
