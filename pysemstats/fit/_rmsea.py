"""
RMSEA confidence interval by inversion of the non-central chi-square.

The bounds are the non-centrality values lambda at which the observed
Chi sits at the requested quantiles:

    P(X <= Chi; df, lambda_lower) = ci_upper
    P(X <= Chi; df, lambda_upper) = ci_lower

and RMSEA_bound = sqrt(lambda / (N df)). The CDF decreases in lambda,
so each equation has at most one root.
"""

import numpy as np
from scipy import stats
from scipy.optimize import brentq

from pysemstats.core.config import RMSEASearch
from pysemstats.core.exceptions import CIUnavailableError


def _pchisq(x: float, df: float, ncp: float) -> float:
    """Chi-square CDF, central when ncp is 0."""
    if ncp == 0:
        return float(stats.chi2.cdf(x, df))
    return float(stats.ncx2.cdf(x, df, ncp))


def solve_ncp(
    chi: float,
    df: float,
    target: float,
    upper: float,
    bound: str,
    search: RMSEASearch,
) -> float:
    """
    Find lambda in [0, upper] with P(X <= chi; df, lambda) = target.

    Raises
    ------
    CIUnavailableError
        If the bracket shows no sign change or the root finder fails.
    """
    def f(lam):
        return _pchisq(chi, df, lam) - target

    f_low = f(0.0)
    f_high = f(upper)
    if not (np.isfinite(f_low) and np.isfinite(f_high)) or f_low * f_high > 0:
        raise CIUnavailableError(
            f"RMSEA {bound} bound: no sign change on lambda in [0, {upper:.4g}] "
            f"(f(0) = {f_low:.4g}, f({upper:.4g}) = {f_high:.4g})",
            bound=bound,
            bracket=(0.0, upper),
        )
    if f_low == 0:
        return 0.0
    try:
        return float(brentq(f, 0.0, upper, xtol=search.xtol, maxiter=search.maxiter))
    except (ValueError, RuntimeError) as e:
        raise CIUnavailableError(
            f"RMSEA {bound} bound: root finder failed: {e}",
            bound=bound,
            bracket=(0.0, upper),
        ) from e


def format_rmsea_text(
    rmsea: float,
    lower: float,
    upper: float,
    ci_upper: float,
) -> str:
    """One-line report, e.g. 'RMSEA = 0.051 CI95[0.032, 0.071]'."""
    def fmt(x):
        return 'NA' if np.isnan(x) else f"{round(x, 3):g}"

    level = f"{round(ci_upper * 100, 4):g}"
    return f"RMSEA = {fmt(rmsea)} CI{level}[{fmt(lower)}, {fmt(upper)}]"
