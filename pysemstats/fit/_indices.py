"""
Closed-form SEM fit indices.

Notation: N sample size, k free parameters, p manifests,
q = p(p+1)/2 distinct moments, Chi/df for the fitted model and
Chi_i/df_i for the independence (baseline) model.

References:
    Bentler (1990) CFI; Tucker & Lewis (1973) TLI; Bollen (1989) IFI;
    Steiger & Lind (1980) RMSEA; Joreskog & Sorbom (1984) GFI/AGFI;
    Mulaik et al. (1989) PGFI; McDonald (1989) MFI; Browne & Cudeck
    (1989) ECVI.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pysemstats.core.compute.linalg import guarded_inverse
from pysemstats.core.config import Tolerances, DEFAULT_TOLERANCES
from pysemstats.core.exceptions import SingularCorrelationError
from pysemstats.fit.design import FitDesign


INDEX_NAMES = (
    'N', 'deviance', 'N.parms', 'Chi', 'df', 'p.Chi', 'Chi.df',
    'AICchi', 'AICdev',
    'BCCchi', 'BCCdev',
    'BICchi', 'BICdev',
    'CAICchi', 'CAICdev',
    'RMSEA', 'SRMR', 'RMR',
    'GFI', 'AGFI', 'PGFI',
    'NFI', 'RFI', 'IFI',
    'NNFI.TLI', 'CFI',
    'PRATIO', 'PNFI', 'PCFI', 'NCP',
    'ECVIchi', 'ECVIdev', 'MECVIchi', 'MECVIdev', 'MFI', 'GH',
)


def _div(num: float, den: float) -> float:
    """Division that yields NaN (not Inf or an exception) for a zero denominator."""
    if den == 0 or not np.isfinite(den):
        return float('nan')
    return float(num) / float(den)


def rmsea_point(chi: float, df: float, n_obs: float) -> float:
    """
    RMSEA = sqrt(max((Chi/N)/df - 1/N, 0)).

    The radicand is clamped at zero; well-fitting models (Chi < df)
    give 0, never a domain error.
    """
    radicand = _div(_div(chi, n_obs), df) - _div(1.0, n_obs)
    if np.isnan(radicand):
        return float('nan')
    return float(np.sqrt(max(radicand, 0.0)))


def goodness_of_fit(
    observed_cor: NDArray[np.floating[Any]],
    implied_cor: NDArray[np.floating[Any]],
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> float:
    """
    GFI = 1 - tr((R_hat^{-1} R - I)^2) / tr((R_hat^{-1} R)^2).

    Raises
    ------
    SingularCorrelationError
        If the implied correlation matrix is not invertible.
    """
    inv_implied = guarded_inverse(
        implied_cor,
        'model-implied correlation matrix',
        error_cls=SingularCorrelationError,
        tolerances=tolerances,
    )
    W = inv_implied @ observed_cor
    D = W - np.eye(W.shape[0])
    return 1.0 - _div(np.trace(D @ D), np.trace(W @ W))


def compute_indices(
    design: FitDesign,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> dict[str, float]:
    """
    Compute all fit indices in their fixed report order.

    Pure function of ``design``; identical inputs give bit-identical
    output. Entries whose formula divides by zero are NaN.
    """
    N = float(design.n_obs)
    k = float(design.n_parameters)
    p = float(design.n_manifest)
    q = design.n_moments
    deviance = float(design.deviance)
    Chi = float(design.chi)
    df = float(design.df)
    indep_chi = float(design.indep_chi)
    indep_df = float(design.indep_df)

    p_chi = float(1.0 - stats.chi2.cdf(Chi, df)) if df > 0 else float('nan')
    log_n = float(np.log(N))

    residual_cov = design.observed_cov - design.implied_cov
    residual_cor = design.observed_cor - design.implied_cor

    GFI = goodness_of_fit(design.observed_cor, design.implied_cor, tolerances)

    NFI = _div(indep_chi - Chi, indep_chi)
    CFI = float(np.minimum(1.0 - _div(Chi - df, indep_chi - indep_df), 1.0))
    PRATIO = _div(df, indep_df)

    AICchi = Chi + 2 * k
    AICdev = deviance + 2 * k
    BCCchi = Chi + _div(2 * k, N - p - 2)
    BCCdev = deviance + _div(2 * k, N - p - 2)

    indices = {
        'N': N,
        'deviance': deviance,
        'N.parms': k,
        'Chi': Chi,
        'df': df,
        'p.Chi': p_chi,
        'Chi.df': _div(Chi, df),
        'AICchi': AICchi,
        'AICdev': AICdev,
        'BCCchi': BCCchi,
        'BCCdev': BCCdev,
        'BICchi': Chi + k * log_n,
        'BICdev': deviance + k * log_n,
        'CAICchi': Chi + k * (log_n + 1),
        'CAICdev': deviance + k * (log_n + 1),
        'RMSEA': rmsea_point(Chi, df, N),
        'SRMR': float(np.sqrt(_div(np.sum(residual_cor ** 2), q))),
        'RMR': float(np.sqrt(_div(np.sum(residual_cov ** 2), q))),
        'GFI': GFI,
        'AGFI': 1.0 - _div(q, df) * (1.0 - GFI),
        'PGFI': _div(GFI * df, q),
        'NFI': NFI,
        'RFI': 1.0 - _div(_div(Chi, df), _div(indep_chi, indep_df)),
        'IFI': _div(indep_chi - Chi, indep_chi - df),
        'NNFI.TLI': _div(indep_chi - _div(indep_df, df) * Chi, indep_chi - indep_df),
        'CFI': CFI,
        'PRATIO': PRATIO,
        'PNFI': PRATIO * NFI,
        'PCFI': PRATIO * CFI,
        'NCP': max(Chi - df, 0.0),
        'ECVIchi': _div(AICchi, N),
        'ECVIdev': _div(AICdev, N),
        'MECVIchi': _div(1.0, BCCchi),
        'MECVIdev': _div(1.0, BCCdev),
        'MFI': float(np.exp(-0.5 * _div(Chi - df, N))),
        'GH': _div(p, p + 2 * _div(Chi - df, N - 1)),
    }
    return {name: float(indices[name]) for name in INDEX_NAMES}
