"""
Multivariate-normal conditioning via the Schur complement.

For a partition of the variables into missing (m) and observed (o):

    E[x_m | x_o]   = mu_m + Sigma_mo Sigma_oo^{-1} (x_o - mu_o)
    Var[x_m | x_o] = Sigma_mm - Sigma_mo Sigma_oo^{-1} Sigma_om

The conditional covariance depends only on which variables are observed,
so all rows sharing a missingness pattern reuse one inverse.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pysemstats.core.config import Tolerances, DEFAULT_TOLERANCES
from pysemstats.core.compute.linalg import guarded_inverse
from pysemstats.core.exceptions import SingularCovarianceError


def condition_pattern(
    mean: NDArray[np.floating[Any]],
    cov: NDArray[np.floating[Any]],
    observed: NDArray[np.intp],
    missing: NDArray[np.intp],
    rows: NDArray[np.floating[Any]],
    *,
    return_cov: bool = False,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]] | None]:
    """
    Condition every row of one missingness pattern.

    Parameters
    ----------
    mean : ndarray, shape (p,)
    cov : ndarray, shape (p, p)
    observed, missing : ndarray of int
        Column indices of the observed and missing variables. Together
        they partition range(p).
    rows : ndarray, shape (k, p)
        Rows sharing this pattern; entries at ``missing`` are ignored.
    return_cov : bool
        Also return the conditional covariance.

    Returns
    -------
    completed : ndarray, shape (k, p)
        Observed values unchanged, missing values replaced by their
        conditional mean.
    cond_cov : ndarray, shape (p, p) or None
        Observed block = Sigma_oo, missing block = Schur complement,
        cross blocks = Sigma_mo / Sigma_om.

    Raises
    ------
    SingularCovarianceError
        If Sigma_oo is numerically singular.
    """
    k, p = rows.shape
    completed = np.array(rows, dtype=np.float64, copy=True)

    if len(missing) == 0:
        return completed, (cov.copy() if return_cov else None)

    if len(observed) == 0:
        # No evidence: the prior moments are the answer
        completed[:] = mean
        return completed, (cov.copy() if return_cov else None)

    sigma_oo = cov[np.ix_(observed, observed)]
    sigma_mo = cov[np.ix_(missing, observed)]
    inv_oo = guarded_inverse(
        sigma_oo,
        'observed covariance block Sigma_oo',
        error_cls=SingularCovarianceError,
        tolerances=tolerances,
    )

    # Regression coefficients of the missing block on the observed block
    beta = sigma_mo @ inv_oo  # (n_mis, n_obs)

    centered = rows[:, observed] - mean[observed]
    completed[:, missing] = mean[missing] + centered @ beta.T

    if not return_cov:
        return completed, None

    cond_cov = cov.copy()
    cond_cov[np.ix_(missing, missing)] = (
        cov[np.ix_(missing, missing)] - beta @ sigma_mo.T
    )
    # Enforce exact symmetry (avoid floating point drift)
    cond_cov = (cond_cov + cond_cov.T) / 2
    return completed, cond_cov
