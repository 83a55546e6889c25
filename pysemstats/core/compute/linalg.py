"""
Guarded matrix inversion.

Every inversion the package performs goes through ``guarded_inverse`` so
that a singular block is reported as a typed error instead of leaking
NaN/Inf into downstream results.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from pysemstats.core.config import Tolerances, DEFAULT_TOLERANCES
from pysemstats.core.exceptions import SingularMatrixError


def guarded_inverse(
    matrix: NDArray[np.floating[Any]],
    name: str,
    *,
    error_cls: type[SingularMatrixError] = SingularMatrixError,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> NDArray[np.floating[Any]]:
    """
    Invert a square matrix, refusing numerically singular input.

    Args:
        matrix: Square matrix to invert
        name: Matrix description for error messages
        error_cls: SingularMatrixError subclass to raise
        tolerances: Supplies the condition-number threshold

    Returns:
        The inverse matrix

    Raises:
        error_cls: If the matrix is singular or its condition number
            exceeds ``tolerances.condition_threshold``
    """
    cond = float(np.linalg.cond(matrix)) if matrix.size else 1.0
    if not np.isfinite(cond) or cond > tolerances.condition_threshold:
        raise error_cls(
            f"{name} is numerically singular (condition number {cond:.3e}, "
            f"threshold {tolerances.condition_threshold:.1e})",
            matrix_name=name,
            condition_number=cond,
        )
    try:
        inverse = np.linalg.inv(matrix)
    except np.linalg.LinAlgError as e:
        raise error_cls(
            f"{name} is singular: {e}",
            matrix_name=name,
            condition_number=cond,
        ) from e
    return inverse


def cov2cor(cov: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """
    Scale a covariance matrix to a correlation matrix.

    Zero variances give NaN rows/columns, matching R's cov2cor.
    """
    d = np.sqrt(np.diag(cov))
    with np.errstate(divide='ignore', invalid='ignore'):
        corr = cov / np.outer(d, d)
    idx = np.arange(corr.shape[0])
    corr[idx, idx] = np.where(d > 0, 1.0, np.nan)
    return corr
