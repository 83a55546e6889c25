"""
Solver dispatch for conditional moments.

Public API:
    condition(mean, cov, row, ...) -> ConditionalMoments
    conditionals(data, mean, cov, ...) -> ConditionalSolution
"""

from collections.abc import Sequence

import numpy as np

from pysemstats.core.config import Tolerances, DEFAULT_TOLERANCES
from pysemstats.core.compute.timing import Timer
from pysemstats.core.exceptions import DimensionError, InvalidInputError
from pysemstats.core.result import Result
from pysemstats.core.validation import (
    check_array,
    check_2d,
    check_unique_names,
    check_same_names,
)
from pysemstats.conditional._schur import condition_pattern
from pysemstats.conditional.design import MomentDesign, _labels
from pysemstats.conditional.patterns import identify_missingness_patterns
from pysemstats.conditional.solution import (
    ConditionalMoments,
    ConditionalParams,
    ConditionalSolution,
)


def _get_design(mean, cov, names, tolerances) -> MomentDesign:
    if isinstance(cov, MomentDesign):
        return cov
    return MomentDesign.from_arrays(mean, cov, names=names, tolerances=tolerances)


def _check_observed_finite(values: np.ndarray, name: str) -> None:
    """Missing is NaN; any Inf is garbage."""
    if np.any(np.isinf(values)):
        n_inf = int(np.sum(np.isinf(values)))
        raise InvalidInputError(f"{name}: contains {n_inf} infinite values")


def condition(
    mean,
    cov,
    row,
    *,
    return_cov: bool = False,
    names: Sequence[str] | None = None,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> ConditionalMoments:
    """
    Condition one partially observed row on a mean and covariance.

    Parameters
    ----------
    mean : array-like, pandas Series, mapping, or None
        Mean vector (None for zero means).
    cov : array-like, pandas DataFrame, or MomentDesign
        Symmetric covariance matrix. When a MomentDesign is given,
        ``mean`` and ``names`` are ignored.
    row : array-like, pandas Series, or mapping
        Data row; NaN or None marks a missing value. Named rows must
        carry exactly the model's variable names; unnamed rows are
        assigned positionally.
    return_cov : bool
        Also return the conditional covariance matrix.
    names : sequence of str, optional
        Canonical variable names.
    tolerances : Tolerances
        Symmetry and singularity thresholds.

    Returns
    -------
    ConditionalMoments

    Raises
    ------
    DimensionError
        Shape or name inconsistency between mean, cov and row.
    NameMismatchError
        Unnamed row of the wrong length.
    InvalidInputError
        NaN/Inf in mean or cov, Inf in the row, or non-symmetric cov.
    SingularCovarianceError
        The observed covariance block is numerically singular.

    Examples
    --------
    >>> res = condition([0, 0], [[1, .5], [.5, 1]], [2, np.nan], return_cov=True)
    >>> res.mean
    array([2., 1.])
    >>> res.cov[1, 1]
    0.75
    """
    design = _get_design(mean, cov, names, tolerances)
    values = design.align_row(row)
    _check_observed_finite(values, 'row')

    observed = ~np.isnan(values)
    completed, cond_cov = condition_pattern(
        design.mean,
        design.cov,
        np.flatnonzero(observed),
        np.flatnonzero(~observed),
        values.reshape(1, -1),
        return_cov=return_cov,
        tolerances=design.tolerances,
    )
    return ConditionalMoments(
        mean=completed[0],
        cov=cond_cov,
        names=design.names,
        observed=observed,
    )


def _align_data(data, design: MomentDesign) -> np.ndarray:
    """Arrange a data matrix (or DataFrame) in canonical column order."""
    labels = _labels(data, 'columns')
    values = check_array(data, 'data')
    if values.ndim == 1:
        values = values.reshape(1, -1)
    check_2d(values, 'data')

    if labels is None:
        if values.shape[1] != design.p:
            raise DimensionError(
                f"data has {values.shape[1]} columns but there are "
                f"{design.p} variables"
            )
        return values

    check_unique_names(labels, 'data columns')
    check_same_names(labels, design.names, 'data columns')
    return values[:, [labels.index(c) for c in design.names]]


def conditionals(
    data,
    mean,
    cov,
    *,
    return_cov: bool = False,
    names: Sequence[str] | None = None,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> ConditionalSolution:
    """
    Condition every row of a dataset on a mean and covariance.

    Rows are independent. Results are written into arrays allocated once
    (one slot per row), and rows sharing a missingness pattern are
    conditioned together so each observed block is inverted once. The
    output is identical to calling ``condition`` on each row.

    Parameters
    ----------
    data : array-like or pandas DataFrame, shape (n_rows, p)
        NaN marks missing values. DataFrame columns are matched by name.
    mean, cov, names, tolerances
        As for ``condition``.
    return_cov : bool
        Also return one conditional covariance matrix per row.

    Returns
    -------
    ConditionalSolution
    """
    timer = Timer()
    timer.start()

    with timer.section('validation'):
        design = _get_design(mean, cov, names, tolerances)
        values = _align_data(data, design)
        _check_observed_finite(values, 'data')

    n_rows, p = values.shape
    means = np.empty((n_rows, p))
    covs = np.empty((n_rows, p, p)) if return_cov else None

    with timer.section('patterns'):
        patterns = identify_missingness_patterns(values)

    with timer.section('schur'):
        for pattern in patterns:
            idx = pattern.row_indices
            completed, cond_cov = condition_pattern(
                design.mean,
                design.cov,
                pattern.observed_indices,
                pattern.missing_indices,
                values[idx],
                return_cov=return_cov,
                tolerances=design.tolerances,
            )
            means[idx] = completed
            if covs is not None:
                covs[idx] = cond_cov

    timer.stop()

    params = ConditionalParams(
        means=means,
        covs=covs,
        names=design.names,
        observed=~np.isnan(values),
    )
    result = Result(
        params=params,
        info={
            'n_patterns': len(patterns),
            'n_complete_rows': sum(
                pt.n_rows for pt in patterns if pt.n_missing == 0
            ),
            'n_empty_rows': sum(
                pt.n_rows for pt in patterns if pt.n_observed == 0
            ),
        },
        timing=timer.result(),
        backend_name='cpu_schur',
    )
    return ConditionalSolution(_result=result)
