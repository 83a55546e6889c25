"""
Model-based conditioning.

Public API: conditionals_from_model(model, data, ...) -> ConditionalSolution
"""

import numpy as np

from pysemstats.conditional.design import _labels
from pysemstats.conditional.solution import ConditionalSolution
from pysemstats.conditional.solvers import conditionals
from pysemstats.core.exceptions import DimensionError
from pysemstats.core.validation import (
    check_array,
    check_2d,
    check_unique_names,
    check_same_names,
)
from pysemstats.ram.model import normalize_model


def conditionals_from_model(
    model,
    data,
    *,
    return_cov: bool = False,
    mean_offsets: bool = False,
) -> ConditionalSolution:
    """
    Complete a dataset from a fitted RAM model.

    Missing manifest values are replaced by their conditional means, and
    one column per latent variable is appended and filled with the
    latent's conditional mean (its regression factor score).

    Parameters
    ----------
    model : RAMModel or mapping
        Anything ``normalize_model`` accepts.
    data : array-like or pandas DataFrame, shape (n_rows, n_manifest)
        Manifest data with NaN for missing values. DataFrame columns are
        matched to the manifest names; arrays are taken in manifest order.
    return_cov : bool
        Also return per-row conditional covariances.
    mean_offsets : bool
        Condition on zero means even if the model has a means vector.

    Returns
    -------
    ConditionalSolution
        Columns are ``manifest_vars + latent_vars``.
    """
    ram = normalize_model(model)
    mean, cov = ram.expected_moments()
    if mean_offsets:
        mean = np.zeros_like(mean)

    labels = _labels(data, 'columns')
    values = check_array(data, 'data')
    if values.ndim == 1:
        values = values.reshape(1, -1)
    check_2d(values, 'data')

    if labels is None:
        if values.shape[1] != ram.n_manifest:
            raise DimensionError(
                f"data has {values.shape[1]} columns but the model has "
                f"{ram.n_manifest} manifest variables"
            )
    else:
        check_unique_names(labels, 'data columns')
        check_same_names(labels, ram.manifest_vars, 'data columns')
        values = values[:, [labels.index(v) for v in ram.manifest_vars]]

    augmented = np.hstack([values, np.full((values.shape[0], ram.n_latent), np.nan)])

    return conditionals(
        augmented,
        mean,
        cov,
        return_cov=return_cov,
        names=ram.variables,
    )
