"""
MomentDesign: validated mean vector and covariance matrix.

Wraps the model-implied moments that rows are conditioned on, together
with the single canonical list of variable names shared by the mean,
both covariance axes, and every data row.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pysemstats.core.config import Tolerances, DEFAULT_TOLERANCES
from pysemstats.core.exceptions import DimensionError, NameMismatchError
from pysemstats.core.validation import (
    check_array,
    check_finite,
    check_1d,
    check_square,
    check_symmetric,
    check_unique_names,
    check_same_names,
)


def _labels(obj: Any, axis: str = 'index') -> list[str] | None:
    """Variable labels carried by a pandas object or mapping, if any."""
    if isinstance(obj, Mapping):
        return [str(k) for k in obj.keys()]
    labels = getattr(obj, axis, None)
    if labels is None or not hasattr(labels, 'tolist'):
        return None
    labels = [str(v) for v in labels.tolist()]
    # A default RangeIndex carries no variable names
    if labels == [str(i) for i in range(len(labels))]:
        return None
    return labels


def default_names(n: int) -> tuple[str, ...]:
    """Positional names X1..Xn used when no input carries labels."""
    return tuple(f"X{i + 1}" for i in range(n))


@dataclass(frozen=True)
class MomentDesign:
    """
    Mean vector and covariance matrix over one named set of variables.

    Immutable after construction. Build via ``from_arrays``; labels are
    taken from the covariance (DataFrame columns/index), then the mean
    (Series index or mapping keys), then ``X1..Xn``.
    """
    _mean: NDArray[np.floating[Any]]
    _cov: NDArray[np.floating[Any]]
    _names: tuple[str, ...]
    _tolerances: Tolerances = DEFAULT_TOLERANCES

    @classmethod
    def from_arrays(
        cls,
        mean,
        cov,
        *,
        names: Sequence[str] | None = None,
        tolerances: Tolerances = DEFAULT_TOLERANCES,
    ) -> MomentDesign:
        """
        Build a MomentDesign from array-likes.

        Parameters
        ----------
        mean : array-like, pandas Series, mapping, or None
            Mean vector. None means zero means.
        cov : array-like or pandas DataFrame
            Symmetric covariance matrix.
        names : sequence of str, optional
            Canonical variable names; overrides any labels on the inputs.
        tolerances : Tolerances
            Symmetry and singularity thresholds.
        """
        cov_labels = _labels(cov, 'columns')
        cov_row_labels = _labels(cov, 'index')
        cov_arr = check_array(cov, 'cov')
        check_square(cov_arr, 'cov')
        check_finite(cov_arr, 'cov')
        n = cov_arr.shape[0]

        if cov_labels is not None and cov_row_labels is not None:
            check_unique_names(cov_labels, 'cov columns')
            check_same_names(cov_row_labels, cov_labels, 'cov rows vs columns')
            order = [cov_row_labels.index(c) for c in cov_labels]
            cov_arr = cov_arr[np.ix_(order, range(n))]

        if mean is None:
            mean_labels = None
            mean_arr = np.zeros(n)
        else:
            mean_labels = _labels(mean, 'index')
            if isinstance(mean, Mapping):
                mean = list(mean.values())
            mean_arr = check_array(mean, 'mean').ravel()
            check_1d(mean_arr, 'mean')
            check_finite(mean_arr, 'mean')
            if mean_arr.shape[0] != n:
                raise DimensionError(
                    f"mean has length {mean_arr.shape[0]} but cov is {n}x{n}"
                )

        if names is not None:
            canonical = tuple(str(v) for v in names)
            if len(canonical) != n:
                raise DimensionError(
                    f"names has length {len(canonical)} but cov is {n}x{n}"
                )
        elif cov_labels is not None:
            canonical = tuple(cov_labels)
        elif mean_labels is not None:
            canonical = tuple(mean_labels)
        else:
            canonical = default_names(n)
        check_unique_names(canonical, 'names')

        if cov_labels is not None and names is not None:
            check_same_names(cov_labels, canonical, 'cov')
            order = [cov_labels.index(c) for c in canonical]
            cov_arr = cov_arr[np.ix_(order, order)]

        if mean_labels is not None:
            check_unique_names(mean_labels, 'mean')
            check_same_names(mean_labels, canonical, 'mean')
            mean_arr = mean_arr[[mean_labels.index(c) for c in canonical]]

        check_symmetric(cov_arr, 'cov', tolerances)

        return cls(
            _mean=mean_arr,
            _cov=cov_arr,
            _names=canonical,
            _tolerances=tolerances,
        )

    @property
    def mean(self) -> NDArray[np.floating[Any]]:
        """Mean vector in canonical order."""
        return self._mean

    @property
    def cov(self) -> NDArray[np.floating[Any]]:
        """Covariance matrix in canonical order."""
        return self._cov

    @property
    def names(self) -> tuple[str, ...]:
        """Canonical variable names."""
        return self._names

    @property
    def p(self) -> int:
        """Number of variables."""
        return len(self._names)

    @property
    def tolerances(self) -> Tolerances:
        return self._tolerances

    def align_row(self, row) -> NDArray[np.floating[Any]]:
        """
        Map one data row onto the canonical variable order.

        Named rows (pandas Series, mappings) must carry exactly the
        canonical names. Unnamed rows are assigned positionally and must
        have one value per variable. Missing values are NaN or None.

        Raises
        ------
        DimensionError
            Named row with unexpected, absent or duplicated names.
        NameMismatchError
            Unnamed row of the wrong length.
        """
        labels = _labels(row, 'index')
        if isinstance(row, Mapping):
            row = list(row.values())
        values = check_array(row, 'row').ravel()

        if labels is None:
            if values.shape[0] != self.p:
                raise NameMismatchError(
                    f"row has {values.shape[0]} values but there are "
                    f"{self.p} variables; positional assignment is ambiguous",
                    n_values=values.shape[0],
                    n_names=self.p,
                )
            return values

        check_unique_names(labels, 'row')
        check_same_names(labels, self._names, 'row')
        return values[[labels.index(c) for c in self._names]]

    def __repr__(self) -> str:
        return f"MomentDesign(p={self.p}, names={list(self._names)})"
