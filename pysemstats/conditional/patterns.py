"""
Missingness pattern grouping.

Rows that miss the same variables share one observed-block inverse, so
the batch driver conditions them together.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class MissingnessPattern:
    """One distinct missingness pattern and the rows that have it."""
    pattern_id: int
    observed_indices: np.ndarray
    missing_indices: np.ndarray
    row_indices: np.ndarray

    @property
    def n_rows(self) -> int:
        return len(self.row_indices)

    @property
    def n_observed(self) -> int:
        return len(self.observed_indices)

    @property
    def n_missing(self) -> int:
        return len(self.missing_indices)

    def __repr__(self) -> str:
        return (f"MissingnessPattern(id={self.pattern_id}, n_rows={self.n_rows}, "
                f"n_observed={self.n_observed}, n_missing={self.n_missing})")


def identify_missingness_patterns(data: np.ndarray) -> list[MissingnessPattern]:
    """
    Group the rows of a data matrix by missingness pattern.

    Patterns are keyed on the observed indicator (1 = observed,
    0 = missing) and returned most common first; ties keep the order of
    first appearance.

    Parameters
    ----------
    data : np.ndarray, shape (n_rows, p)
        Data with missing values as np.nan

    Returns
    -------
    list of MissingnessPattern
    """
    n_rows, n_vars = data.shape
    if n_rows == 0:
        return []

    pattern_matrix = (~np.isnan(data)).astype(np.int64)

    groups: dict[bytes, list[int]] = {}
    for i in range(n_rows):
        groups.setdefault(pattern_matrix[i].tobytes(), []).append(i)

    ordered = sorted(groups.values(), key=len, reverse=True)

    patterns = []
    for pattern_id, rows in enumerate(ordered, start=1):
        indicator = pattern_matrix[rows[0]]
        patterns.append(MissingnessPattern(
            pattern_id=pattern_id,
            observed_indices=np.flatnonzero(indicator == 1),
            missing_indices=np.flatnonzero(indicator == 0),
            row_indices=np.asarray(rows, dtype=np.intp),
        ))
    return patterns
