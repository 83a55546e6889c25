"""
Conditional moments solution types.

ConditionalMoments is the result of conditioning one row;
ConditionalSolution wraps the batch Result for a whole dataset.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pysemstats.core.result import Result

if TYPE_CHECKING:
    import pandas as pd


@dataclass(frozen=True)
class ConditionalMoments:
    """
    Completed row and (optionally) conditional covariance for one row.

    Attributes
    ----------
    mean : ndarray, shape (p,)
        Observed values unchanged, missing values replaced by their
        conditional mean.
    cov : ndarray, shape (p, p) or None
        Conditional covariance, if requested.
    names : tuple of str
        Canonical variable names.
    observed : ndarray of bool, shape (p,)
        Which entries of the row were observed.
    """
    mean: NDArray[np.floating[Any]]
    cov: NDArray[np.floating[Any]] | None
    names: tuple[str, ...]
    observed: NDArray[np.bool_]

    @property
    def n_missing(self) -> int:
        return int(np.sum(~self.observed))

    def to_series(self) -> 'pd.Series':
        """Completed row as a pandas Series indexed by variable name."""
        import pandas as pd
        return pd.Series(self.mean, index=list(self.names))


@dataclass(frozen=True)
class ConditionalParams:
    """
    Parameter payload for batch conditioning.

    ``means`` and ``covs`` are allocated once with one slot per row.
    """
    means: NDArray[np.floating[Any]]
    covs: NDArray[np.floating[Any]] | None
    names: tuple[str, ...]
    observed: NDArray[np.bool_]


@dataclass
class ConditionalSolution:
    """
    User-facing results of conditioning every row of a dataset.
    """
    _result: Result[ConditionalParams]

    @property
    def means(self) -> NDArray[np.floating[Any]]:
        """Completed data, shape (n_rows, p)."""
        return self._result.params.means

    @property
    def covs(self) -> NDArray[np.floating[Any]] | None:
        """Per-row conditional covariances, shape (n_rows, p, p), or None."""
        return self._result.params.covs

    @property
    def names(self) -> tuple[str, ...]:
        return self._result.params.names

    @property
    def observed(self) -> NDArray[np.bool_]:
        """Observed-value mask of the input, shape (n_rows, p)."""
        return self._result.params.observed

    @property
    def n_rows(self) -> int:
        return self.means.shape[0]

    @property
    def n_patterns(self) -> int:
        return self._result.info['n_patterns']

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    def row(self, i: int) -> ConditionalMoments:
        """Result for row ``i`` as a ConditionalMoments."""
        covs = self.covs
        return ConditionalMoments(
            mean=self.means[i],
            cov=None if covs is None else covs[i],
            names=self.names,
            observed=self.observed[i],
        )

    def to_frame(self) -> 'pd.DataFrame':
        """Completed data as a pandas DataFrame."""
        import pandas as pd
        return pd.DataFrame(self.means, columns=list(self.names))

    def summary(self) -> str:
        n_missing = int(np.sum(~self.observed))
        total = self.observed.size
        lines = [
            "Conditional Moments",
            "=" * 60,
            f"Rows: {self.n_rows}",
            f"Variables: {len(self.names)}",
            f"Missingness patterns: {self.n_patterns}",
            f"Values imputed: {n_missing} of {total}",
            f"Covariances returned: {self.covs is not None}",
            "-" * 60,
            f"Backend: {self.backend_name}",
        ]
        if self.timing:
            lines.append(f"Time: {self.timing.get('total_seconds', 0):.4f}s")
        if self.warnings:
            lines.append(f"Warnings: {len(self.warnings)}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"ConditionalSolution(n_rows={self.n_rows}, p={len(self.names)}, "
            f"n_patterns={self.n_patterns})"
        )
