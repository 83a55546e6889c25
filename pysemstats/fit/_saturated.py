"""
Closed-form saturated and independence likelihoods for raw data.

For complete multivariate-normal data both reference models have
analytic ML solutions, so no optimizer run is needed:

    saturated:     mu = sample mean, Sigma = S (ML, divisor n)
    independence:  mu = sample mean, Sigma = diag(S)

with -2LL = n (p log 2pi + log|Sigma| + tr(Sigma^{-1} S)) and
tr(Sigma^{-1} S) = p in both cases.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pysemstats.core.config import Tolerances, DEFAULT_TOLERANCES
from pysemstats.core.exceptions import (
    ValidationError,
    SingularCovarianceError,
)
from pysemstats.core.validation import check_array, check_2d, check_min_samples
from pysemstats.fit.design import ModelSummary


@dataclass(frozen=True)
class SaturatedLikelihoods:
    """
    -2LL of the saturated and independence models for one dataset.

    Attributes:
        n_obs: Number of rows
        n_vars: Number of variables
        saturated_m2ll: -2LL of the saturated model
        independence_m2ll: -2LL of the independence model
        saturated_parameters: p + p(p+1)/2
        independence_parameters: 2p
    """
    n_obs: int
    n_vars: int
    saturated_m2ll: float
    independence_m2ll: float
    saturated_parameters: int
    independence_parameters: int

    @property
    def independence_chi(self) -> float:
        return self.independence_m2ll - self.saturated_m2ll

    @property
    def independence_df(self) -> int:
        """Covariances the independence model fixes at zero, p(p-1)/2."""
        return self.saturated_parameters - self.independence_parameters

    def chi_for(self, minus2loglik: float) -> float:
        """Chi-square of a model fit to the same data: -2LL - -2LL_sat."""
        return float(minus2loglik) - self.saturated_m2ll

    def independence_summary(self) -> ModelSummary:
        """The independence model as a baseline ModelSummary."""
        return ModelSummary(
            n_obs=self.n_obs,
            n_parameters=self.independence_parameters,
            chi=self.independence_chi,
            df=float(self.independence_df),
            minus2loglik=self.independence_m2ll,
            name='independence',
        )

    def summary(self) -> str:
        lines = [
            "Reference Models",
            "=" * 50,
            f"Observations: {self.n_obs}",
            f"Variables: {self.n_vars}",
            f"Saturated    -2LL: {self.saturated_m2ll:14.4f}  "
            f"(ep = {self.saturated_parameters})",
            f"Independence -2LL: {self.independence_m2ll:14.4f}  "
            f"(ep = {self.independence_parameters})",
            f"Independence chi-square: {self.independence_chi:.4f} "
            f"on {self.independence_df} df",
        ]
        return "\n".join(lines)


def saturated_likelihoods(
    data,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> SaturatedLikelihoods:
    """
    Saturated and independence -2LL for complete raw data.

    Raises
    ------
    ValidationError
        Missing values (these need an iterative fit) or too few rows.
    SingularCovarianceError
        If the sample covariance is singular.
    """
    values: NDArray[np.floating[Any]] = check_array(data, 'data')
    check_2d(values, 'data')
    if np.any(np.isnan(values)):
        raise ValidationError(
            "data: closed-form reference models require complete data "
            f"({int(np.sum(np.isnan(values)))} missing values found)"
        )
    if np.any(np.isinf(values)):
        raise ValidationError("data: contains infinite values")
    check_min_samples(values, 2, 'data')

    n, p = values.shape
    centered = values - values.mean(axis=0)
    S = centered.T @ centered / n

    variances = np.diag(S)
    if np.any(variances <= 0):
        raise SingularCovarianceError(
            "data: a variable has zero variance",
            matrix_name='sample covariance',
        )
    cond = float(np.linalg.cond(S))
    sign, logdet = np.linalg.slogdet(S)
    if sign <= 0 or not np.isfinite(cond) or cond > tolerances.condition_threshold:
        raise SingularCovarianceError(
            "data: sample covariance is singular; the saturated model is undefined "
            f"(condition number {cond:.3e})",
            matrix_name='sample covariance',
            condition_number=cond,
        )

    const = p * np.log(2 * np.pi) + p
    return SaturatedLikelihoods(
        n_obs=n,
        n_vars=p,
        saturated_m2ll=float(n * (const + logdet)),
        independence_m2ll=float(n * (const + np.sum(np.log(variances)))),
        saturated_parameters=p + p * (p + 1) // 2,
        independence_parameters=2 * p,
    )
