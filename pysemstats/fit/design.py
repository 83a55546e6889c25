"""
Inputs to the fit-index calculator.

ModelSummary is the read-only record the external engine produces for
one fitted model. FitDesign bundles the fitted model, its baseline
(independence) model, and the observed and implied covariances into the
single immutable input the index formulas work from.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pysemstats.core.compute.linalg import cov2cor
from pysemstats.core.config import Tolerances, DEFAULT_TOLERANCES
from pysemstats.core.exceptions import ValidationError, DimensionError
from pysemstats.core.validation import (
    check_array,
    check_finite,
    check_square,
    check_symmetric,
)
from pysemstats.ram.model import normalize_model


# Engine field names -> ModelSummary field names
_SUMMARY_KEYS = {
    'n_obs': ('n_obs', 'numObs'),
    'n_parameters': ('n_parameters', 'estimatedParameters'),
    'chi': ('chi', 'Chi'),
    'df': ('df', 'degreesOfFreedom'),
    'minus2loglik': ('minus2loglik', 'Minus2LogLikelihood'),
    'name': ('name', 'modelName'),
}


@dataclass(frozen=True)
class ModelSummary:
    """
    Summary statistics of one fitted model.

    Attributes:
        n_obs: Sample size
        n_parameters: Number of free (estimated) parameters
        chi: Model chi-square against the saturated model
        df: Degrees of freedom
        minus2loglik: -2 log-likelihood (deviance); NaN if unknown
        name: Model name used in reports
    """
    n_obs: int
    n_parameters: int
    chi: float
    df: float
    minus2loglik: float = float('nan')
    name: str = 'model'

    def __post_init__(self):
        if self.n_obs <= 0:
            raise ValidationError(f"n_obs must be positive, got {self.n_obs}")
        if self.n_parameters < 0:
            raise ValidationError(
                f"n_parameters must be non-negative, got {self.n_parameters}"
            )

    @classmethod
    def from_mapping(cls, summary: Mapping[str, Any]) -> ModelSummary:
        """
        Build from an engine summary mapping.

        Accepts OpenMx-style keys (numObs, estimatedParameters, Chi,
        degreesOfFreedom, Minus2LogLikelihood) or the field names.
        """
        values = {}
        for field_name, keys in _SUMMARY_KEYS.items():
            for key in keys:
                if key in summary:
                    values[field_name] = summary[key]
                    break
        absent = [k for k in ('n_obs', 'n_parameters', 'chi', 'df') if k not in values]
        if absent:
            raise ValidationError(f"model summary lacks fields {absent}")
        return cls(
            n_obs=int(values['n_obs']),
            n_parameters=int(values['n_parameters']),
            chi=float(values['chi']),
            df=float(values['df']),
            minus2loglik=float(values.get('minus2loglik', float('nan'))),
            name=str(values.get('name', 'model')),
        )


def _as_summary(obj) -> ModelSummary:
    if isinstance(obj, ModelSummary):
        return obj
    if isinstance(obj, Mapping):
        return ModelSummary.from_mapping(obj)
    raise ValidationError(
        f"expected a ModelSummary or mapping, got {type(obj).__name__}"
    )


def _check_cov(cov, name: str, tolerances: Tolerances) -> NDArray[np.floating[Any]]:
    arr = check_array(cov, name)
    check_square(arr, name)
    check_finite(arr, name)
    check_symmetric(arr, name, tolerances)
    return arr


@dataclass(frozen=True)
class FitDesign:
    """
    Sufficient statistics for the fit indices.

    Build via ``from_summaries``. Immutable after construction.
    """
    n_obs: int
    n_parameters: int
    n_manifest: int
    n_latent: int
    deviance: float
    chi: float
    df: float
    indep_chi: float
    indep_df: float
    observed_cov: NDArray[np.floating[Any]]
    implied_cov: NDArray[np.floating[Any]]
    model_name: str = 'model'

    @classmethod
    def from_summaries(
        cls,
        model,
        independence,
        *,
        observed_cov,
        implied_cov=None,
        ram=None,
        n_manifest: int | None = None,
        n_latent: int | None = None,
        tolerances: Tolerances = DEFAULT_TOLERANCES,
    ) -> FitDesign:
        """
        Assemble the fit-statistics bundle.

        Parameters
        ----------
        model, independence : ModelSummary or mapping
            Fitted model and baseline (independence) model summaries.
        observed_cov : array-like, shape (p, p)
            Observed covariance of the manifests.
        implied_cov : array-like, shape (p, p), optional
            Model-implied manifest covariance. Derived from ``ram`` when
            omitted.
        ram : RAMModel or mapping, optional
            RAM matrices of the fitted model; also supplies n_latent.
        n_manifest, n_latent : int, optional
            Default to the size of ``observed_cov`` and to the RAM
            model's latent count (0 without a RAM model).
        """
        model = _as_summary(model)
        independence = _as_summary(independence)

        observed = _check_cov(observed_cov, 'observed_cov', tolerances)

        ram_model = normalize_model(ram) if ram is not None else None
        if implied_cov is not None:
            implied = _check_cov(implied_cov, 'implied_cov', tolerances)
        elif ram_model is not None:
            implied = ram_model.implied_manifest_cov()
        else:
            raise ValidationError(
                "either implied_cov or a RAM model is required to compute "
                "GFI, RMR and SRMR"
            )

        if implied.shape != observed.shape:
            raise DimensionError(
                f"implied_cov has shape {implied.shape} but observed_cov "
                f"has shape {observed.shape}"
            )

        if n_manifest is None:
            n_manifest = observed.shape[0]
        if n_latent is None:
            n_latent = ram_model.n_latent if ram_model is not None else 0

        return cls(
            n_obs=model.n_obs,
            n_parameters=model.n_parameters,
            n_manifest=int(n_manifest),
            n_latent=int(n_latent),
            deviance=model.minus2loglik,
            chi=model.chi,
            df=model.df,
            indep_chi=independence.chi,
            indep_df=independence.df,
            observed_cov=observed,
            implied_cov=implied,
            model_name=model.name,
        )

    @property
    def observed_cor(self) -> NDArray[np.floating[Any]]:
        return cov2cor(self.observed_cov)

    @property
    def implied_cor(self) -> NDArray[np.floating[Any]]:
        return cov2cor(self.implied_cov)

    @property
    def n_moments(self) -> float:
        """Number of distinct covariance elements, p(p+1)/2."""
        return self.n_manifest * (self.n_manifest + 1) / 2

    def __repr__(self) -> str:
        return (
            f"FitDesign(model={self.model_name!r}, N={self.n_obs}, "
            f"chi={self.chi:.4f}, df={self.df:g}, indep_chi={self.indep_chi:.4f}, "
            f"indep_df={self.indep_df:g})"
        )
