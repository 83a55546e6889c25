"""
RAMModel: reticular action model matrices of a fitted SEM.

The external fitting engine hands back its estimates in one of several
shapes. ``normalize_model`` turns each of them into a RAMModel before
any computation sees the data, so the numerics never branch on where
the matrices came from.

Variable order of the A and S matrices is ``manifest_vars + latent_vars``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pysemstats.core.compute.linalg import guarded_inverse
from pysemstats.core.exceptions import ValidationError, DimensionError
from pysemstats.core.validation import (
    check_array,
    check_finite,
    check_square,
    check_2d,
    check_unique_names,
)

if TYPE_CHECKING:
    import pandas as pd


@dataclass(frozen=True)
class RAMModel:
    """
    RAM specification of a fitted structural equation model.

    Attributes:
        A: Asymmetric (directed) path matrix, shape (v, v); A[i, j] is
            the path from variable j to variable i
        S: Symmetric (variance/covariance) path matrix, shape (v, v)
        F: Filter matrix selecting manifests, shape (n_manifest, v)
        M: Means row, shape (v,), or None for a model without means
        manifest_vars: Names of observed variables
        latent_vars: Names of latent variables
        name: Model name used in reports
    """
    A: NDArray[np.floating[Any]]
    S: NDArray[np.floating[Any]]
    F: NDArray[np.floating[Any]]
    M: NDArray[np.floating[Any]] | None
    manifest_vars: tuple[str, ...]
    latent_vars: tuple[str, ...]
    name: str = 'model'

    @classmethod
    def from_matrices(
        cls,
        A,
        S,
        F=None,
        M=None,
        *,
        manifest_vars: Sequence[str],
        latent_vars: Sequence[str] = (),
        name: str = 'model',
    ) -> RAMModel:
        """
        Build and validate a RAMModel.

        Parameters
        ----------
        A, S : array-like, shape (v, v)
        F : array-like, shape (n_manifest, v), optional
            Defaults to ``[I | 0]``, selecting the leading manifests.
        M : array-like, shape (v,) or (1, v), optional
        manifest_vars, latent_vars : sequence of str
        name : str
        """
        manifest = tuple(str(v) for v in manifest_vars)
        latent = tuple(str(v) for v in latent_vars)
        variables = manifest + latent
        check_unique_names(variables, 'manifest_vars + latent_vars')
        v = len(variables)

        A_arr = check_array(A, 'A')
        S_arr = check_array(S, 'S')
        for arr, label in ((A_arr, 'A'), (S_arr, 'S')):
            check_square(arr, label)
            check_finite(arr, label)
            if arr.shape[0] != v:
                raise DimensionError(
                    f"{label} is {arr.shape[0]}x{arr.shape[1]} but there are "
                    f"{v} variables ({len(manifest)} manifest, {len(latent)} latent)"
                )

        if F is None:
            F_arr = np.hstack([np.eye(len(manifest)), np.zeros((len(manifest), len(latent)))])
        else:
            F_arr = check_array(F, 'F')
            check_2d(F_arr, 'F')
            if F_arr.shape != (len(manifest), v):
                raise DimensionError(
                    f"F has shape {F_arr.shape}, expected ({len(manifest)}, {v})"
                )

        M_arr = None
        if M is not None:
            M_arr = check_array(M, 'M').ravel()
            if M_arr.size == 1 and np.isnan(M_arr[0]):
                M_arr = None
            elif M_arr.shape[0] != v:
                raise DimensionError(f"M has length {M_arr.shape[0]}, expected {v}")
            else:
                check_finite(M_arr, 'M')

        return cls(
            A=A_arr, S=S_arr, F=F_arr, M=M_arr,
            manifest_vars=manifest, latent_vars=latent, name=name,
        )

    @property
    def variables(self) -> tuple[str, ...]:
        """All variable names in matrix order."""
        return self.manifest_vars + self.latent_vars

    @property
    def n_manifest(self) -> int:
        return len(self.manifest_vars)

    @property
    def n_latent(self) -> int:
        return len(self.latent_vars)

    @property
    def has_means(self) -> bool:
        return self.M is not None

    def _total_effects(self) -> NDArray[np.floating[Any]]:
        """Z = (I - A)^{-1}."""
        I = np.eye(self.A.shape[0])
        return guarded_inverse(I - self.A, 'I - A')

    def expected_moments(self) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]]]:
        """
        Model-implied mean and covariance over all variables.

        Returns
        -------
        mean : ndarray, shape (v,)
            ``Z M'``, or zeros when the model has no means.
        cov : ndarray, shape (v, v)
            ``Z S Z'``.
        """
        Z = self._total_effects()
        cov = Z @ self.S @ Z.T
        cov = (cov + cov.T) / 2
        if self.M is None:
            mean = np.zeros(cov.shape[0])
        else:
            mean = Z @ self.M
        return mean, cov

    def implied_manifest_cov(self) -> NDArray[np.floating[Any]]:
        """Model-implied covariance of the manifests, ``F Z S Z' F'``."""
        _, cov = self.expected_moments()
        return self.F @ cov @ self.F.T

    def expected_cov(
        self,
        latent: bool = True,
        manifest: bool = True,
        digits: int | None = None,
    ) -> 'pd.DataFrame':
        """
        Model-implied covariance of the selected variables.

        Latents come first, then manifests.

        Args:
            latent: Include latent variables
            manifest: Include manifest variables
            digits: Round to this many decimals; None leaves values as is

        Returns:
            Labelled pandas DataFrame
        """
        import pandas as pd

        _, cov = self.expected_moments()
        selected = []
        if latent:
            selected.extend(self.latent_vars)
        if manifest:
            selected.extend(self.manifest_vars)
        idx = [self.variables.index(v) for v in selected]
        block = cov[np.ix_(idx, idx)]
        if digits is not None:
            block = np.round(block, digits)
        return pd.DataFrame(block, index=selected, columns=selected)

    def __repr__(self) -> str:
        return (
            f"RAMModel(name={self.name!r}, n_manifest={self.n_manifest}, "
            f"n_latent={self.n_latent}, has_means={self.has_means})"
        )


def _first(mapping: Mapping, *keys, default=None):
    for key in keys:
        if key in mapping:
            return mapping[key]
    return default


def normalize_model(obj) -> RAMModel:
    """
    Extract a RAMModel from whichever representation the engine returned.

    Accepted forms:
        - A RAMModel (returned unchanged)
        - Expectation style: ``{'expectation': {'A', 'S', 'F', 'M'},
          'manifest_vars': [...], 'latent_vars': [...], 'name': ...}``
        - Objective style: the same with ``'objective'`` in place of
          ``'expectation'``
        - Flat style: ``{'A', 'S', 'F', 'M', 'manifestVars',
          'latentVars'}``; camelCase and snake_case keys both work

    Raises
    ------
    ValidationError
        If the object is none of the above or lacks A or S.
    """
    if isinstance(obj, RAMModel):
        return obj

    if not isinstance(obj, Mapping):
        raise ValidationError(
            f"cannot extract RAM matrices from {type(obj).__name__}; expected "
            f"a RAMModel or a mapping with 'A' and 'S'"
        )

    matrices = _first(obj, 'expectation', 'objective', default=obj)
    if not isinstance(matrices, Mapping):
        raise ValidationError(
            f"model expectation must be a mapping of matrices, got "
            f"{type(matrices).__name__}"
        )

    absent = [k for k in ('A', 'S') if k not in matrices]
    if absent:
        raise ValidationError(f"model is not a RAM model: missing matrices {absent}")

    manifest = _first(obj, 'manifest_vars', 'manifestVars')
    if manifest is None:
        raise ValidationError("model has no manifest variable names")
    latent = _first(obj, 'latent_vars', 'latentVars', default=())

    return RAMModel.from_matrices(
        matrices['A'],
        matrices['S'],
        matrices.get('F'),
        matrices.get('M'),
        manifest_vars=list(manifest),
        latent_vars=list(latent),
        name=str(_first(obj, 'name', default='model')),
    )
