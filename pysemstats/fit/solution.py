"""
Fit-index solution types.

FitIndicesSolution wraps Result[FitIndicesParams] and provides the
one-line fit report; RMSEASolution, LogLik and ComparisonSolution are
the smaller reporting payloads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

import numpy as np

from pysemstats.core.config import TLI_GOOD, RMSEA_GOOD
from pysemstats.core.result import Result

if TYPE_CHECKING:
    import pandas as pd
    from pysemstats.fit.design import FitDesign


def format_pvalue(p: float, min_value: float = 0.001, digits: int = 3) -> str:
    """
    Format a p-value in APA style.

    Leading zeros are dropped and values below ``min_value`` are
    reported as a bound: ``'< .001'``, ``'= .042'``.
    """
    if p is None or np.isnan(p):
        return '= NA'
    if p < min_value:
        bound = f"{min_value:g}"
        return f"< {bound[1:] if bound.startswith('0.') else bound}"
    value = f"{round(p, digits):.{digits}f}"
    if value.startswith('0.'):
        value = value[1:]
    return f"= {value}"


def _fmt(x: float, digits: int = 3) -> str:
    if x is None or np.isnan(x):
        return 'NA'
    return f"{round(x, digits):g}"


@dataclass(frozen=True)
class RMSEASolution:
    """
    RMSEA with its confidence interval.

    Attributes:
        rmsea: Point estimate
        lower: Lower bound, NaN if it could not be computed
        upper: Upper bound, NaN if it could not be computed
        ci_lower: Lower CDF level (default 0.05)
        ci_upper: Upper CDF level (default 0.95)
        text: One-line report
        warnings: Why a bound is missing, if one is
    """
    rmsea: float
    lower: float
    upper: float
    ci_lower: float
    ci_upper: float
    text: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def __repr__(self) -> str:
        return f"RMSEASolution({self.text})"


@dataclass(frozen=True)
class FitIndicesParams:
    """
    Parameter payload for the fit calculator.

    ``indices`` is insertion-ordered in the fixed report order.
    """
    indices: dict[str, float]
    rmsea_ci: RMSEASolution | None = None


@dataclass
class FitIndicesSolution:
    """
    User-facing fit indices.

    Behaves like a read-only ordered mapping from index name to value.
    NaN marks an index whose formula is undefined for these inputs.
    """
    _result: Result[FitIndicesParams]
    _design: 'FitDesign'

    def __getitem__(self, name: str) -> float:
        try:
            return self._result.params.indices[name]
        except KeyError:
            raise KeyError(
                f"unknown fit index {name!r}; available: {list(self.keys())}"
            ) from None

    def __contains__(self, name: str) -> bool:
        return name in self._result.params.indices

    def __iter__(self):
        return iter(self._result.params.indices)

    def __len__(self) -> int:
        return len(self._result.params.indices)

    def keys(self):
        return self._result.params.indices.keys()

    def items(self):
        return self._result.params.indices.items()

    @property
    def chi(self) -> float:
        return self['Chi']

    @property
    def df(self) -> float:
        return self['df']

    @property
    def p_value(self) -> float:
        return self['p.Chi']

    @property
    def cfi(self) -> float:
        return self['CFI']

    @property
    def tli(self) -> float:
        return self['NNFI.TLI']

    @property
    def rmsea(self) -> float:
        return self['RMSEA']

    @property
    def srmr(self) -> float:
        return self['SRMR']

    @property
    def rmsea_ci(self) -> RMSEASolution | None:
        return self._result.params.rmsea_ci

    @property
    def design(self) -> 'FitDesign':
        return self._design

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

    def to_dict(self) -> dict[str, float]:
        return dict(self._result.params.indices)

    def to_series(self) -> 'pd.Series':
        """Indices as a pandas Series in report order."""
        import pandas as pd
        return pd.Series(self.to_dict(), name=self._design.model_name)

    def quality_notes(self) -> list[str]:
        """Notes for indices outside conventional cut-offs (TLI > .95, RMSEA < .06)."""
        notes = []
        if np.isfinite(self.tli) and self.tli <= TLI_GOOD:
            notes.append("TLI is worse than desired")
        if np.isfinite(self.rmsea) and self.rmsea >= RMSEA_GOOD:
            notes.append("RMSEA is worse than desired")
        return notes

    def report_line(self) -> str:
        """
        APA-style one-line report.

        e.g. ``χ²(8) = 12.34, p = .137; CFI = 0.991; TLI = 0.983; RMSEA = 0.032``
        """
        if self.rmsea_ci is not None:
            rmsea_txt = self.rmsea_ci.text
        else:
            rmsea_txt = f"RMSEA = {_fmt(self.rmsea)}"
        return (
            f"χ²({self.df:g}) = {_fmt(self.chi, 2)}, "
            f"p {format_pvalue(self.p_value)}; "
            f"CFI = {_fmt(self.cfi)}; TLI = {_fmt(self.tli)}; {rmsea_txt}"
        )

    def summary(self) -> str:
        lines = [
            f"Fit Indices: {self._design.model_name}",
            "=" * 50,
            self.report_line(),
            "-" * 50,
        ]
        for name, value in self.items():
            lines.append(f"  {name:<10} {value:14.4f}")
        lines.append("-" * 50)
        lines.extend(self.quality_notes())
        if self.warnings:
            lines.append(f"Warnings: {len(self.warnings)}")
            for w in self.warnings:
                lines.append(f"  - {w}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"FitIndicesSolution(model={self._design.model_name!r}, "
            f"CFI={self.cfi:.3f}, TLI={self.tli:.3f}, RMSEA={self.rmsea:.3f})"
        )


@dataclass(frozen=True)
class LogLik:
    """
    Log-likelihood of a fitted model.

    Attributes:
        value: Log-likelihood, -0.5 * (-2LL)
        nobs: Sample size
        df: Number of estimated parameters
    """
    value: float
    nobs: int
    df: int

    @property
    def aic(self) -> float:
        return -2 * self.value + 2 * self.df

    @property
    def bic(self) -> float:
        return -2 * self.value + self.df * np.log(self.nobs)

    def __float__(self) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"'log Lik.' {self.value:.4f} (df={self.df})"


@dataclass(frozen=True)
class ComparisonRow:
    """
    One line of a model comparison table.

    ``comparison`` is None for the base model's own line, in which case
    the difference columns are NaN.
    """
    base: str
    comparison: str | None
    ep: int
    minus2loglik: float
    df: float
    aic: float
    diff_m2ll: float
    diff_df: float
    p: float


@dataclass
class ComparisonSolution:
    """
    Likelihood-ratio comparison of nested models.

    AIC here is -2LL - 2 df (degrees of freedom, not parameters), the
    convention of the fitting engine's comparison tables.
    """
    rows: list[ComparisonRow]
    digits: int = 3

    def to_frame(self) -> 'pd.DataFrame':
        import pandas as pd
        return pd.DataFrame(
            [
                {
                    'Comparison': r.comparison if r.comparison is not None else r.base,
                    'EP': r.ep,
                    'Δ -2LL': r.diff_m2ll,
                    'Δ df': r.diff_df,
                    'p': r.p,
                    'AIC': r.aic,
                    'Compare with Model': r.base,
                }
                for r in self.rows
            ]
        )

    def summary(self) -> str:
        header = (
            f"{'Comparison':<20} {'EP':>4} {'Δ -2LL':>10} {'Δ df':>6} "
            f"{'p':>9} {'AIC':>12}  Compare with Model"
        )
        lines = ["Model Comparison", "=" * len(header), header, "-" * len(header)]
        for r in self.rows:
            name = r.comparison if r.comparison is not None else r.base
            if r.comparison is None:
                diff, ddf, p = '', '', ''
            else:
                diff = f"{r.diff_m2ll:.{self.digits}f}"
                ddf = f"{r.diff_df:g}"
                p = format_pvalue(r.p, 10 ** -self.digits, self.digits)
            lines.append(
                f"{name:<20} {r.ep:>4} {diff:>10} {ddf:>6} {p:>9} "
                f"{r.aic:>12.{self.digits}f}  {r.base}"
            )
        return "\n".join(lines)

    def narrative(self, alpha: float = 0.05) -> list[str]:
        """One sentence per comparison, suitable for a results section."""
        sentences = []
        for r in self.rows:
            if r.comparison is None:
                continue
            if not np.isnan(r.p) and r.p < alpha:
                verdict = ". This caused a significant loss of fit "
            else:
                verdict = ". This did not lower fit significantly "
            sentences.append(
                f"The hypothesis that {r.comparison} was tested by dropping "
                f"{r.comparison} from {r.base}{verdict}"
                f"(χ²({r.diff_df:g}) = {round(r.diff_m2ll, 2):g}, "
                f"p {format_pvalue(r.p, 10 ** -self.digits, self.digits)})."
            )
        return sentences

    def __repr__(self) -> str:
        return f"ComparisonSolution(n_rows={len(self.rows)})"
