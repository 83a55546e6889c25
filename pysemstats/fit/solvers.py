"""
Solver dispatch for fit statistics.

Public API:
    fit_indices(model, independence, ...) -> FitIndicesSolution
    rmsea(chi, df, n_obs, ...) -> RMSEASolution
    loglik(summary) -> LogLik
    compare_models(base, comparison) -> ComparisonSolution
    residual_correlations(observed_cov, implied_cov) -> ndarray
    saturated_models(data) -> SaturatedLikelihoods
"""

import warnings
from collections.abc import Mapping

import numpy as np
from scipy import stats

from pysemstats.core.compute.linalg import cov2cor
from pysemstats.core.compute.timing import Timer
from pysemstats.core.config import (
    Tolerances,
    DEFAULT_TOLERANCES,
    RMSEASearch,
    DEFAULT_RMSEA_SEARCH,
)
from pysemstats.core.exceptions import (
    CIUnavailableError,
    DimensionError,
    ValidationError,
)
from pysemstats.core.result import Result
from pysemstats.core.validation import check_array, check_square, check_finite
from pysemstats.fit._indices import compute_indices, rmsea_point
from pysemstats.fit._rmsea import solve_ncp, format_rmsea_text
from pysemstats.fit._saturated import SaturatedLikelihoods, saturated_likelihoods
from pysemstats.fit.design import FitDesign, ModelSummary, _as_summary
from pysemstats.fit.solution import (
    FitIndicesParams,
    FitIndicesSolution,
    RMSEASolution,
    LogLik,
    ComparisonRow,
    ComparisonSolution,
)


def fit_indices(
    model,
    independence=None,
    *,
    observed_cov=None,
    implied_cov=None,
    ram=None,
    n_manifest: int | None = None,
    n_latent: int | None = None,
    rmsea_ci: bool = False,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
    search: RMSEASearch = DEFAULT_RMSEA_SEARCH,
) -> FitIndicesSolution:
    """
    Compute the standard SEM fit indices.

    Accepts EITHER:
        1. A FitDesign (all other data arguments ignored)
        2. Model and independence summaries plus covariances

    Parameters
    ----------
    model : FitDesign, ModelSummary, or mapping
        Fitted model summary (sample size, parameter count, Chi, df,
        -2LL).
    independence : ModelSummary or mapping
        Baseline (independence) model summary.
    observed_cov : array-like
        Observed manifest covariance.
    implied_cov : array-like, optional
        Model-implied manifest covariance; derived from ``ram`` if omitted.
    ram : RAMModel or mapping, optional
        RAM matrices of the fitted model.
    n_manifest, n_latent : int, optional
        Variable counts; see FitDesign.from_summaries.
    rmsea_ci : bool
        Also compute the RMSEA confidence interval.
    tolerances : Tolerances
        Singularity threshold for the implied correlation matrix.
    search : RMSEASearch
        Bracket settings for the RMSEA interval.

    Returns
    -------
    FitIndicesSolution

    Raises
    ------
    SingularCorrelationError
        If the model-implied correlation matrix cannot be inverted.

    Examples
    --------
    >>> fit = fit_indices(m1_summary, indep_summary,
    ...                   observed_cov=S, implied_cov=Sigma_hat)
    >>> fit['CFI'], fit['RMSEA']
    >>> print(fit.report_line())
    """
    timer = Timer()
    timer.start()
    warnings_list: list[str] = []

    with timer.section('design'):
        if isinstance(model, FitDesign):
            design = model
        else:
            if independence is None:
                raise ValidationError("an independence model summary is required")
            if observed_cov is None:
                raise ValidationError("observed_cov is required")
            design = FitDesign.from_summaries(
                model,
                independence,
                observed_cov=observed_cov,
                implied_cov=implied_cov,
                ram=ram,
                n_manifest=n_manifest,
                n_latent=n_latent,
                tolerances=tolerances,
            )

    with timer.section('indices'):
        indices = compute_indices(design, tolerances)

    ci = None
    if rmsea_ci:
        with timer.section('rmsea_ci'):
            ci = rmsea(design.chi, design.df, design.n_obs, search=search)
        warnings_list.extend(ci.warnings)

    undefined = [name for name, value in indices.items() if np.isnan(value)]
    timer.stop()

    return FitIndicesSolution(
        _result=Result(
            params=FitIndicesParams(indices=indices, rmsea_ci=ci),
            info={
                'n_indices': len(indices),
                'undefined_indices': undefined,
            },
            timing=timer.result(),
            backend_name='cpu_closed_form',
            warnings=tuple(warnings_list),
        ),
        _design=design,
    )


def rmsea(
    chi: float,
    df: float,
    n_obs: float,
    *,
    ci_lower: float = 0.05,
    ci_upper: float = 0.95,
    search: RMSEASearch = DEFAULT_RMSEA_SEARCH,
) -> RMSEASolution:
    """
    RMSEA and its confidence interval.

    The interval inverts the non-central chi-square CDF in lambda over
    ``[0, search.upper_bound(chi, n_obs)]``. A bound that cannot be
    bracketed is reported as NaN with a RuntimeWarning; the other bound
    and the point estimate are still returned. A saturated model
    (df <= 0) gets an all-NaN solution with a RuntimeWarning.

    Parameters
    ----------
    chi, df, n_obs : float
        Model chi-square, degrees of freedom, sample size.
    ci_lower, ci_upper : float
        CDF levels defining the interval (default: 90% CI).
    search : RMSEASearch
        Search bracket heuristic and root-finder settings.

    Returns
    -------
    RMSEASolution
    """
    if not (0.0 < ci_lower < ci_upper < 1.0):
        raise ValidationError(
            f"need 0 < ci_lower < ci_upper < 1, got {ci_lower}, {ci_upper}"
        )

    nan = float('nan')
    if chi is None or np.isnan(chi):
        return RMSEASolution(
            rmsea=nan, lower=nan, upper=nan,
            ci_lower=ci_lower, ci_upper=ci_upper,
            text=format_rmsea_text(nan, nan, nan, ci_upper),
        )
    if n_obs <= 0:
        raise ValidationError(f"RMSEA needs positive n_obs, got n_obs={n_obs}")
    if df <= 0:
        msg = f"RMSEA is undefined for a model with df={df:g}"
        warnings.warn(msg, RuntimeWarning, stacklevel=2)
        return RMSEASolution(
            rmsea=nan, lower=nan, upper=nan,
            ci_lower=ci_lower, ci_upper=ci_upper,
            text=format_rmsea_text(nan, nan, nan, ci_upper),
            warnings=(msg,),
        )

    point = rmsea_point(chi, df, n_obs)
    upper_search = search.upper_bound(chi, n_obs)

    bounds = {}
    notes = []
    for bound, target in (('lower', ci_upper), ('upper', ci_lower)):
        try:
            lam = solve_ncp(chi, df, target, upper_search, bound, search)
            bounds[bound] = float(np.sqrt(lam / (n_obs * df)))
        except CIUnavailableError as e:
            warnings.warn(str(e), RuntimeWarning, stacklevel=2)
            notes.append(str(e))
            bounds[bound] = nan

    return RMSEASolution(
        rmsea=point,
        lower=bounds['lower'],
        upper=bounds['upper'],
        ci_lower=ci_lower,
        ci_upper=ci_upper,
        text=format_rmsea_text(point, bounds['lower'], bounds['upper'], ci_upper),
        warnings=tuple(notes),
    )


def loglik(summary) -> LogLik:
    """
    Log-likelihood of a fitted model, with AIC and BIC.

    Parameters
    ----------
    summary : ModelSummary or mapping
    """
    s = _as_summary(summary)
    return LogLik(value=-0.5 * s.minus2loglik, nobs=s.n_obs, df=s.n_parameters)


def _as_list(models) -> list[ModelSummary]:
    if isinstance(models, (ModelSummary, Mapping)):
        return [_as_summary(models)]
    return [_as_summary(m) for m in models]


def compare_models(
    base,
    comparison=None,
    *,
    digits: int = 3,
) -> ComparisonSolution:
    """
    Likelihood-ratio comparison of nested models.

    Every base model is compared with every comparison model:
    Δ -2LL = -2LL_comparison - -2LL_base, Δ df = df_comparison - df_base,
    p = P(χ²(Δ df) > Δ -2LL).

    Parameters
    ----------
    base : ModelSummary, mapping, or sequence of them
    comparison : ModelSummary, mapping, or sequence of them, optional
        Without comparisons, only the base models' own lines are reported.
    digits : int
        Rounding used by summary() and narrative().
    """
    if base is None:
        raise ValidationError("at least one base model is required")
    bases = _as_list(base)
    comparisons = _as_list(comparison) if comparison is not None else []

    nan = float('nan')
    rows = []
    for b in bases:
        rows.append(ComparisonRow(
            base=b.name, comparison=None, ep=b.n_parameters,
            minus2loglik=b.minus2loglik, df=b.df,
            aic=b.minus2loglik - 2 * b.df,
            diff_m2ll=nan, diff_df=nan, p=nan,
        ))
        for c in comparisons:
            diff = c.minus2loglik - b.minus2loglik
            ddf = c.df - b.df
            p = float(stats.chi2.sf(diff, ddf)) if ddf > 0 else nan
            rows.append(ComparisonRow(
                base=b.name, comparison=c.name, ep=c.n_parameters,
                minus2loglik=c.minus2loglik, df=c.df,
                aic=c.minus2loglik - 2 * c.df,
                diff_m2ll=diff, diff_df=ddf, p=p,
            ))
    return ComparisonSolution(rows=rows, digits=digits)


def residual_correlations(
    observed_cov,
    implied_cov,
    *,
    suppress: float | None = None,
) -> np.ndarray:
    """
    Observed minus implied correlation.

    Parameters
    ----------
    observed_cov, implied_cov : array-like, shape (p, p)
    suppress : float, optional
        Residuals with absolute value below this are set to zero.
    """
    observed = check_array(observed_cov, 'observed_cov')
    implied = check_array(implied_cov, 'implied_cov')
    for arr, name in ((observed, 'observed_cov'), (implied, 'implied_cov')):
        check_square(arr, name)
        check_finite(arr, name)
    if observed.shape != implied.shape:
        raise DimensionError(
            f"observed_cov {observed.shape} and implied_cov {implied.shape} differ"
        )
    resid = cov2cor(observed) - cov2cor(implied)
    if suppress is not None:
        resid = np.where(np.abs(resid) < suppress, 0.0, resid)
    return resid


def saturated_models(
    data,
    *,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> SaturatedLikelihoods:
    """
    Closed-form saturated and independence models for complete raw data.

    Returns
    -------
    SaturatedLikelihoods
        Use ``independence_summary()`` as the baseline for fit_indices and
        ``chi_for(minus2loglik)`` to turn a model's -2LL into its Chi.
    """
    return saturated_likelihoods(data, tolerances)
