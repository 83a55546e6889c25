"""
Grouped descriptive statistics for one measured variable.

Public API:
    descriptives(data, measurevar, groupvars) -> DataFrame
"""

import numpy as np
from scipy import stats

from pysemstats.core.exceptions import ValidationError


def _group_stats(values, na_rm: bool) -> tuple[int, float, float]:
    """N, mean and Bessel-corrected sd of one group."""
    arr = np.asarray(values, dtype=np.float64)
    if na_rm:
        arr = arr[~np.isnan(arr)]
    n = arr.shape[0]
    if n == 0:
        return 0, float('nan'), float('nan')
    mean = float(np.mean(arr))
    sd = float(np.std(arr, ddof=1)) if n > 1 else float('nan')
    return n, mean, sd


def descriptives(
    data,
    measurevar: str,
    groupvars=None,
    na_rm: bool = False,
    conf_interval: float = 0.95,
):
    """
    Count, mean, sd, standard error and confidence half-width of a
    variable, overall or within each combination of grouping variables.

    Parameters
    ----------
    data : pandas DataFrame or mapping of columns
    measurevar : str
        Column to summarise. The mean column of the output takes this name.
    groupvars : str or sequence of str, optional
        Grouping columns. Groups are sorted; missing group labels form
        their own group.
    na_rm : bool
        Drop missing values before counting. Otherwise any missing value
        makes the group's mean and sd NaN and still counts towards N.
    conf_interval : float
        Coverage of the interval. ``ci`` is the half-width
        se * t(conf_interval/2 + 0.5, N - 1).

    Returns
    -------
    pandas DataFrame
        Columns: the grouping variables, then N, measurevar, sd, se, ci.
        One row per group.

    Raises
    ------
    ValidationError
        Unknown or non-numeric columns, or conf_interval outside (0, 1).

    Examples
    --------
    >>> descriptives(df, 'len', ['supp', 'dose'])
    """
    import pandas as pd

    if not (0.0 < conf_interval < 1.0):
        raise ValidationError(
            f"conf_interval must be in (0, 1), got {conf_interval}"
        )
    frame = data if isinstance(data, pd.DataFrame) else pd.DataFrame(data)

    if groupvars is None:
        groups = []
    elif isinstance(groupvars, str):
        groups = [groupvars]
    else:
        groups = list(groupvars)

    absent = [c for c in [measurevar, *groups] if c not in frame.columns]
    if absent:
        raise ValidationError(f"data has no columns {absent}")
    if measurevar in groups:
        raise ValidationError(f"{measurevar!r} is both measured and a grouping variable")
    if not pd.api.types.is_numeric_dtype(frame[measurevar]):
        raise ValidationError(
            f"{measurevar!r} must be numeric, got dtype {frame[measurevar].dtype}"
        )

    rows = []
    if groups:
        grouped = frame.groupby(groups, sort=True, dropna=False, observed=True)
        for key, part in grouped:
            if not isinstance(key, tuple):
                key = (key,)
            rows.append((*key, *_group_stats(part[measurevar], na_rm)))
    else:
        rows.append(_group_stats(frame[measurevar], na_rm))

    out = pd.DataFrame(rows, columns=[*groups, 'N', measurevar, 'sd'])
    out['se'] = out['sd'] / np.sqrt(out['N'])
    # t quantile is NaN for N < 2
    dof = (out['N'] - 1).to_numpy(dtype=np.float64)
    mult = np.full(dof.shape, np.nan)
    ok = dof > 0
    mult[ok] = stats.t.ppf(conf_interval / 2 + 0.5, dof[ok])
    out['ci'] = out['se'] * mult
    return out
