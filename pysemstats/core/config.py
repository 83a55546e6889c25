"""
Numerical tolerances and search heuristics.

All thresholds used to decide "symmetric", "numerically singular" or
where to search for an RMSEA confidence bound live here as frozen
dataclasses. Callers pass alternative instances as keyword arguments;
there is no global mutable state.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Tolerances:
    """Tolerance specification for matrix checks."""
    symmetry_rtol: float
    symmetry_atol: float
    condition_threshold: float
    name: str
    description: str


# Default: float64 arithmetic on well-scaled covariance matrices
DEFAULT_TOLERANCES = Tolerances(
    symmetry_rtol=1e-8,
    symmetry_atol=1e-10,
    condition_threshold=1e12,
    name='fp64_default',
    description='double precision, reject cond > 1e12 as singular',
)

# Relaxed: covariance matrices rounded for reporting (e.g. 3 decimals)
ROUNDED_INPUT_TOLERANCES = Tolerances(
    symmetry_rtol=1e-4,
    symmetry_atol=1e-6,
    condition_threshold=1e12,
    name='fp64_rounded_input',
    description='double precision, rounded inputs',
)


@dataclass(frozen=True)
class RMSEASearch:
    """
    Bracket settings for the RMSEA confidence-interval root search.

    The non-centrality parameter is searched in
    ``[0, max(floor_factor * N, multiplier * Chi)]``. This bound is the
    lavaan heuristic; it has no derivation and can fail for extreme
    chi-square values, in which case the bound is reported as missing.
    """
    multiplier: float = 4.0
    floor_factor: float = 1.0
    xtol: float = 1e-12
    maxiter: int = 1000

    def upper_bound(self, chi: float, n_obs: float) -> float:
        """Upper end of the search bracket for the given Chi and N."""
        return max(self.floor_factor * n_obs, self.multiplier * chi)


DEFAULT_RMSEA_SEARCH = RMSEASearch()

# Conventional cut-offs used by one-line summaries
TLI_GOOD = 0.95
RMSEA_GOOD = 0.06
