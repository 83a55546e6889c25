"""
Core infrastructure for PySemStats.

Shared abstractions used by the conditional, ram and fit submodules.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    config: Tolerances and search heuristics
    compute: Timing
"""

from pysemstats.core.result import Result
from pysemstats.core.config import (
    Tolerances,
    DEFAULT_TOLERANCES,
    RMSEASearch,
    DEFAULT_RMSEA_SEARCH,
)
from pysemstats.core.exceptions import (
    PySemStatsError,
    ValidationError,
    DimensionError,
    NameMismatchError,
    InvalidInputError,
    NumericalError,
    SingularMatrixError,
    SingularCovarianceError,
    SingularCorrelationError,
    CIUnavailableError,
)

__all__ = [
    # Result
    "Result",
    # Config
    "Tolerances",
    "DEFAULT_TOLERANCES",
    "RMSEASearch",
    "DEFAULT_RMSEA_SEARCH",
    # Exceptions
    "PySemStatsError",
    "ValidationError",
    "DimensionError",
    "NameMismatchError",
    "InvalidInputError",
    "NumericalError",
    "SingularMatrixError",
    "SingularCovarianceError",
    "SingularCorrelationError",
    "CIUnavailableError",
]
