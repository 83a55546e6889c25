"""
Generic result container for PySemStats computations.

Every batch computation returns its payload inside this envelope so
timing, warnings and metadata are reported the same way everywhere.

Design decisions:
    - Generic over parameter payload P
    - info dict for flexible metadata (pattern counts, search bounds)
    - timing is optional (don't burden unit tests)
    - Immutable (frozen=True) for reproducibility
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (conditional moments, fit indices)
        info: Structured metadata
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the routine that produced this result
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=ConditionalParams(means=means, covs=None, names=names),
        ...     info={'n_patterns': 3},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_schur'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
