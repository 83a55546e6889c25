"""
Exception hierarchy for PySemStats.

All exceptions inherit from PySemStatsError so callers can catch any
library-specific error. Input problems derive from ValidationError,
numerical problems from NumericalError.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class PySemStatsError(Exception):
    """Base exception for all PySemStats errors."""
    pass


class ValidationError(PySemStatsError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Shapes or variable names are inconsistent.

    Raised when a mean vector, covariance matrix and data row do not
    describe the same set of variables: wrong lengths, duplicated names,
    or names present in one input but not another.
    """
    pass


class NameMismatchError(ValidationError):
    """
    An unnamed row cannot be mapped onto the model's variables.

    Raised when a row without names has a different length than the
    canonical variable list, so positional assignment is ambiguous.

    Attributes:
        n_values: Length of the supplied row
        n_names: Number of canonical variable names
    """

    def __init__(
        self,
        message: str,
        n_values: int | None = None,
        n_names: int | None = None,
    ):
        super().__init__(message)
        self.n_values = n_values
        self.n_names = n_names


class InvalidInputError(ValidationError):
    """
    Input contains values that cannot be used.

    Raised for NaN/Inf in means or covariances, non-symmetric covariance
    matrices, and similar garbage-in conditions.
    """
    pass


class NumericalError(PySemStatsError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        condition_number: Estimated condition number, if available
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number


class SingularCovarianceError(SingularMatrixError):
    """
    The observed-by-observed covariance block cannot be inverted.

    Typical cause: two perfectly collinear observed variables.
    """
    pass


class SingularCorrelationError(SingularMatrixError):
    """
    The model-implied correlation matrix cannot be inverted.

    GFI, AGFI and PGFI are undefined for such a model.
    """
    pass


class CIUnavailableError(NumericalError):
    """
    A confidence bound could not be bracketed by the root finder.

    Attributes:
        bound: Which bound failed ('lower' or 'upper')
        bracket: The (low, high) search interval that was tried
    """

    def __init__(
        self,
        message: str,
        bound: str | None = None,
        bracket: tuple[float, float] | None = None,
    ):
        super().__init__(message)
        self.bound = bound
        self.bracket = bracket
