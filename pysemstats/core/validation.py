"""
Input validation utilities for PySemStats.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from collections.abc import Sequence
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pysemstats.core.config import Tolerances, DEFAULT_TOLERANCES
from pysemstats.core.exceptions import (
    ValidationError,
    DimensionError,
    InvalidInputError,
)


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Accepts any array-like (including pandas objects, via .values) and
    rejects inputs that result in object or non-numeric dtype.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    if hasattr(array, 'values') and not isinstance(array, dict):
        array = array.values
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        # None is allowed as a missing marker in data rows
        try:
            result = np.array(
                [np.nan if v is None else v for v in result.ravel()],
                dtype=np.float64,
            ).reshape(result.shape)
        except (ValueError, TypeError) as e:
            raise ValidationError(
                f"{name}: converted to object dtype, indicating mixed types "
                f"or non-numeric data"
            ) from e

    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        InvalidInputError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise InvalidInputError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """
    Verify array has exactly the specified number of dimensions.

    Raises:
        DimensionError: If array has wrong number of dimensions
    """
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 1-dimensional."""
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array is 2-dimensional."""
    check_ndim(array, 2, name)


def check_square(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array is a square matrix.

    Raises:
        DimensionError: If array is not 2D or not square
    """
    check_2d(array, name)
    if array.shape[0] != array.shape[1]:
        raise DimensionError(
            f"{name}: expected square matrix, got shape {array.shape}"
        )


def check_symmetric(
    array: NDArray[np.floating[Any]],
    name: str,
    tolerances: Tolerances = DEFAULT_TOLERANCES,
) -> None:
    """
    Verify a square matrix is symmetric within tolerance.

    Raises:
        InvalidInputError: If the matrix differs from its transpose
    """
    if not np.allclose(
        array, array.T,
        rtol=tolerances.symmetry_rtol,
        atol=tolerances.symmetry_atol,
    ):
        max_diff = float(np.max(np.abs(array - array.T)))
        raise InvalidInputError(
            f"{name}: not symmetric (max |a_ij - a_ji| = {max_diff:.3e})"
        )


def check_unique_names(names: Sequence[str], name: str) -> None:
    """
    Verify a list of variable names has no duplicates.

    Raises:
        DimensionError: If any name occurs more than once
    """
    seen = set()
    dupes = []
    for n in names:
        if n in seen and n not in dupes:
            dupes.append(n)
        seen.add(n)
    if dupes:
        raise DimensionError(f"{name}: duplicated variable names {dupes}")


def check_same_names(
    names: Sequence[str],
    expected: Sequence[str],
    name: str,
) -> None:
    """
    Verify two name lists contain the same variables (order ignored).

    Raises:
        DimensionError: Listing names that are extra or absent
    """
    extra = [n for n in names if n not in set(expected)]
    absent = [n for n in expected if n not in set(names)]
    if extra or absent:
        raise DimensionError(
            f"{name}: variable names do not match (unexpected: {extra}, "
            f"absent: {absent})"
        )


def check_min_samples(array: NDArray[np.floating[Any]], min_samples: int, name: str) -> None:
    """
    Verify array has at least the minimum number of rows.

    Raises:
        ValidationError: If array has fewer than min_samples rows
    """
    n = array.shape[0]
    if n < min_samples:
        raise ValidationError(
            f"{name}: requires at least {min_samples} samples, got {n}"
        )
