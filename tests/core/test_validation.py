"""
Tests for input validators and guarded inversion.
"""

import numpy as np
import pandas as pd
import pytest

from pysemstats.core.compute.linalg import guarded_inverse, cov2cor
from pysemstats.core.config import ROUNDED_INPUT_TOLERANCES, RMSEASearch
from pysemstats.core.exceptions import (
    DimensionError,
    InvalidInputError,
    SingularCovarianceError,
    SingularMatrixError,
    ValidationError,
)
from pysemstats.core.validation import (
    check_array,
    check_finite,
    check_square,
    check_symmetric,
    check_unique_names,
    check_same_names,
    check_min_samples,
)


# =====================================================================
# check_array
# =====================================================================

class TestCheckArray:

    def test_int_converted_to_float(self):
        out = check_array([[1, 2], [3, 4]], 'x')
        assert out.dtype == np.float64

    def test_pandas_values(self):
        out = check_array(pd.Series([1.0, 2.0]), 'x')
        np.testing.assert_array_equal(out, [1.0, 2.0])

    def test_none_becomes_nan(self):
        out = check_array([1.0, None, 3.0], 'row')
        assert np.isnan(out[1])
        assert out[0] == 1.0

    def test_strings_rejected(self):
        with pytest.raises(ValidationError):
            check_array(['a', 'b'], 'x')


# =====================================================================
# Shape, finiteness, symmetry, names
# =====================================================================

class TestChecks:

    def test_check_finite(self):
        with pytest.raises(InvalidInputError, match="1 NaN"):
            check_finite(np.array([1.0, np.nan]), 'mean')

    def test_check_square(self):
        with pytest.raises(DimensionError, match="square"):
            check_square(np.zeros((2, 3)), 'cov')

    def test_check_square_1d(self):
        with pytest.raises(DimensionError):
            check_square(np.zeros(3), 'cov')

    def test_check_symmetric_rejects(self):
        with pytest.raises(InvalidInputError, match="not symmetric"):
            check_symmetric(np.array([[1.0, 0.5], [0.4, 1.0]]), 'cov')

    def test_rounded_tolerance_accepts_small_asymmetry(self):
        m = np.array([[1.0, 0.50001], [0.5, 1.0]])
        check_symmetric(m, 'cov', ROUNDED_INPUT_TOLERANCES)

    def test_unique_names(self):
        with pytest.raises(DimensionError, match="duplicated"):
            check_unique_names(['a', 'b', 'a'], 'names')

    def test_same_names_reports_both_sides(self):
        with pytest.raises(DimensionError, match="unexpected: \\['z'\\]"):
            check_same_names(['a', 'z'], ['a', 'b'], 'row')

    def test_same_names_order_ignored(self):
        check_same_names(['b', 'a'], ['a', 'b'], 'row')

    def test_min_samples(self):
        with pytest.raises(ValidationError, match="at least 2"):
            check_min_samples(np.zeros((1, 3)), 2, 'data')


# =====================================================================
# Linear algebra helpers
# =====================================================================

class TestGuardedInverse:

    def test_inverse(self, cov3):
        inv = guarded_inverse(cov3, 'cov3')
        np.testing.assert_allclose(inv @ cov3, np.eye(3), atol=1e-12)

    def test_singular_raises_requested_class(self):
        m = np.array([[1.0, 1.0], [1.0, 1.0]])
        with pytest.raises(SingularCovarianceError) as exc_info:
            guarded_inverse(m, 'Sigma_oo', error_cls=SingularCovarianceError)
        assert exc_info.value.matrix_name == 'Sigma_oo'

    def test_ill_conditioned_rejected(self):
        m = np.diag([1.0, 1e-14])
        with pytest.raises(SingularMatrixError):
            guarded_inverse(m, 'm')


class TestCov2Cor:

    def test_unit_diagonal(self, cov3):
        r = cov2cor(cov3)
        np.testing.assert_allclose(np.diag(r), 1.0)
        np.testing.assert_allclose(r[0, 1], 0.6 / np.sqrt(2.0 * 1.5))

    def test_zero_variance_nan(self):
        r = cov2cor(np.array([[1.0, 0.0], [0.0, 0.0]]))
        assert np.isnan(r[1, 1])


class TestRMSEASearch:

    def test_upper_bound_floor(self):
        assert RMSEASearch().upper_bound(10.0, 500) == 500

    def test_upper_bound_multiplier(self):
        assert RMSEASearch().upper_bound(300.0, 500) == 1200.0
