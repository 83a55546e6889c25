"""
Batch conditioning tests.

The batch driver groups rows by missingness pattern; its output must be
identical to conditioning each row on its own.
"""

import numpy as np
import pandas as pd
import pytest

from pysemstats.conditional import (
    condition,
    conditionals,
    identify_missingness_patterns,
)
from pysemstats.core.exceptions import DimensionError, InvalidInputError


@pytest.fixture
def holey_data(mvn_data, rng):
    """mvn_data with roughly 30% of values removed at random."""
    data = mvn_data.copy()
    data[rng.random(data.shape) < 0.3] = np.nan
    return data


# =====================================================================
# Equivalence with single-row conditioning
# =====================================================================

class TestBatchEqualsRowwise:

    def test_means(self, holey_data, mean3, cov3):
        batch = conditionals(holey_data, mean3, cov3)
        for i in range(holey_data.shape[0]):
            single = condition(mean3, cov3, holey_data[i])
            np.testing.assert_allclose(batch.means[i], single.mean, rtol=1e-12, atol=1e-12)

    def test_covs(self, holey_data, mean3, cov3):
        batch = conditionals(holey_data, mean3, cov3, return_cov=True)
        assert batch.covs.shape == (holey_data.shape[0], 3, 3)
        for i in range(0, holey_data.shape[0], 7):
            single = condition(mean3, cov3, holey_data[i], return_cov=True)
            np.testing.assert_allclose(batch.covs[i], single.cov, rtol=1e-12, atol=1e-12)

    def test_row_accessor(self, holey_data, mean3, cov3):
        batch = conditionals(holey_data, mean3, cov3, return_cov=True)
        single = condition(mean3, cov3, holey_data[3], return_cov=True)
        row = batch.row(3)
        np.testing.assert_allclose(row.mean, single.mean)
        np.testing.assert_allclose(row.cov, single.cov)
        np.testing.assert_array_equal(row.observed, ~np.isnan(holey_data[3]))

    def test_observed_values_unchanged(self, holey_data, mean3, cov3):
        batch = conditionals(holey_data, mean3, cov3)
        mask = ~np.isnan(holey_data)
        np.testing.assert_array_equal(batch.means[mask], holey_data[mask])
        assert not np.any(np.isnan(batch.means))


# =====================================================================
# Solution object
# =====================================================================

class TestSolution:

    def test_info(self, mean3, cov3):
        data = np.array([
            [1.0, 2.0, 3.0],
            [np.nan, np.nan, np.nan],
            [1.0, np.nan, 3.0],
            [0.5, 0.5, 0.5],
        ])
        sol = conditionals(data, mean3, cov3)
        assert sol.n_rows == 4
        assert sol.n_patterns == 3
        assert sol.info['n_complete_rows'] == 2
        assert sol.info['n_empty_rows'] == 1
        assert sol.backend_name == 'cpu_schur'
        assert sol.covs is None
        np.testing.assert_array_equal(sol.means[1], mean3)

    def test_timing_sections(self, holey_data, mean3, cov3):
        sol = conditionals(holey_data, mean3, cov3)
        assert {'total_seconds', 'validation', 'patterns', 'schur'} <= set(sol.timing)

    def test_to_frame(self, holey_data, mean3, cov3):
        sol = conditionals(holey_data, mean3, cov3, names=['a', 'b', 'c'])
        frame = sol.to_frame()
        assert list(frame.columns) == ['a', 'b', 'c']
        assert frame.shape == holey_data.shape

    def test_summary(self, holey_data, mean3, cov3):
        text = conditionals(holey_data, mean3, cov3).summary()
        assert "Missingness patterns" in text
        assert "cpu_schur" in text

    def test_single_row_input(self, mean3, cov3):
        sol = conditionals([1.0, np.nan, 0.0], mean3, cov3)
        assert sol.means.shape == (1, 3)


# =====================================================================
# DataFrame input
# =====================================================================

class TestDataFrame:

    def test_columns_matched_by_name(self, holey_data, mean3, cov3):
        names = ['a', 'b', 'c']
        frame = pd.DataFrame(holey_data, columns=names)[['c', 'a', 'b']]
        from_frame = conditionals(frame, mean3, cov3, names=names)
        from_array = conditionals(holey_data, mean3, cov3, names=names)
        np.testing.assert_allclose(from_frame.means, from_array.means)

    def test_unknown_column(self, holey_data, mean3, cov3):
        frame = pd.DataFrame(holey_data, columns=['a', 'b', 'z'])
        with pytest.raises(DimensionError, match="z"):
            conditionals(frame, mean3, cov3, names=['a', 'b', 'c'])

    def test_wrong_column_count(self, mean3, cov3):
        with pytest.raises(DimensionError):
            conditionals(np.zeros((5, 2)), mean3, cov3)

    def test_inf_rejected(self, mean3, cov3):
        data = np.zeros((3, 3))
        data[1, 2] = -np.inf
        with pytest.raises(InvalidInputError):
            conditionals(data, mean3, cov3)


# =====================================================================
# Pattern grouping
# =====================================================================

class TestPatterns:

    def test_grouping_and_order(self):
        data = np.array([
            [1.0, np.nan, 3.0],
            [1.0, 2.0, 3.0],
            [4.0, np.nan, 6.0],
            [np.nan, np.nan, np.nan],
            [7.0, np.nan, 9.0],
        ])
        patterns = identify_missingness_patterns(data)
        assert [pt.n_rows for pt in patterns] == [3, 1, 1]
        first = patterns[0]
        np.testing.assert_array_equal(first.row_indices, [0, 2, 4])
        np.testing.assert_array_equal(first.observed_indices, [0, 2])
        np.testing.assert_array_equal(first.missing_indices, [1])
        # Ties keep first-appearance order
        np.testing.assert_array_equal(patterns[1].row_indices, [1])
        assert patterns[2].n_observed == 0

    def test_every_row_once(self, holey_data):
        patterns = identify_missingness_patterns(holey_data)
        rows = np.sort(np.concatenate([pt.row_indices for pt in patterns]))
        np.testing.assert_array_equal(rows, np.arange(holey_data.shape[0]))

    def test_empty(self):
        assert identify_missingness_patterns(np.empty((0, 3))) == []
