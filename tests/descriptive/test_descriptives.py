"""
Grouped descriptive statistics tests.

Checks N, mean, sd, standard error and t-based interval half-widths
against direct numpy/scipy calculations, with and without grouping and
missing values.
"""

import numpy as np
import pandas as pd
import pytest
from scipy import stats

from pysemstats.core.exceptions import ValidationError
from pysemstats.descriptive import descriptives


@pytest.fixture
def tooth():
    return pd.DataFrame({
        'supp': ['OJ', 'OJ', 'OJ', 'VC', 'VC', 'VC', 'VC'],
        'dose': [0.5, 0.5, 1.0, 0.5, 0.5, 1.0, 1.0],
        'len': [15.2, 21.5, 22.4, 4.2, 11.5, 16.5, 18.8],
    })


# =====================================================================
# Ungrouped
# =====================================================================

class TestUngrouped:

    def test_values(self, tooth):
        out = descriptives(tooth, 'len')
        x = tooth['len'].to_numpy()
        assert len(out) == 1
        assert out['N'].iloc[0] == 7
        np.testing.assert_allclose(out['len'].iloc[0], x.mean())
        np.testing.assert_allclose(out['sd'].iloc[0], x.std(ddof=1))
        np.testing.assert_allclose(out['se'].iloc[0], x.std(ddof=1) / np.sqrt(7))

    def test_columns(self, tooth):
        out = descriptives(tooth, 'len')
        assert list(out.columns) == ['N', 'len', 'sd', 'se', 'ci']

    def test_ci_multiplier(self, tooth):
        out = descriptives(tooth, 'len', conf_interval=0.90)
        mult = stats.t.ppf(0.95, 6)
        np.testing.assert_allclose(out['ci'].iloc[0], out['se'].iloc[0] * mult)

    def test_mapping_input(self):
        out = descriptives({'x': [1.0, 2.0, 3.0]}, 'x')
        np.testing.assert_allclose(out['x'].iloc[0], 2.0)
        np.testing.assert_allclose(out['sd'].iloc[0], 1.0)


# =====================================================================
# Grouped
# =====================================================================

class TestGrouped:

    def test_one_grouping_variable(self, tooth):
        out = descriptives(tooth, 'len', 'supp')
        assert list(out.columns) == ['supp', 'N', 'len', 'sd', 'se', 'ci']
        assert list(out['supp']) == ['OJ', 'VC']
        vc = tooth.loc[tooth['supp'] == 'VC', 'len'].to_numpy()
        row = out[out['supp'] == 'VC'].iloc[0]
        assert row['N'] == 4
        np.testing.assert_allclose(row['len'], vc.mean())
        np.testing.assert_allclose(row['sd'], vc.std(ddof=1))
        np.testing.assert_allclose(
            row['ci'], vc.std(ddof=1) / 2.0 * stats.t.ppf(0.975, 3)
        )

    def test_two_grouping_variables(self, tooth):
        out = descriptives(tooth, 'len', ['supp', 'dose'])
        assert len(out) == 4
        assert list(out.columns[:2]) == ['supp', 'dose']
        row = out[(out['supp'] == 'OJ') & (out['dose'] == 0.5)].iloc[0]
        assert row['N'] == 2
        np.testing.assert_allclose(row['len'], (15.2 + 21.5) / 2)

    def test_single_row_group_has_nan_spread(self, tooth):
        out = descriptives(tooth, 'len', ['supp', 'dose'])
        row = out[(out['supp'] == 'OJ') & (out['dose'] == 1.0)].iloc[0]
        assert row['N'] == 1
        np.testing.assert_allclose(row['len'], 22.4)
        assert np.isnan(row['sd'])
        assert np.isnan(row['ci'])


# =====================================================================
# Missing values
# =====================================================================

class TestMissing:

    @pytest.fixture
    def gappy(self):
        return pd.DataFrame({
            'g': ['a', 'a', 'a', 'b', 'b'],
            'y': [1.0, np.nan, 3.0, 4.0, 6.0],
        })

    def test_missing_propagates_by_default(self, gappy):
        out = descriptives(gappy, 'y', 'g')
        a = out[out['g'] == 'a'].iloc[0]
        assert a['N'] == 3
        assert np.isnan(a['y'])
        assert np.isnan(a['sd'])
        b = out[out['g'] == 'b'].iloc[0]
        np.testing.assert_allclose(b['y'], 5.0)

    def test_na_rm_drops_before_counting(self, gappy):
        out = descriptives(gappy, 'y', 'g', na_rm=True)
        a = out[out['g'] == 'a'].iloc[0]
        assert a['N'] == 2
        np.testing.assert_allclose(a['y'], 2.0)
        np.testing.assert_allclose(a['sd'], np.sqrt(2.0))
        np.testing.assert_allclose(a['se'], 1.0)
        np.testing.assert_allclose(a['ci'], stats.t.ppf(0.975, 1))


# =====================================================================
# Errors
# =====================================================================

class TestErrors:

    def test_unknown_measure(self, tooth):
        with pytest.raises(ValidationError, match="no columns"):
            descriptives(tooth, 'weight')

    def test_unknown_group(self, tooth):
        with pytest.raises(ValidationError, match="no columns"):
            descriptives(tooth, 'len', ['supp', 'site'])

    @pytest.mark.parametrize("level", [0.0, 1.0, 1.5])
    def test_conf_interval_out_of_range(self, tooth, level):
        with pytest.raises(ValidationError, match="conf_interval"):
            descriptives(tooth, 'len', conf_interval=level)

    def test_non_numeric_measure(self, tooth):
        with pytest.raises(ValidationError, match="numeric"):
            descriptives(tooth, 'supp')
