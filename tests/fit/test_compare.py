"""
Model comparison, log-likelihood and residual tests.
"""

from types import MappingProxyType

import numpy as np
import pandas as pd
import pytest
from scipy import stats

from pysemstats.core.exceptions import DimensionError, ValidationError
from pysemstats.fit import (
    compare_models,
    loglik,
    residual_correlations,
    format_pvalue,
    ModelSummary,
)


@pytest.fixture
def base():
    return ModelSummary(
        n_obs=300, n_parameters=12, chi=20.0, df=100.0,
        minus2loglik=1000.0, name='full',
    )


@pytest.fixture
def dropped_path():
    return ModelSummary(
        n_obs=300, n_parameters=10, chi=30.0, df=102.0,
        minus2loglik=1010.0, name='no_a',
    )


@pytest.fixture
def dropped_cov():
    return ModelSummary(
        n_obs=300, n_parameters=11, chi=21.0, df=101.0,
        minus2loglik=1001.0, name='no_rc',
    )


# =====================================================================
# Likelihood-ratio comparison
# =====================================================================

class TestCompareModels:

    def test_rows(self, base, dropped_path):
        comp = compare_models(base, dropped_path)
        assert len(comp.rows) == 2
        first, second = comp.rows
        assert first.comparison is None
        assert np.isnan(first.p)
        assert second.base == 'full'
        assert second.comparison == 'no_a'
        assert second.diff_m2ll == 10.0
        assert second.diff_df == 2.0
        assert second.ep == 10

    def test_p_value_matches_chi2(self, base, dropped_path):
        row = compare_models(base, dropped_path).rows[1]
        np.testing.assert_allclose(row.p, stats.chi2.sf(10.0, 2.0))
        np.testing.assert_allclose(row.p, np.exp(-5.0))

    def test_aic_uses_degrees_of_freedom(self, base, dropped_path):
        rows = compare_models(base, dropped_path).rows
        assert rows[0].aic == 1000.0 - 2 * 100
        assert rows[1].aic == 1010.0 - 2 * 102

    def test_several_comparisons(self, base, dropped_path, dropped_cov):
        comp = compare_models(base, [dropped_path, dropped_cov])
        assert [r.comparison for r in comp.rows] == [None, 'no_a', 'no_rc']

    def test_several_bases(self, base, dropped_path, dropped_cov):
        comp = compare_models([base, dropped_cov], dropped_path)
        assert len(comp.rows) == 4
        np.testing.assert_allclose(comp.rows[3].diff_m2ll, 9.0)

    def test_no_df_difference_gives_nan(self, base):
        same_df = ModelSummary(
            n_obs=300, n_parameters=12, chi=25.0, df=100.0,
            minus2loglik=1005.0, name='alt',
        )
        assert np.isnan(compare_models(base, same_df).rows[1].p)

    def test_base_only(self, base):
        comp = compare_models(base)
        assert len(comp.rows) == 1

    def test_base_required(self):
        with pytest.raises(ValidationError):
            compare_models(None)

    def test_mapping_inputs(self):
        comp = compare_models(
            {'numObs': 100, 'estimatedParameters': 5, 'Chi': 3.0,
             'degreesOfFreedom': 4, 'Minus2LogLikelihood': 500.0},
            {'numObs': 100, 'estimatedParameters': 4, 'Chi': 8.0,
             'degreesOfFreedom': 5, 'Minus2LogLikelihood': 505.0},
        )
        np.testing.assert_allclose(comp.rows[1].p, stats.chi2.sf(5.0, 1.0))

    def test_read_only_mapping_inputs(self):
        comp = compare_models(
            MappingProxyType({'numObs': 100, 'estimatedParameters': 5, 'Chi': 3.0,
                              'degreesOfFreedom': 4, 'Minus2LogLikelihood': 500.0}),
            MappingProxyType({'numObs': 100, 'estimatedParameters': 4, 'Chi': 8.0,
                              'degreesOfFreedom': 5, 'Minus2LogLikelihood': 505.0}),
        )
        assert len(comp.rows) == 2
        np.testing.assert_allclose(comp.rows[1].diff_m2ll, 5.0)


class TestComparisonReporting:

    def test_narrative_significant(self, base, dropped_path):
        sentences = compare_models(base, dropped_path).narrative()
        assert len(sentences) == 1
        assert "This caused a significant loss of fit" in sentences[0]
        assert "χ²(2) = 10, p = .007" in sentences[0]

    def test_narrative_not_significant(self, base, dropped_cov):
        sentence = compare_models(base, dropped_cov).narrative()[0]
        assert "did not lower fit significantly" in sentence

    def test_summary_table(self, base, dropped_path):
        text = compare_models(base, dropped_path).summary()
        assert "Compare with Model" in text
        assert "no_a" in text
        assert "= .007" in text

    def test_to_frame(self, base, dropped_path):
        frame = compare_models(base, dropped_path).to_frame()
        assert isinstance(frame, pd.DataFrame)
        assert list(frame['Comparison']) == ['full', 'no_a']
        assert frame.loc[1, 'Δ df'] == 2.0


# =====================================================================
# Log-likelihood
# =====================================================================

class TestLogLik:

    def test_values(self, base):
        ll = loglik(base)
        assert ll.value == -500.0
        assert float(ll) == -500.0
        assert ll.nobs == 300
        assert ll.df == 12
        np.testing.assert_allclose(ll.aic, 1000.0 + 24)
        np.testing.assert_allclose(ll.bic, 1000.0 + 12 * np.log(300))

    def test_repr(self, base):
        assert repr(loglik(base)) == "'log Lik.' -500.0000 (df=12)"


# =====================================================================
# Residual correlations
# =====================================================================

class TestResidualCorrelations:

    def test_zero_for_perfect_fit(self, implied4):
        resid = residual_correlations(implied4, implied4)
        np.testing.assert_array_equal(resid, np.zeros((4, 4)))

    def test_scale_free(self, observed4, implied4):
        scale = np.diag([2.0, 0.5, 3.0, 1.0])
        scaled = residual_correlations(scale @ observed4 @ scale, implied4)
        plain = residual_correlations(observed4, implied4)
        np.testing.assert_allclose(scaled, plain, atol=1e-12)

    def test_suppress(self, observed4, implied4):
        resid = residual_correlations(observed4, implied4, suppress=0.06)
        assert resid[0, 3] == pytest.approx(0.08)
        assert resid[1, 2] == 0.0

    def test_shape_mismatch(self, observed4):
        with pytest.raises(DimensionError):
            residual_correlations(observed4, np.eye(3))


# =====================================================================
# p-value formatting
# =====================================================================

class TestFormatPvalue:

    @pytest.mark.parametrize("p, expected", [
        (0.0001, "< .001"),
        (0.0424, "= .042"),
        (0.5, "= .500"),
        (1.0, "= 1.000"),
        (np.nan, "= NA"),
    ])
    def test_apa(self, p, expected):
        assert format_pvalue(p) == expected

    def test_custom_bound(self):
        assert format_pvalue(0.004, min_value=0.01, digits=2) == "< .01"
