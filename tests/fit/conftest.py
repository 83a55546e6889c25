"""Shared fixtures for fit-statistics tests."""

import numpy as np
import pytest

from pysemstats.fit import ModelSummary


@pytest.fixture
def loadings4():
    return np.array([0.8, 0.7, 0.6, 0.5])


@pytest.fixture
def implied4(loadings4):
    """One-factor implied covariance with unit manifest variances."""
    return np.outer(loadings4, loadings4) + np.diag(1 - loadings4 ** 2)


@pytest.fixture
def observed4(implied4):
    """implied4 with a small symmetric misfit."""
    misfit = np.zeros((4, 4))
    misfit[0, 3] = misfit[3, 0] = 0.08
    misfit[1, 2] = misfit[2, 1] = -0.05
    return implied4 + misfit


@pytest.fixture
def model_summary():
    return ModelSummary(
        n_obs=200, n_parameters=8, chi=12.0, df=2.0,
        minus2loglik=1500.0, name='one_factor',
    )


@pytest.fixture
def indep_summary():
    return ModelSummary(
        n_obs=200, n_parameters=4, chi=250.0, df=6.0,
        minus2loglik=1738.0, name='independence',
    )
