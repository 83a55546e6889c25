"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def cov3():
    """Well-conditioned 3x3 covariance with distinct correlations."""
    return np.array([
        [2.0, 0.6, 0.3],
        [0.6, 1.5, 0.4],
        [0.3, 0.4, 1.0],
    ])


@pytest.fixture
def mean3():
    return np.array([1.0, -0.5, 2.0])


@pytest.fixture
def one_factor():
    """
    One-factor RAM model: F -> x1, x2, x3 with unit factor variance.

    Implied manifest covariance is lambda lambda' + diag(theta).
    """
    loadings = np.array([0.8, 0.6, 0.7])
    theta = np.array([0.36, 0.64, 0.51])
    A = np.zeros((4, 4))
    A[:3, 3] = loadings
    S = np.diag(np.append(theta, 1.0))
    return {
        'A': A,
        'S': S,
        'loadings': loadings,
        'theta': theta,
        'manifest_vars': ['x1', 'x2', 'x3'],
        'latent_vars': ['F'],
    }


@pytest.fixture
def mvn_data(rng, cov3, mean3):
    """200 draws from N(mean3, cov3)."""
    return rng.multivariate_normal(mean3, cov3, size=200)
