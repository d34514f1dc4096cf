"""
pytest configuration and shared fixtures.
"""

import numpy as np
import pytest

from pydgp.simulation import simulate


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def small_data():
    """Five-unit dataset from seed 42."""
    return simulate(42, 5, 8.0)


@pytest.fixture
def large_data():
    """Dataset large enough for the reference fit to pin down the truth."""
    return simulate(20240101, 2000, 8.0)


@pytest.fixture
def fixed_covariates(rng):
    """Covariates drawn once, for the fixed-covariate entry point."""
    n = 50
    log_area = rng.normal(1.5, 0.1, size=n)
    indicator = rng.binomial(1, 0.5, size=n)
    count_covariate = rng.poisson(8.0, size=n)
    return {
        'log_area': log_area,
        'indicator': indicator,
        'count_covariate': count_covariate,
    }
