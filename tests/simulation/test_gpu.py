"""
Tests for the GPU simulation backend.

The GPU backend draws a different random stream from the CPU backend, so
these tests check domains, reproducibility on one device and agreement in
distribution rather than equality with CPU output.

Skipped if no GPU (CUDA or MPS) is available.
"""

import numpy as np
import pytest

from pydgp.simulation import simulate, simulate_outcomes


@pytest.fixture
def gpu_available():
    """Skip if no GPU is available."""
    try:
        import torch
        has_cuda = torch.cuda.is_available()
        has_mps = hasattr(torch.backends, 'mps') and torch.backends.mps.is_available()
        if not (has_cuda or has_mps):
            pytest.skip("No GPU available")
        return 'cuda' if has_cuda else 'mps'
    except ImportError:
        pytest.skip("PyTorch not installed")


class TestGPUSimulate:

    def test_backend_name(self, gpu_available):
        data = simulate(42, 100, backend='gpu')
        assert data.backend_name == f'gpu_{gpu_available}_poisson_dgp'
        assert data.info['device'] == gpu_available

    def test_domains(self, gpu_available):
        data = simulate(42, 1000, backend='gpu')
        assert data.outcome.shape == (1000,)
        assert set(np.unique(data.indicator)) <= {0, 1}
        assert np.all(data.count_covariate >= 0)
        assert np.all(data.outcome >= 0)
        assert data.outcome.dtype == np.int64

    def test_parameters_match_cpu(self, gpu_available):
        """Parameters are drawn on the host, so both backends agree on them."""
        cpu = simulate(42, 10, backend='cpu')
        gpu = simulate(42, 10, backend='gpu')
        assert cpu.params == gpu.params

    def test_reproducible_on_device(self, gpu_available):
        a = simulate(7, 500, backend='gpu')
        b = simulate(7, 500, backend='gpu')
        np.testing.assert_array_equal(a.outcome, b.outcome)
        np.testing.assert_array_equal(a.count_covariate, b.count_covariate)

    def test_covariate_moments(self, gpu_available):
        data = simulate(3, 50_000, mean_count_rate=8.0, backend='gpu')
        assert np.mean(data.log_area) == pytest.approx(1.5, abs=0.005)
        assert np.mean(data.indicator) == pytest.approx(0.5, abs=0.02)
        assert np.mean(data.count_covariate) == pytest.approx(8.0, abs=0.1)

    def test_poisson_mean_rate_identity(self, gpu_available):
        data = simulate(2024, 100_000, backend='gpu')
        assert data.outcome.sum() / data.rate.sum() == pytest.approx(1.0, abs=0.02)

    def test_mps_float32_warning(self, gpu_available):
        if gpu_available != 'mps':
            pytest.skip("float32 warning is MPS only")
        data = simulate(1, 10, backend='gpu')
        assert any('float32' in w for w in data.warnings)


class TestGPUSimulateOutcomes:

    def test_covariates_preserved(self, gpu_available, fixed_covariates):
        data = simulate_outcomes(1, **fixed_covariates, backend='gpu')
        np.testing.assert_array_equal(data.indicator, fixed_covariates['indicator'])
        np.testing.assert_array_equal(
            data.count_covariate, fixed_covariates['count_covariate']
        )
        assert data.outcome.shape == (50,)
