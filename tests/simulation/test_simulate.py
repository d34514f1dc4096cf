"""
Tests for simulate(): fresh covariates and outcomes.

Covers array lengths and domains, seed reproducibility, the Poisson
mean-rate identity, boundaries (n=1, n=0) and argument validation.
"""

import math

import numpy as np
import pytest

from pydgp.core.compute.device import detect_gpu
from pydgp.core.exceptions import ValidationError
from pydgp.simulation import (
    CovariateModel,
    DGPSolution,
    NormalPrior,
    Priors,
    simulate,
)


PER_UNIT = ('log_area', 'indicator', 'count_covariate', 'outcome')


# ---------------------------------------------------------------------------
# Shapes and domains
# ---------------------------------------------------------------------------

class TestShapesAndDomains:

    @pytest.mark.parametrize("n", [1, 2, 5, 100, 1000])
    def test_all_arrays_have_length_n(self, n):
        data = simulate(0, n)
        assert data.n == n
        for name in PER_UNIT:
            assert getattr(data, name).shape == (n,), name
        assert data.rate.shape == (n,)

    def test_indicator_is_binary(self):
        data = simulate(1, 500)
        assert set(np.unique(data.indicator)) <= {0, 1}

    def test_counts_are_nonnegative_integers(self):
        data = simulate(2, 500)
        for arr in (data.count_covariate, data.outcome):
            assert np.issubdtype(arr.dtype, np.integer)
            assert np.all(arr >= 0)

    def test_dtypes(self):
        data = simulate(3, 10)
        assert data.log_area.dtype == np.float64
        assert data.indicator.dtype == np.int64
        assert data.count_covariate.dtype == np.int64
        assert data.outcome.dtype == np.int64

    def test_parameters_are_python_floats(self):
        data = simulate(4, 10)
        for value in (data.intercept, data.slope, data.indicator_slope):
            assert isinstance(value, float)

    def test_rate_strictly_positive(self):
        data = simulate(5, 1000)
        assert np.all(data.rate > 0)
        assert np.all(np.isfinite(data.rate))

    def test_rate_matches_linear_predictor(self):
        data = simulate(6, 200)
        expected = np.exp(
            data.intercept
            + data.log_area
            + data.slope * data.count_covariate
            + data.indicator_slope * data.indicator
        )
        np.testing.assert_allclose(data.rate, expected, rtol=1e-12)
        np.testing.assert_allclose(np.log(data.rate), data.linear_predictor, rtol=1e-12)

    def test_returns_solution(self):
        assert isinstance(simulate(7, 3), DGPSolution)


# ---------------------------------------------------------------------------
# Reproducibility
# ---------------------------------------------------------------------------

class TestReproducibility:

    def test_seed_42_n_5_scenario(self):
        """Seed 42, N=5, rate 8: five values per array, identical on rerun."""
        first = simulate(42, 5, 8)
        second = simulate(42, 5, 8)

        for name in PER_UNIT:
            assert getattr(first, name).shape == (5,)
            np.testing.assert_array_equal(getattr(first, name), getattr(second, name))
        assert first.params == second.params

    def test_generator_matches_integer_seed(self):
        a = simulate(np.random.default_rng(42), 20)
        b = simulate(42, 20)
        np.testing.assert_array_equal(a.outcome, b.outcome)
        assert a.params == b.params

    def test_generator_is_advanced(self):
        gen = np.random.default_rng(11)
        a = simulate(gen, 20)
        b = simulate(gen, 20)
        assert a.params != b.params

    def test_different_seeds_differ(self):
        a = simulate(42, 50)
        b = simulate(99, 50)
        assert a.params != b.params
        assert not np.array_equal(a.log_area, b.log_area)

    def test_no_global_state(self):
        """Seeding or drawing from numpy's legacy global RNG changes nothing."""
        np.random.seed(0)
        a = simulate(42, 20)
        np.random.seed(12345)
        np.random.random(100)
        b = simulate(42, 20)
        np.testing.assert_array_equal(a.outcome, b.outcome)


# ---------------------------------------------------------------------------
# Distributional sanity
# ---------------------------------------------------------------------------

class TestDistributions:

    def test_poisson_mean_rate_identity(self):
        """mean(outcome / rate) converges to 1 for large n."""
        data = simulate(2024, 100_000)
        ratio = data.outcome / data.rate
        assert np.mean(ratio) == pytest.approx(1.0, abs=0.1)
        assert data.outcome.sum() / data.rate.sum() == pytest.approx(1.0, abs=0.02)

    def test_covariate_moments(self):
        data = simulate(8, 50_000, mean_count_rate=8.0)
        assert np.mean(data.log_area) == pytest.approx(1.5, abs=0.005)
        assert np.std(data.log_area) == pytest.approx(0.1, rel=0.05)
        assert np.mean(data.indicator) == pytest.approx(0.5, abs=0.02)
        assert np.mean(data.count_covariate) == pytest.approx(8.0, abs=0.1)
        assert np.var(data.count_covariate) == pytest.approx(8.0, rel=0.05)

    def test_mean_count_rate_is_configurable(self):
        data = simulate(9, 50_000, mean_count_rate=2.5)
        assert np.mean(data.count_covariate) == pytest.approx(2.5, abs=0.05)
        assert data.mean_count_rate == 2.5

    def test_parameter_priors(self):
        """Across many calls the drawn parameters follow their priors."""
        gen = np.random.default_rng(10)
        draws = np.array([simulate(gen, 1).params.as_array() for _ in range(2000)])

        means = draws.mean(axis=0)
        sds = draws.std(axis=0, ddof=1)
        assert means[0] == pytest.approx(math.log(4), abs=0.01)
        assert means[1] == pytest.approx(-0.25, abs=0.01)
        assert means[2] == pytest.approx(-0.5, abs=0.1)
        assert sds[0] == pytest.approx(0.1, rel=0.1)
        assert sds[1] == pytest.approx(0.1, rel=0.1)
        assert sds[2] == pytest.approx(1.0, rel=0.1)

    def test_parameters_shared_across_units(self):
        """One parameter set generates every unit: log(rate) is exactly linear."""
        data = simulate(12, 300)
        X = np.column_stack([np.ones(data.n), data.count_covariate, data.indicator])
        beta, *_ = np.linalg.lstsq(X, np.log(data.rate) - data.log_area, rcond=None)
        np.testing.assert_allclose(beta, data.params.as_array(), atol=1e-10)

    def test_custom_priors(self):
        priors = Priors(
            intercept=NormalPrior(2.0, 1e-12),
            slope=NormalPrior(0.0, 1e-12),
            indicator_slope=NormalPrior(1.0, 1e-12),
        )
        data = simulate(13, 100, priors=priors)
        assert data.intercept == pytest.approx(2.0, abs=1e-9)
        assert data.slope == pytest.approx(0.0, abs=1e-9)
        assert data.indicator_slope == pytest.approx(1.0, abs=1e-9)

    def test_custom_covariate_model(self):
        covariates = CovariateModel(log_area=NormalPrior(0.0, 0.5), indicator_prob=0.9)
        data = simulate(14, 20_000, covariates=covariates)
        assert np.mean(data.log_area) == pytest.approx(0.0, abs=0.02)
        assert np.mean(data.indicator) == pytest.approx(0.9, abs=0.01)


# ---------------------------------------------------------------------------
# Boundaries and validation
# ---------------------------------------------------------------------------

class TestBoundaries:

    def test_n_equals_one(self):
        data = simulate(42, 1)
        for name in PER_UNIT:
            assert getattr(data, name).shape == (1,)
        assert data.warnings == ()

    def test_n_zero_rejected(self):
        with pytest.raises(ValidationError, match="n: must be a positive integer"):
            simulate(42, 0)

    @pytest.mark.parametrize("n", [-1, 2.5, 5.0, "5", None, True])
    def test_invalid_n(self, n):
        with pytest.raises(ValidationError, match="^n: "):
            simulate(42, n)

    @pytest.mark.parametrize("rate", [0, 0.0, -8.0, float('nan'), float('inf'), "8", None])
    def test_invalid_mean_count_rate(self, rate):
        with pytest.raises(ValidationError, match="mean_count_rate"):
            simulate(42, 5, rate)

    @pytest.mark.parametrize("rng", [None, 4.2, "seed", np.random.RandomState(1)])
    def test_invalid_rng(self, rng):
        with pytest.raises(ValidationError, match="rng"):
            simulate(rng, 5)

    def test_invalid_priors_type(self):
        with pytest.raises(ValidationError, match="priors"):
            simulate(42, 5, priors={'intercept': (0, 1)})

    def test_invalid_input_draws_nothing(self):
        """Validation happens before any draw: the Generator is untouched."""
        gen = np.random.default_rng(5)
        state = gen.bit_generator.state
        with pytest.raises(ValidationError):
            simulate(gen, 0)
        with pytest.raises(ValidationError):
            simulate(gen, 5, -1.0)
        assert gen.bit_generator.state == state

    def test_mean_count_rate_above_poisson_limit(self):
        gen = np.random.default_rng(5)
        state = gen.bit_generator.state
        with pytest.raises(ValidationError, match="mean_count_rate: must be at most"):
            simulate(gen, 5, 1e19)
        assert gen.bit_generator.state == state

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            simulate(42, 5, backend='tpu')

    def test_auto_backend_without_gpu_uses_cpu(self):
        if detect_gpu() is not None:
            pytest.skip("GPU present; auto selects it")
        data = simulate(42, 5, backend='auto')
        assert data.backend_name == 'cpu_poisson_dgp'

    def test_gpu_backend_without_gpu_raises(self):
        if detect_gpu() is not None:
            pytest.skip("GPU present")
        with pytest.raises(RuntimeError, match="GPU"):
            simulate(42, 5, backend='gpu')


# ---------------------------------------------------------------------------
# Warnings and metadata
# ---------------------------------------------------------------------------

class TestMetadata:

    def test_info(self):
        data = simulate(42, 5, 8.0)
        assert data.info['method'] == 'poisson_dgp'
        assert data.info['n'] == 5
        assert data.info['mean_count_rate'] == 8.0
        assert data.info['covariates_fixed'] is False
        assert data.covariates_fixed is False

    def test_timing_sections(self):
        data = simulate(42, 5)
        for key in ('total_seconds', 'parameters', 'covariates', 'outcomes'):
            assert key in data.timing

    def test_backend_name(self):
        assert simulate(42, 5).backend_name == 'cpu_poisson_dgp'

    def test_provenance(self):
        assert 'numpy_version' in simulate(42, 5).provenance

    def test_constant_indicator_warns(self):
        data = simulate(42, 50, covariates=CovariateModel(indicator_prob=1.0))
        assert np.all(data.indicator == 1)
        assert any("indicator_slope is not identifiable" in w for w in data.warnings)
