"""
Tests for the generating-distribution configuration and SimulationDesign.
"""

import dataclasses
import math

import numpy as np
import pytest

from pydgp.core.exceptions import ValidationError
from pydgp.simulation import (
    DEFAULT_COVARIATES,
    DEFAULT_PRIORS,
    CovariateModel,
    NormalPrior,
    Priors,
    SimulationDesign,
)


class TestNormalPrior:

    def test_valid(self):
        prior = NormalPrior(1, 2)
        assert prior.mean == 1.0
        assert prior.sd == 2.0
        assert isinstance(prior.mean, float)

    @pytest.mark.parametrize("sd", [0, -1.0, float('nan'), float('inf'), "1", True])
    def test_invalid_sd(self, sd):
        with pytest.raises(ValidationError, match="sd"):
            NormalPrior(0.0, sd)

    @pytest.mark.parametrize("mean", [float('nan'), float('inf'), "0", None, False])
    def test_invalid_mean(self, mean):
        with pytest.raises(ValidationError, match="mean"):
            NormalPrior(mean, 1.0)

    def test_frozen(self):
        prior = NormalPrior(0.0, 1.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            prior.mean = 1.0

    def test_draw(self, rng):
        draws = NormalPrior(3.0, 0.5).draw(rng, 20_000)
        assert draws.shape == (20_000,)
        assert np.mean(draws) == pytest.approx(3.0, abs=0.02)
        assert np.std(draws) == pytest.approx(0.5, rel=0.03)


class TestDefaults:

    def test_default_priors(self):
        assert DEFAULT_PRIORS.intercept == NormalPrior(math.log(4.0), 0.1)
        assert DEFAULT_PRIORS.slope == NormalPrior(-0.25, 0.1)
        assert DEFAULT_PRIORS.indicator_slope == NormalPrior(-0.5, 1.0)

    def test_default_covariates(self):
        assert DEFAULT_COVARIATES.log_area == NormalPrior(1.5, 0.1)
        assert DEFAULT_COVARIATES.indicator_prob == 0.5

    def test_priors_equal_defaults(self):
        assert Priors() == DEFAULT_PRIORS
        assert CovariateModel() == DEFAULT_COVARIATES


class TestConfigValidation:

    def test_priors_rejects_tuple(self):
        with pytest.raises(ValidationError, match="priors.slope: must be a NormalPrior"):
            Priors(slope=(-0.25, 0.1))

    def test_covariates_rejects_bad_log_area(self):
        with pytest.raises(ValidationError, match="covariates.log_area"):
            CovariateModel(log_area=1.5)

    @pytest.mark.parametrize("p", [-0.1, 1.5, float('nan'), "0.5"])
    def test_covariates_rejects_bad_probability(self, p):
        with pytest.raises(ValidationError, match="indicator_prob"):
            CovariateModel(indicator_prob=p)

    @pytest.mark.parametrize("p", [0.0, 1.0])
    def test_covariates_accepts_endpoints(self, p):
        assert CovariateModel(indicator_prob=p).indicator_prob == p


class TestSimulationDesign:

    def test_for_simulation_defaults(self):
        design = SimulationDesign.for_simulation(42, 10)
        assert design.n == 10
        assert design.mean_count_rate == 8.0
        assert design.priors == DEFAULT_PRIORS
        assert design.covariate_model == DEFAULT_COVARIATES
        assert design.covariates_fixed is False
        assert isinstance(design.rng, np.random.Generator)

    def test_for_simulation_keeps_generator(self, rng):
        design = SimulationDesign.for_simulation(rng, 10)
        assert design.rng is rng

    def test_for_simulation_integer_rate(self):
        design = SimulationDesign.for_simulation(42, 10, 3)
        assert design.mean_count_rate == 3.0
        assert isinstance(design.mean_count_rate, float)

    def test_for_fixed_covariates(self):
        design = SimulationDesign.for_fixed_covariates(
            42, [1.5, 1.6], [0, 1], [2, 3],
        )
        assert design.n == 2
        assert design.covariates_fixed is True
        assert design.mean_count_rate is None
        assert design.count_covariate.dtype == np.int64

    def test_frozen(self):
        design = SimulationDesign.for_simulation(42, 10)
        with pytest.raises(dataclasses.FrozenInstanceError):
            design.n = 20

    def test_rejects_bad_covariates_type(self):
        with pytest.raises(ValidationError, match="covariates: must be a CovariateModel"):
            SimulationDesign.for_simulation(42, 10, covariates={'indicator_prob': 0.5})
