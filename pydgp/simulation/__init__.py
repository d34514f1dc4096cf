"""
PyDGP simulation: the Poisson regression data-generating process.

Simulates known parameters and fake data for checking that a model
implementation recovers what generated the data.

Usage:
    from pydgp.simulation import simulate, simulate_outcomes

    # Fresh covariates and outcomes
    data = simulate(42, n=100, mean_count_rate=8.0)

    # Outcomes for covariates you already have
    data = simulate_outcomes(rng, log_area, indicator, count_covariate)

    data.intercept, data.slope, data.indicator_slope
    data.outcome
"""

from pydgp.simulation._common import (
    CovariateModel,
    DEFAULT_COVARIATES,
    DEFAULT_PRIORS,
    DGPParams,
    NormalPrior,
    PARAMETER_NAMES,
    Priors,
    SimulationParams,
)
from pydgp.simulation.design import SimulationDesign
from pydgp.simulation.solution import DGPSolution
from pydgp.simulation.solvers import simulate, simulate_outcomes

__all__ = [
    "simulate",
    "simulate_outcomes",
    "DGPSolution",
    "SimulationDesign",
    "SimulationParams",
    "DGPParams",
    "NormalPrior",
    "Priors",
    "CovariateModel",
    "DEFAULT_PRIORS",
    "DEFAULT_COVARIATES",
    "PARAMETER_NAMES",
]
