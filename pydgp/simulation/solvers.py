"""
Solver dispatch for the Poisson DGP.

This module provides the public entry points and backend selection:
    simulate(rng, n, mean_count_rate)                       # fresh covariates
    simulate_outcomes(rng, log_area, indicator, count_covariate)  # fixed covariates
"""

from typing import Literal

from numpy.typing import ArrayLike

from pydgp.core.random import RandomSource
from pydgp.core.compute.device import select_device
from pydgp.simulation._common import CovariateModel, Priors
from pydgp.simulation.design import SimulationDesign
from pydgp.simulation.solution import DGPSolution
from pydgp.simulation.backends.cpu import CPUPoissonDGPBackend


BackendChoice = Literal['cpu', 'gpu', 'auto']


def simulate(
    rng: RandomSource,
    n: int,
    mean_count_rate: float = 8.0,
    *,
    priors: Priors | None = None,
    covariates: CovariateModel | None = None,
    backend: BackendChoice = 'cpu',
) -> DGPSolution:
    """
    Simulate one dataset from the Poisson regression DGP.

    Generating process:
        intercept       ~ Normal(log 4, 0.1)
        slope           ~ Normal(-0.25, 0.1)
        indicator_slope ~ Normal(-0.5, 1)
        for each unit i:
            log_area[i]        ~ Normal(1.5, 0.1)
            indicator[i]       ~ Bernoulli(0.5)
            count_covariate[i] ~ Poisson(mean_count_rate)
            rate[i]    = exp(intercept + log_area[i]
                             + slope * count_covariate[i]
                             + indicator_slope * indicator[i])
            outcome[i] ~ Poisson(rate[i])

    All arguments are validated before anything is drawn, so an invalid
    call leaves a passed-in Generator untouched.

    Args:
        rng: numpy Generator (advanced in place) or integer seed.
        n: Number of units. Positive integer.
        mean_count_rate: Poisson rate of count_covariate. Finite and > 0.
        priors: Parameter priors. Defaults to the values above.
        covariates: log_area and indicator distributions. Defaults to the
            values above.
        backend: 'cpu' (default, numpy), 'gpu' (PyTorch on CUDA/MPS) or
            'auto' (GPU if available). Each backend is reproducible for a
            fixed seed, but the backends draw different streams.

    Returns:
        DGPSolution with the true parameters and the per-unit arrays.

    Raises:
        ValidationError: If any argument is invalid.
        NumericalError: If a Poisson rate over- or underflows.
        RuntimeError: If backend='gpu' and no GPU is available.

    Example:
        >>> from pydgp.simulation import simulate
        >>> data = simulate(42, 5)
        >>> data.outcome.shape
        (5,)
    """
    design = SimulationDesign.for_simulation(
        rng, n, mean_count_rate, priors=priors, covariates=covariates,
    )
    backend_impl = _get_backend(backend)
    result = backend_impl.solve(design)
    return DGPSolution(_result=result, _design=design)


def simulate_outcomes(
    rng: RandomSource,
    log_area: ArrayLike,
    indicator: ArrayLike,
    count_covariate: ArrayLike,
    *,
    priors: Priors | None = None,
    backend: BackendChoice = 'cpu',
) -> DGPSolution:
    """
    Draw parameters and outcomes for fixed covariates.

    Use this to simulate fake outcomes on the covariates of a real
    dataset. The covariates are copied into the result unchanged (cast to
    float64 / int64); only intercept, slope, indicator_slope and outcome
    are random.

    Args:
        rng: numpy Generator (advanced in place) or integer seed.
        log_area: Real covariate, shape (n,).
        indicator: Binary covariate, values in {0, 1}, shape (n,).
        count_covariate: Non-negative integer covariate, shape (n,).
        priors: Parameter priors. Defaults to DEFAULT_PRIORS.
        backend: 'cpu', 'gpu' or 'auto'.

    Returns:
        DGPSolution with mean_count_rate=None and covariates_fixed=True.

    Raises:
        ValidationError: If a covariate is non-numeric, non-finite, empty,
            or outside its domain.
        DimensionError: If covariates are not 1D or differ in length.
        NumericalError: If a Poisson rate over- or underflows.
    """
    design = SimulationDesign.for_fixed_covariates(
        rng, log_area, indicator, count_covariate, priors=priors,
    )
    backend_impl = _get_backend(backend)
    result = backend_impl.solve(design)
    return DGPSolution(_result=result, _design=design)


def _get_backend(choice: BackendChoice):
    """
    Select and instantiate the simulation backend.

    Raises:
        ValueError: If unknown backend specified
        RuntimeError: If GPU requested but unavailable
    """
    if choice == 'cpu':
        return CPUPoissonDGPBackend()

    elif choice == 'auto':
        device = select_device('auto')
        if device.is_gpu:
            from pydgp.simulation.backends.gpu import GPUPoissonDGPBackend
            return GPUPoissonDGPBackend(device=device.device_type)
        return CPUPoissonDGPBackend()

    elif choice == 'gpu':
        device = select_device('gpu')
        from pydgp.simulation.backends.gpu import GPUPoissonDGPBackend
        return GPUPoissonDGPBackend(device=device.device_type)

    else:
        raise ValueError(f"Unknown backend: {choice!r}")
