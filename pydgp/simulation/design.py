"""
Design for the Poisson data-generating process.

SimulationDesign encapsulates every input a backend needs: the randomness
source, the priors, and either the recipe for fresh covariates or a fixed
set of covariates. Immutable and validated at construction, so a design
that exists can always be simulated.

Two constructors, one per entry point:
    SimulationDesign.for_simulation(...)         # draw covariates and outcome
    SimulationDesign.for_fixed_covariates(...)   # draw outcome only
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydgp.core.exceptions import ValidationError
from pydgp.core.random import RandomSource, check_rng, resolve_rng
from pydgp.core.validation import (
    check_1d,
    check_array,
    check_binary,
    check_consistent_length,
    check_finite,
    check_min_samples,
    check_nonnegative_integers,
    check_positive_int,
)
from pydgp.simulation._common import (
    CovariateModel,
    DEFAULT_COVARIATES,
    DEFAULT_PRIORS,
    Priors,
    check_mean_count_rate,
)


@dataclass(frozen=True)
class SimulationDesign:
    """
    Frozen design for one simulation call.

    Attributes:
        rng: Randomness source. A Generator passed in by the caller is
            shared, not copied, and is advanced by the simulation.
        n: Number of units.
        priors: Priors of intercept, slope and indicator_slope.
        covariate_model: Distributions of generated covariates. Unused
            when covariates are fixed.
        mean_count_rate: Poisson rate of the count covariate, or None
            when covariates are fixed.
        log_area: Fixed log-area covariate (n,), or None.
        indicator: Fixed binary covariate (n,), or None.
        count_covariate: Fixed count covariate (n,), or None.
    """
    rng: np.random.Generator
    n: int
    priors: Priors
    covariate_model: CovariateModel
    mean_count_rate: float | None
    log_area: NDArray[np.floating[Any]] | None = None
    indicator: NDArray[np.integer[Any]] | None = None
    count_covariate: NDArray[np.integer[Any]] | None = None

    @property
    def covariates_fixed(self) -> bool:
        """True if the covariates were supplied by the caller."""
        return self.log_area is not None

    @classmethod
    def for_simulation(
        cls,
        rng: RandomSource,
        n: int,
        mean_count_rate: float = 8.0,
        *,
        priors: Priors | None = None,
        covariates: CovariateModel | None = None,
    ) -> SimulationDesign:
        """
        Create a design that generates covariates and outcomes.

        Args:
            rng: numpy Generator or non-negative integer seed.
            n: Number of units. Must be a positive integer.
            mean_count_rate: Poisson rate of the count covariate. Must be
                finite and > 0.
            priors: Parameter priors. Defaults to DEFAULT_PRIORS.
            covariates: Covariate distributions. Defaults to
                DEFAULT_COVARIATES.

        Returns:
            Validated SimulationDesign.

        Raises:
            ValidationError: If any input is invalid. Nothing is drawn
                from rng in that case.
        """
        check_rng(rng)
        n = check_positive_int(n, 'n')
        mean_count_rate = check_mean_count_rate(mean_count_rate)
        priors = _check_priors(priors)
        covariates = _check_covariate_model(covariates)

        return cls(
            rng=resolve_rng(rng),
            n=n,
            priors=priors,
            covariate_model=covariates,
            mean_count_rate=mean_count_rate,
        )

    @classmethod
    def for_fixed_covariates(
        cls,
        rng: RandomSource,
        log_area: ArrayLike,
        indicator: ArrayLike,
        count_covariate: ArrayLike,
        *,
        priors: Priors | None = None,
    ) -> SimulationDesign:
        """
        Create a design that keeps the given covariates and draws outcomes.

        The arrays are copied, so later changes by the caller do not leak
        into the design.

        Args:
            rng: numpy Generator or non-negative integer seed.
            log_area: Real-valued covariate, shape (n,).
            indicator: Binary covariate, values in {0, 1}, shape (n,).
            count_covariate: Non-negative integer covariate, shape (n,).
            priors: Parameter priors. Defaults to DEFAULT_PRIORS.

        Returns:
            Validated SimulationDesign.

        Raises:
            ValidationError: If any input is invalid.
            DimensionError: If arrays are not 1D or differ in length.
        """
        check_rng(rng)

        log_area_arr = check_array(log_area, 'log_area')
        indicator_arr = check_array(indicator, 'indicator')
        count_arr = check_array(count_covariate, 'count_covariate')

        for arr, name in (
            (log_area_arr, 'log_area'),
            (indicator_arr, 'indicator'),
            (count_arr, 'count_covariate'),
        ):
            check_1d(arr, name)
            check_finite(arr, name)

        check_consistent_length(
            log_area_arr, indicator_arr, count_arr,
            names=('log_area', 'indicator', 'count_covariate'),
        )
        check_min_samples(log_area_arr, 1, 'log_area')
        check_binary(indicator_arr, 'indicator')
        check_nonnegative_integers(count_arr, 'count_covariate')

        priors = _check_priors(priors)

        return cls(
            rng=resolve_rng(rng),
            n=int(log_area_arr.shape[0]),
            priors=priors,
            covariate_model=DEFAULT_COVARIATES,
            mean_count_rate=None,
            log_area=log_area_arr.astype(np.float64, copy=True),
            indicator=indicator_arr.astype(np.int64, copy=True),
            count_covariate=count_arr.astype(np.int64, copy=True),
        )


def _check_priors(priors: Priors | None) -> Priors:
    if priors is None:
        return DEFAULT_PRIORS
    if not isinstance(priors, Priors):
        raise ValidationError(
            f"priors: must be a Priors instance, got {type(priors).__name__}"
        )
    return priors


def _check_covariate_model(covariates: CovariateModel | None) -> CovariateModel:
    if covariates is None:
        return DEFAULT_COVARIATES
    if not isinstance(covariates, CovariateModel):
        raise ValidationError(
            f"covariates: must be a CovariateModel instance, got {type(covariates).__name__}"
        )
    return covariates
