"""
Common data structures for the Poisson DGP.

NormalPrior, Priors and CovariateModel describe the generating
distributions. DGPParams and SimulationParams are the payloads wrapped by
Result[P] and exposed through DGPSolution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
import math
import numbers

import numpy as np
from numpy.typing import NDArray

from pydgp.core.exceptions import ValidationError
from pydgp.core.validation import check_positive, check_probability


PARAMETER_NAMES: tuple[str, ...] = ('intercept', 'slope', 'indicator_slope')
COVARIATE_NAMES: tuple[str, ...] = ('log_area', 'indicator', 'count_covariate')

# numpy's Generator.poisson rejects rates above this
_INT64_MAX = float(np.iinfo(np.int64).max)
MAX_POISSON_RATE = _INT64_MAX - 10.0 * np.sqrt(_INT64_MAX)


def check_mean_count_rate(value: Any) -> float:
    """
    Validate the Poisson rate of the count covariate.

    Raises:
        ValidationError: If value is not finite and > 0, or exceeds
            the largest rate the Poisson sampler accepts
    """
    rate = check_positive(value, 'mean_count_rate')
    if rate > MAX_POISSON_RATE:
        raise ValidationError(
            f"mean_count_rate: must be at most {MAX_POISSON_RATE:.4g}, got {rate:g}"
        )
    return rate


@dataclass(frozen=True)
class NormalPrior:
    """
    Normal(mean, sd) distribution. Validated at construction.

    Attributes:
        mean: Location, any finite real.
        sd: Scale, finite and > 0.
    """
    mean: float
    sd: float

    def __post_init__(self) -> None:
        if isinstance(self.mean, bool) or not isinstance(self.mean, numbers.Real):
            raise ValidationError(
                f"mean: must be a real number, got {type(self.mean).__name__} {self.mean!r}"
            )
        if not math.isfinite(self.mean):
            raise ValidationError(f"mean: must be finite, got {self.mean}")
        object.__setattr__(self, 'mean', float(self.mean))
        object.__setattr__(self, 'sd', check_positive(self.sd, 'sd'))

    def draw(self, rng: np.random.Generator, size: int | None = None):
        return rng.normal(self.mean, self.sd, size=size)


@dataclass(frozen=True)
class Priors:
    """
    Priors of the regression parameters.

    Defaults follow the pest-complaints tutorial: a baseline of about four
    events per unit of exposure, a mildly negative count effect and a
    weakly informative indicator effect.
    """
    intercept: NormalPrior = field(default_factory=lambda: NormalPrior(math.log(4.0), 0.1))
    slope: NormalPrior = field(default_factory=lambda: NormalPrior(-0.25, 0.1))
    indicator_slope: NormalPrior = field(default_factory=lambda: NormalPrior(-0.5, 1.0))

    def __post_init__(self) -> None:
        for name in PARAMETER_NAMES:
            if not isinstance(getattr(self, name), NormalPrior):
                raise ValidationError(
                    f"priors.{name}: must be a NormalPrior, "
                    f"got {type(getattr(self, name)).__name__}"
                )


@dataclass(frozen=True)
class CovariateModel:
    """
    Distributions of the freshly generated covariates.

    The count covariate's rate is not part of this model; it is the
    ``mean_count_rate`` argument of simulate().
    """
    log_area: NormalPrior = field(default_factory=lambda: NormalPrior(1.5, 0.1))
    indicator_prob: float = 0.5

    def __post_init__(self) -> None:
        if not isinstance(self.log_area, NormalPrior):
            raise ValidationError(
                f"covariates.log_area: must be a NormalPrior, "
                f"got {type(self.log_area).__name__}"
            )
        object.__setattr__(
            self, 'indicator_prob',
            check_probability(self.indicator_prob, 'indicator_prob'),
        )


DEFAULT_PRIORS = Priors()
DEFAULT_COVARIATES = CovariateModel()


@dataclass(frozen=True)
class DGPParams:
    """Ground-truth regression parameters, drawn once per simulation."""
    intercept: float
    slope: float
    indicator_slope: float

    def as_dict(self) -> dict[str, float]:
        return {name: getattr(self, name) for name in PARAMETER_NAMES}

    def as_array(self) -> NDArray[np.floating[Any]]:
        """Parameters in PARAMETER_NAMES order, matching the fit's columns."""
        return np.array([self.intercept, self.slope, self.indicator_slope])


@dataclass(frozen=True)
class SimulationParams:
    """
    Parameter payload for a simulation.

    All per-unit arrays have length n.
    """
    params: DGPParams
    log_area: NDArray[np.floating[Any]]      # float64
    indicator: NDArray[np.integer[Any]]      # int64 in {0, 1}
    count_covariate: NDArray[np.integer[Any]]  # int64 >= 0
    outcome: NDArray[np.integer[Any]]        # int64 >= 0
    rate: NDArray[np.floating[Any]]          # exp(linear predictor) > 0

    def __post_init__(self) -> None:
        # The record is immutable; callers that need to edit use to_dict()
        for name in COVARIATE_NAMES + ('outcome', 'rate'):
            getattr(self, name).flags.writeable = False


def linear_predictor(
    params: DGPParams,
    log_area: NDArray,
    indicator: NDArray,
    count_covariate: NDArray,
) -> NDArray[np.floating[Any]]:
    """η = intercept + log_area + slope * count + indicator_slope * indicator."""
    return (
        params.intercept
        + log_area
        + params.slope * count_covariate
        + params.indicator_slope * indicator
    )
