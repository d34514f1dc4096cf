"""
Response model of the reference fit.

The simulated outcomes are Poisson with a log link, so that is the one
model the fit needs. For a canonical log link the IRLS quantities reduce
to
    μ = exp(η),   dμ/dη = μ,   V(μ) = μ,   w = μ,   z = η + (y - μ) / μ
which is what CPUIRLSBackend uses.

References:
    McCullagh, P., & Nelder, J. A. (1989). Generalized Linear Models (2nd ed.)
"""

import numpy as np
from numpy.typing import NDArray
from scipy.special import gammaln, xlogy


# exp(±ETA_BOUND) stays finite and non-zero in float64
ETA_BOUND = 500.0


class Poisson:
    """Poisson response, log link."""

    name = 'poisson'
    link_name = 'log'

    def mean(self, eta: NDArray) -> NDArray:
        """μ = exp(η), with η clipped so μ is finite and positive."""
        return np.exp(np.clip(eta, -ETA_BOUND, ETA_BOUND))

    def start(self, y: NDArray) -> NDArray:
        """Starting linear predictor log(max(y, 0.1))."""
        return np.log(np.maximum(y, 0.1))

    def unit_deviance(self, y: NDArray, mu: NDArray) -> NDArray:
        # xlogy gives 0 * log(0) = 0 for zero counts
        return 2.0 * (xlogy(y, y) - xlogy(y, mu) - (y - mu))

    def deviance(self, y: NDArray, mu: NDArray) -> float:
        return float(np.sum(self.unit_deviance(y, mu)))

    def log_likelihood(self, y: NDArray, mu: NDArray) -> float:
        return float(np.sum(xlogy(y, mu) - mu - gammaln(y + 1.0)))

    def aic(self, y: NDArray, mu: NDArray, rank: int) -> float:
        return -2.0 * self.log_likelihood(y, mu) + 2.0 * rank

    def __repr__(self) -> str:
        return f"Poisson(link={self.link_name!r})"
