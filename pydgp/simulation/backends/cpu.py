"""
CPU backend for the Poisson DGP.

Draws are vectorised with numpy: the per-unit loop of the generating
process is embarrassingly parallel, so each covariate and the outcome are
drawn as one array. Draw order is fixed (parameters, log_area, indicator,
count_covariate, outcome), which is what makes a seed reproducible.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pydgp.core.exceptions import NumericalError
from pydgp.core.result import Result
from pydgp.core.compute.timing import Timer
from pydgp.simulation._common import (
    MAX_POISSON_RATE,
    DGPParams,
    SimulationParams,
    linear_predictor,
)
from pydgp.simulation.design import SimulationDesign



class CPUPoissonDGPBackend:
    """CPU backend: numpy Generator draws."""

    @property
    def name(self) -> str:
        return 'cpu_poisson_dgp'

    def solve(self, design: SimulationDesign) -> Result[SimulationParams]:
        """Draw parameters, covariates and outcomes; return Result[SimulationParams]."""
        timer = Timer()
        timer.start()

        rng = design.rng
        n = design.n
        priors = design.priors
        warnings_list: list[str] = []

        with timer.section('parameters'):
            params = DGPParams(
                intercept=float(priors.intercept.draw(rng)),
                slope=float(priors.slope.draw(rng)),
                indicator_slope=float(priors.indicator_slope.draw(rng)),
            )

        with timer.section('covariates'):
            if design.covariates_fixed:
                log_area = design.log_area
                indicator = design.indicator
                count_covariate = design.count_covariate
            else:
                model = design.covariate_model
                log_area = np.asarray(model.log_area.draw(rng, n), dtype=np.float64)
                indicator = rng.binomial(1, model.indicator_prob, size=n).astype(np.int64)
                count_covariate = rng.poisson(design.mean_count_rate, size=n).astype(np.int64)

        with timer.section('outcomes'):
            eta = linear_predictor(params, log_area, indicator, count_covariate)
            rate = poisson_rate(eta)
            outcome = rng.poisson(rate).astype(np.int64)

        warnings_list.extend(identifiability_warnings(indicator, count_covariate))

        timer.stop()

        return Result(
            params=SimulationParams(
                params=params,
                log_area=log_area,
                indicator=indicator,
                count_covariate=count_covariate,
                outcome=outcome,
                rate=rate,
            ),
            info={
                'method': 'poisson_dgp',
                'n': n,
                'covariates_fixed': design.covariates_fixed,
                'mean_count_rate': design.mean_count_rate,
                'device': 'cpu',
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


def poisson_rate(eta: NDArray[np.floating]) -> NDArray[np.floating]:
    """
    exp(η), checked to be a usable Poisson rate.

    Raises:
        NumericalError: If any rate underflowed to 0, overflowed, or is
            too large for the Poisson sampler.
    """
    with np.errstate(over='ignore', under='ignore'):
        rate = np.exp(eta)

    bad = ~np.isfinite(rate) | (rate <= 0) | (rate > MAX_POISSON_RATE)
    if np.any(bad):
        idx = np.flatnonzero(bad)
        raise NumericalError(
            f"Poisson rate out of range for {idx.size} unit(s) "
            f"(first at index {idx[0]}: linear predictor={eta[idx[0]]:.6g}). "
            f"The exp link needs a linear predictor in roughly (-745, 43)."
        )
    return rate


def identifiability_warnings(
    indicator: NDArray,
    count_covariate: NDArray,
) -> list[str]:
    """Warnings for covariates whose coefficient the data cannot inform."""
    warnings_list = []
    if indicator.size > 1 and np.all(indicator == indicator[0]):
        warnings_list.append(
            f"indicator is constant ({int(indicator[0])}) across all units; "
            f"indicator_slope is not identifiable from this dataset"
        )
    if count_covariate.size > 1 and np.all(count_covariate == count_covariate[0]):
        warnings_list.append(
            f"count_covariate is constant ({int(count_covariate[0])}) across all units; "
            f"slope is not identifiable from this dataset"
        )
    return warnings_list
