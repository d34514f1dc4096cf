"""
Solution wrapper for simulated datasets.

DGPSolution wraps Result[SimulationParams] and exposes the record that
model-fitting and plotting code consumes: the ground-truth parameters and
the per-unit arrays, under stable field names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pydgp.core.result import Result
from pydgp.simulation._common import (
    COVARIATE_NAMES,
    PARAMETER_NAMES,
    DGPParams,
    SimulationParams,
    linear_predictor,
)

if TYPE_CHECKING:
    import pandas as pd
    from pydgp.simulation.design import SimulationDesign


@dataclass
class DGPSolution:
    """
    User-facing simulation results.

    Parameters are drawn once and shared by every unit; every per-unit
    array has length n. The arrays are read-only; to_dict() returns
    writable copies.
    """
    _result: Result[SimulationParams]
    _design: 'SimulationDesign'

    # --- Ground truth ---

    @property
    def params(self) -> DGPParams:
        """The drawn parameters as a frozen record."""
        return self._result.params.params

    @property
    def intercept(self) -> float:
        return self._result.params.params.intercept

    @property
    def slope(self) -> float:
        """Coefficient of count_covariate."""
        return self._result.params.params.slope

    @property
    def indicator_slope(self) -> float:
        """Coefficient of indicator."""
        return self._result.params.params.indicator_slope

    # --- Per-unit arrays ---

    @property
    def log_area(self) -> NDArray[np.floating[Any]]:
        """Log-exposure covariate, shape (n,). Enters with coefficient 1."""
        return self._result.params.log_area

    @property
    def indicator(self) -> NDArray[np.integer[Any]]:
        """Binary covariate in {0, 1}, shape (n,)."""
        return self._result.params.indicator

    @property
    def count_covariate(self) -> NDArray[np.integer[Any]]:
        """Non-negative integer covariate, shape (n,)."""
        return self._result.params.count_covariate

    @property
    def outcome(self) -> NDArray[np.integer[Any]]:
        """Simulated counts, shape (n,)."""
        return self._result.params.outcome

    @property
    def rate(self) -> NDArray[np.floating[Any]]:
        """Poisson rate exp(linear_predictor) each outcome was drawn from."""
        return self._result.params.rate

    @property
    def linear_predictor(self) -> NDArray[np.floating[Any]]:
        """log(rate), recomputed from the parameters and covariates."""
        return linear_predictor(
            self.params, self.log_area, self.indicator, self.count_covariate
        )

    # --- Metadata ---

    @property
    def n(self) -> int:
        """Number of units."""
        return self._design.n

    @property
    def mean_count_rate(self) -> float | None:
        """Rate of the count covariate, None if covariates were supplied."""
        return self._design.mean_count_rate

    @property
    def covariates_fixed(self) -> bool:
        return self._design.covariates_fixed

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def provenance(self) -> dict[str, str]:
        return self._result.provenance

    # --- Export ---

    def to_dict(self) -> dict[str, Any]:
        """
        The output record as a plain dict.

        Keys are intercept, slope, indicator_slope, log_area, indicator,
        count_covariate and outcome. Arrays are copies, so the dict can be
        handed to a fitting routine that mutates its inputs.
        """
        record: dict[str, Any] = {
            name: getattr(self, name) for name in PARAMETER_NAMES
        }
        for name in COVARIATE_NAMES + ('outcome',):
            record[name] = getattr(self, name).copy()
        return record

    def to_dataframe(self) -> 'pd.DataFrame':
        """
        Per-unit data as a pandas DataFrame.

        Columns: log_area, indicator, count_covariate, outcome, rate.
        The ground-truth parameters are stored in ``df.attrs['params']``.
        """
        import pandas as pd

        df = pd.DataFrame({
            'log_area': self.log_area,
            'indicator': self.indicator,
            'count_covariate': self.count_covariate,
            'outcome': self.outcome,
            'rate': self.rate,
        })
        df.attrs['params'] = self.params.as_dict()
        return df

    # --- Display ---

    def summary(self) -> str:
        """
        Plain-text summary of the simulated dataset.

        Produces:
            POISSON DATA-GENERATING PROCESS

            Units: 100   Count covariate rate: 8

            True parameters:
                intercept           1.38629
                slope              -0.25000
                indicator_slope    -0.50000

            Per-unit data:
                               mean          sd         min         max
            log_area        1.50012     0.10021     1.25000     1.75000
            ...
        """
        lines = ["\nPOISSON DATA-GENERATING PROCESS", ""]

        rate_desc = (
            "fixed covariates" if self.covariates_fixed
            else f"Count covariate rate: {self.mean_count_rate:g}"
        )
        lines.append(f"Units: {self.n}   {rate_desc}")
        lines.append("")

        lines.append("True parameters:")
        for name, value in self.params.as_dict().items():
            lines.append(f"    {name:<16s} {value:10.5f}")
        lines.append("")

        lines.append("Per-unit data:")
        lines.append(
            f"{'':16s} {'mean':>11s} {'sd':>11s} {'min':>11s} {'max':>11s}"
        )
        for name in COVARIATE_NAMES + ('outcome', 'rate'):
            arr = np.asarray(getattr(self, name), dtype=np.float64)
            sd = float(np.std(arr, ddof=1)) if arr.size > 1 else float('nan')
            lines.append(
                f"{name:<16s} {arr.mean():11.5f} {sd:11.5f} "
                f"{arr.min():11.5f} {arr.max():11.5f}"
            )

        if self.warnings:
            lines.append("")
            lines.append("Warnings:")
            for w in self.warnings:
                lines.append(f"  {w}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"DGPSolution(n={self.n}, intercept={self.intercept:.4g}, "
            f"slope={self.slope:.4g}, indicator_slope={self.indicator_slope:.4g}, "
            f"backend={self.backend_name!r})"
        )
