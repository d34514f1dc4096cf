"""
Design for the reference Poisson fit.

FitDesign turns a simulated dataset into the GLM the DGP implies:

    outcome ~ Poisson(exp(X β + offset))
    X       = [1, count_covariate, indicator]
    offset  = log_area

Column order matches PARAMETER_NAMES, so β lines up with the true
(intercept, slope, indicator_slope).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pydgp.core.exceptions import ValidationError
from pydgp.core.validation import (
    check_1d,
    check_consistent_length,
    check_finite,
    check_min_samples,
)
from pydgp.simulation._common import PARAMETER_NAMES

if TYPE_CHECKING:
    from pydgp.simulation.solution import DGPSolution


@dataclass(frozen=True)
class FitDesign:
    """
    Design matrix, response and offset for the Poisson fit.

    Immutable after construction.
    """
    X: NDArray[np.floating[Any]]
    y: NDArray[np.floating[Any]]
    offset: NDArray[np.floating[Any]]
    names: tuple[str, ...]

    @property
    def n(self) -> int:
        return self.X.shape[0]

    @property
    def p(self) -> int:
        return self.X.shape[1]

    @classmethod
    def from_solution(cls, data: 'DGPSolution') -> FitDesign:
        """Build the design from a DGPSolution."""
        from pydgp.simulation.solution import DGPSolution

        if not isinstance(data, DGPSolution):
            raise ValidationError(
                f"data: must be a DGPSolution, got {type(data).__name__}"
            )
        return cls.from_arrays(
            data.outcome, data.log_area, data.indicator, data.count_covariate,
        )

    @classmethod
    def from_arrays(
        cls,
        outcome,
        log_area,
        indicator,
        count_covariate,
    ) -> FitDesign:
        """
        Build the design from raw arrays, e.g. a real dataset.

        Raises:
            ValidationError: If arrays are non-finite, or there are fewer
                units than coefficients.
            DimensionError: If arrays are not 1D or differ in length.
        """
        y = np.asarray(outcome, dtype=np.float64)
        offset = np.asarray(log_area, dtype=np.float64)
        ind = np.asarray(indicator, dtype=np.float64)
        cnt = np.asarray(count_covariate, dtype=np.float64)

        for arr, name in (
            (y, 'outcome'), (offset, 'log_area'),
            (ind, 'indicator'), (cnt, 'count_covariate'),
        ):
            check_1d(arr, name)
            check_finite(arr, name)
        check_consistent_length(
            y, offset, ind, cnt,
            names=('outcome', 'log_area', 'indicator', 'count_covariate'),
        )
        if np.any(y < 0):
            raise ValidationError("outcome: Poisson counts must be non-negative")

        X = np.column_stack([np.ones_like(y), cnt, ind])
        check_min_samples(X, X.shape[1], 'outcome')

        return cls(X=X, y=y, offset=offset, names=PARAMETER_NAMES)
