"""
Common data structures for recovery checks.

PoissonFitParams, RecoveryParams and CoverageParams are the payloads
wrapped by Result[P] and exposed through the Solution classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class PoissonFitParams:
    """
    Parameter payload for the reference Poisson fit.

    Coefficients are in PARAMETER_NAMES order.
    """
    coefficients: NDArray[np.floating[Any]]       # shape (p,)
    standard_errors: NDArray[np.floating[Any]]    # shape (p,)
    covariance: NDArray[np.floating[Any]]         # shape (p, p)
    fitted_values: NDArray[np.floating[Any]]      # shape (n,)
    linear_predictor: NDArray[np.floating[Any]]   # shape (n,), includes offset
    residuals_deviance: NDArray[np.floating[Any]]
    residuals_pearson: NDArray[np.floating[Any]]
    deviance: float
    null_deviance: float
    aic: float
    rank: int
    df_residual: int
    df_null: int
    n_iter: int
    converged: bool


@dataclass(frozen=True)
class ParameterRecovery:
    """
    Recovery of one parameter.

    For a Wald check, estimate/spread are the MLE and its standard error
    and ``quantile`` is None. For a posterior check, they are the
    posterior mean and sd, and ``quantile`` is the fraction of draws
    below the truth.
    """
    name: str
    truth: float
    estimate: float
    spread: float
    lower: float
    upper: float
    z: float
    covered: bool
    quantile: float | None = None


@dataclass(frozen=True)
class RecoveryParams:
    """Parameter payload for a recovery check."""
    parameters: tuple[ParameterRecovery, ...]
    conf_level: float
    method: str                                   # "wald" | "posterior"


@dataclass(frozen=True)
class CoverageParams:
    """
    Parameter payload for a coverage study.

    Rows of ``z`` and ``covered`` are successful replicates only.
    """
    names: tuple[str, ...]
    z: NDArray[np.floating[Any]]                  # shape (n_ok, p)
    covered: NDArray[np.bool_]                    # shape (n_ok, p)
    coverage: NDArray[np.floating[Any]]           # shape (p,)
    conf_level: float
    n_sims: int
    n_failed: int
    n_not_converged: int
