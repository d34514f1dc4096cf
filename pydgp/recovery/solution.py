"""
Solution wrappers for recovery results.

PoissonFitSolution, RecoverySolution and CoverageSolution wrap Result[P]
and provide accessors and plain-text summaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pydgp.core.result import Result
from pydgp.recovery._common import (
    CoverageParams,
    ParameterRecovery,
    PoissonFitParams,
    RecoveryParams,
)

if TYPE_CHECKING:
    from pydgp.recovery.design import FitDesign


@dataclass
class PoissonFitSolution:
    """
    User-facing results of the reference Poisson fit.

    Coefficients line up with the DGP's (intercept, slope, indicator_slope).
    """
    _result: Result[PoissonFitParams]
    _design: 'FitDesign'

    @property
    def names(self) -> tuple[str, ...]:
        return self._design.names

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        return self._result.params.standard_errors

    @property
    def covariance(self) -> NDArray[np.floating[Any]]:
        """Asymptotic covariance of the coefficients, (X'WX)⁻¹."""
        return self._result.params.covariance

    @property
    def z_statistics(self) -> NDArray[np.floating[Any]]:
        """Wald statistics for H0: coefficient = 0."""
        return self.coefficients / self.standard_errors

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def linear_predictor(self) -> NDArray[np.floating[Any]]:
        return self._result.params.linear_predictor

    @property
    def residuals_deviance(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals_deviance

    @property
    def residuals_pearson(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals_pearson

    @property
    def deviance(self) -> float:
        return self._result.params.deviance

    @property
    def null_deviance(self) -> float:
        return self._result.params.null_deviance

    @property
    def aic(self) -> float:
        return self._result.params.aic

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def df_null(self) -> int:
        return self._result.params.df_null

    @property
    def n_iter(self) -> int:
        return self._result.params.n_iter

    @property
    def converged(self) -> bool:
        return self._result.params.converged

    def as_dict(self) -> dict[str, float]:
        """Coefficients keyed by parameter name."""
        return {name: float(c) for name, c in zip(self.names, self.coefficients)}

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

    def summary(self) -> str:
        """Coefficient table in the style of R's summary.glm."""
        from scipy import stats

        lines = [
            "",
            "Poisson regression, log link, offset = log_area",
            "",
            "Coefficients:",
            f"{'':16s} {'Estimate':>11s} {'Std. Error':>11s} {'z value':>9s} {'Pr(>|z|)':>10s}",
        ]
        p_values = 2.0 * stats.norm.sf(np.abs(self.z_statistics))
        for name, est, se, z, pv in zip(
            self.names, self.coefficients, self.standard_errors,
            self.z_statistics, p_values,
        ):
            lines.append(f"{name:<16s} {est:11.5f} {se:11.5f} {z:9.3f} {pv:10.4g}")

        lines.append("")
        lines.append(
            f"    Null deviance: {self.null_deviance:.2f}  on {self.df_null} degrees of freedom"
        )
        lines.append(
            f"Residual deviance: {self.deviance:.2f}  on {self.df_residual} degrees of freedom"
        )
        lines.append(f"AIC: {self.aic:.2f}")
        lines.append("")
        lines.append(f"Number of Fisher Scoring iterations: {self.n_iter}")
        if not self.converged:
            lines.append("WARNING: algorithm did not converge")
        return "\n".join(lines)

    def __repr__(self) -> str:
        coefs = ", ".join(f"{k}={v:.4g}" for k, v in self.as_dict().items())
        return f"PoissonFitSolution({coefs}, converged={self.converged})"


@dataclass
class RecoverySolution:
    """
    User-facing result of a recovery check.

    One ParameterRecovery per DGP parameter, in PARAMETER_NAMES order.
    """
    _result: Result[RecoveryParams]

    @property
    def parameters(self) -> tuple[ParameterRecovery, ...]:
        return self._result.params.parameters

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    @property
    def method(self) -> str:
        """'wald' (from a fit) or 'posterior' (from draws)."""
        return self._result.params.method

    @property
    def conf_level(self) -> float:
        return self._result.params.conf_level

    @property
    def covered(self) -> dict[str, bool]:
        """Whether each interval contains the true value."""
        return {p.name: p.covered for p in self.parameters}

    @property
    def all_covered(self) -> bool:
        return all(p.covered for p in self.parameters)

    @property
    def z_scores(self) -> dict[str, float]:
        """(estimate - truth) / spread per parameter."""
        return {p.name: p.z for p in self.parameters}

    def __getitem__(self, name: str) -> ParameterRecovery:
        for p in self.parameters:
            if p.name == name:
                return p
        raise KeyError(
            f"No parameter '{name}'. Available: {self.names}"
        )

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

    def summary(self) -> str:
        """
        Recovery table.

        Produces:
            PARAMETER RECOVERY (wald, 95% intervals)

                                 truth    estimate      spread       lower       upper        z  covered
            intercept          1.38629     1.39102     0.02011     1.35160     1.43044    0.235      yes
            ...
        """
        pct = f"{self.conf_level * 100:g}%"
        lines = [
            "",
            f"PARAMETER RECOVERY ({self.method}, {pct} intervals)",
            "",
            f"{'':16s} {'truth':>11s} {'estimate':>11s} {'spread':>11s} "
            f"{'lower':>11s} {'upper':>11s} {'z':>8s} {'covered':>8s}",
        ]
        for p in self.parameters:
            lines.append(
                f"{p.name:<16s} {p.truth:11.5f} {p.estimate:11.5f} {p.spread:11.5f} "
                f"{p.lower:11.5f} {p.upper:11.5f} {p.z:8.3f} "
                f"{'yes' if p.covered else 'NO':>8s}"
            )
        if self.method == 'posterior':
            lines.append("")
            lines.append("Posterior quantile of truth:")
            for p in self.parameters:
                lines.append(f"    {p.name:<16s} {p.quantile:.3f}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        n_cov = sum(p.covered for p in self.parameters)
        return (
            f"RecoverySolution(method={self.method!r}, "
            f"covered={n_cov}/{len(self.parameters)}, "
            f"conf_level={self.conf_level})"
        )


@dataclass
class CoverageSolution:
    """
    User-facing result of a repeated-simulation coverage study.

    For a well-calibrated procedure, coverage is near conf_level and the
    z scores are approximately standard normal.
    """
    _result: Result[CoverageParams]

    @property
    def names(self) -> tuple[str, ...]:
        return self._result.params.names

    @property
    def coverage(self) -> dict[str, float]:
        """Fraction of successful replicates whose interval held the truth."""
        return {
            name: float(c)
            for name, c in zip(self.names, self._result.params.coverage)
        }

    @property
    def z(self) -> NDArray[np.floating[Any]]:
        """z scores, shape (n_ok, p)."""
        return self._result.params.z

    @property
    def mean_z(self) -> dict[str, float]:
        return dict(zip(self.names, np.mean(self.z, axis=0).tolist()))

    @property
    def sd_z(self) -> dict[str, float]:
        if self.z.shape[0] < 2:
            return {name: float('nan') for name in self.names}
        return dict(zip(self.names, np.std(self.z, axis=0, ddof=1).tolist()))

    @property
    def conf_level(self) -> float:
        return self._result.params.conf_level

    @property
    def n_sims(self) -> int:
        return self._result.params.n_sims

    @property
    def n_failed(self) -> int:
        """Replicates whose design was rank-deficient or whose fit diverged."""
        return self._result.params.n_failed

    @property
    def n_not_converged(self) -> int:
        return self._result.params.n_not_converged

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

    def summary(self) -> str:
        """Coverage table."""
        lines = [
            "",
            "COVERAGE STUDY",
            "",
            f"Replicates: {self.n_sims} ({self.n_failed} failed, "
            f"{self.n_not_converged} not converged)",
            f"Nominal coverage: {self.conf_level:g}",
            "",
            f"{'':16s} {'coverage':>9s} {'mean z':>9s} {'sd z':>9s}",
        ]
        coverage, mean_z, sd_z = self.coverage, self.mean_z, self.sd_z
        for name in self.names:
            lines.append(
                f"{name:<16s} {coverage[name]:9.3f} {mean_z[name]:9.3f} {sd_z[name]:9.3f}"
            )
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"CoverageSolution(n_sims={self.n_sims}, "
            f"conf_level={self.conf_level}, n_failed={self.n_failed})"
        )
