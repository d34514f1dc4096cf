"""
PyDGP recovery: does a fitting procedure get the truth back?

Provides a reference maximum-likelihood fit of the simulated model,
recovery checks against the true parameters (from a fit or from
posterior draws produced by any sampler), and a repeated-simulation
coverage study.

Usage:
    from pydgp.simulation import simulate
    from pydgp.recovery import fit_poisson, check_recovery, check_posterior_recovery

    data = simulate(42, n=500)
    fit = fit_poisson(data)
    report = check_recovery(data, fit, conf_level=0.95)
    print(report.summary())

    # Draws from Stan / PyMC / Pyro, keyed by parameter name
    report = check_posterior_recovery(data, draws, conf_level=0.9)
"""

from pydgp.recovery._common import (
    CoverageParams,
    ParameterRecovery,
    PoissonFitParams,
    RecoveryParams,
)
from pydgp.recovery.design import FitDesign
from pydgp.recovery.families import Poisson
from pydgp.recovery.solution import (
    CoverageSolution,
    PoissonFitSolution,
    RecoverySolution,
)
from pydgp.recovery.solvers import (
    check_posterior_recovery,
    check_recovery,
    coverage,
    fit_poisson,
)

__all__ = [
    "fit_poisson",
    "check_recovery",
    "check_posterior_recovery",
    "coverage",
    "FitDesign",
    "PoissonFitSolution",
    "RecoverySolution",
    "CoverageSolution",
    "PoissonFitParams",
    "RecoveryParams",
    "ParameterRecovery",
    "CoverageParams",
    "Poisson",
]
