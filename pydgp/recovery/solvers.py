"""
Recovery checks for simulated datasets.

This module provides the public API of the recovery harness:
    fit_poisson(data)                      # reference MLE of the DGP's model
    check_recovery(data, fit)              # Wald intervals vs. truth
    check_posterior_recovery(data, draws)  # posterior draws vs. truth
    coverage(rng, n, n_sims)               # repeated simulate → fit → check
"""

from __future__ import annotations

from collections.abc import Mapping
import warnings

import numpy as np
from numpy.typing import ArrayLike

from pydgp.core.exceptions import (
    ConvergenceError,
    NumericalError,
    SingularMatrixError,
    ValidationError,
)
from pydgp.core.result import Result
from pydgp.core.compute.timing import Timer
from pydgp.core.random import RandomSource, check_rng, resolve_rng
from pydgp.core.validation import (
    check_1d,
    check_array,
    check_finite,
    check_min_samples,
    check_open_unit_interval,
    check_positive,
    check_positive_int,
)
from pydgp.simulation._common import PARAMETER_NAMES, Priors, check_mean_count_rate
from pydgp.simulation.solution import DGPSolution
from pydgp.simulation.solvers import simulate
from pydgp.recovery._common import CoverageParams, ParameterRecovery, RecoveryParams
from pydgp.recovery.backends.cpu_glm import CPUIRLSBackend
from pydgp.recovery.design import FitDesign
from pydgp.recovery.families import Poisson
from pydgp.recovery.solution import (
    CoverageSolution,
    PoissonFitSolution,
    RecoverySolution,
)


# Below this many posterior draws interval endpoints are too noisy to trust
MIN_RECOMMENDED_DRAWS = 100


def fit_poisson(
    data: DGPSolution,
    *,
    tol: float = 1e-8,
    max_iter: int = 25,
) -> PoissonFitSolution:
    """
    Maximum-likelihood fit of the model that generated ``data``.

    Fits outcome ~ Poisson(exp(β0 + β1 count_covariate + β2 indicator +
    log_area)) by IRLS. With enough units the estimates should sit within
    a few standard errors of (intercept, slope, indicator_slope).

    Args:
        data: A simulated dataset.
        tol: Relative deviance change for convergence.
        max_iter: Maximum IRLS iterations.

    Returns:
        PoissonFitSolution. If IRLS did not converge the solution is still
        returned, with a warning in ``.warnings``.

    Raises:
        ValidationError: If data is not a DGPSolution or has fewer than
            three units.
        SingularMatrixError: If a covariate is constant, so its
            coefficient cannot be estimated.
        ConvergenceError: If the deviance becomes non-finite.
    """
    tol = check_positive(tol, 'tol')
    max_iter = check_positive_int(max_iter, 'max_iter')

    design = FitDesign.from_solution(data)
    result = CPUIRLSBackend().solve(design, Poisson(), tol=tol, max_iter=max_iter)
    return PoissonFitSolution(_result=result, _design=design)


def check_recovery(
    data: DGPSolution,
    fit: PoissonFitSolution | None = None,
    *,
    conf_level: float = 0.95,
) -> RecoverySolution:
    """
    Compare a fit's Wald intervals with the true parameters.

    For each parameter: z = (estimate - truth) / se and the interval
    estimate ± z_{1-α/2} se.

    Args:
        data: The simulated dataset holding the truth.
        fit: Fit of ``data``. If None, fit_poisson(data) is used.
        conf_level: Interval coverage, in (0, 1).

    Returns:
        RecoverySolution with method='wald'.
    """
    from scipy import stats

    conf_level = check_open_unit_interval(conf_level, 'conf_level')
    _check_solution(data)
    if fit is None:
        fit = fit_poisson(data)
    elif not isinstance(fit, PoissonFitSolution):
        raise ValidationError(
            f"fit: must be a PoissonFitSolution, got {type(fit).__name__}"
        )

    timer = Timer()
    timer.start()

    crit = float(stats.norm.ppf(0.5 + conf_level / 2.0))
    truth = data.params.as_dict()
    estimates = fit.as_dict()

    parameters = []
    for name, se in zip(fit.names, fit.standard_errors):
        se = float(se)
        est = estimates[name]
        lower, upper = est - crit * se, est + crit * se
        parameters.append(ParameterRecovery(
            name=name,
            truth=truth[name],
            estimate=est,
            spread=se,
            lower=lower,
            upper=upper,
            z=(est - truth[name]) / se,
            covered=lower <= truth[name] <= upper,
        ))

    timer.stop()

    result = Result(
        params=RecoveryParams(
            parameters=tuple(parameters),
            conf_level=conf_level,
            method='wald',
        ),
        info={'n': data.n, 'critical_value': crit, 'fit_converged': fit.converged},
        timing=timer.result(),
        backend_name='cpu_wald_recovery',
        warnings=fit.warnings,
    )
    return RecoverySolution(_result=result)


def check_posterior_recovery(
    data: DGPSolution,
    draws: Mapping[str, ArrayLike],
    *,
    conf_level: float = 0.9,
) -> RecoverySolution:
    """
    Compare posterior draws from an external sampler with the truth.

    For each parameter: the central ``conf_level`` interval of the draws,
    whether it holds the truth, z = (posterior mean - truth) / posterior
    sd, and the posterior quantile of the truth (fraction of draws below
    it). Over many simulated datasets these quantiles are uniform when
    the sampler is calibrated.

    Args:
        data: The simulated dataset holding the truth.
        draws: Mapping from 'intercept', 'slope' and 'indicator_slope' to
            1D arrays of posterior draws. Extra keys are ignored.
        conf_level: Interval coverage, in (0, 1).

    Returns:
        RecoverySolution with method='posterior'.

    Raises:
        ValidationError: If a parameter is missing, or its draws are not
            finite or number fewer than two.
    """
    conf_level = check_open_unit_interval(conf_level, 'conf_level')
    _check_solution(data)
    if not isinstance(draws, Mapping):
        raise ValidationError(
            f"draws: must be a mapping of parameter name to draws, got {type(draws).__name__}"
        )
    missing = [name for name in PARAMETER_NAMES if name not in draws]
    if missing:
        raise ValidationError(
            f"draws: missing parameter(s) {missing}. Available: {sorted(draws)}"
        )

    samples = {}
    for name in PARAMETER_NAMES:
        arr = check_array(draws[name], f"draws['{name}']").astype(np.float64)
        check_1d(arr, f"draws['{name}']")
        check_finite(arr, f"draws['{name}']")
        check_min_samples(arr, 2, f"draws['{name}']")
        samples[name] = arr

    n_draws = min(arr.shape[0] for arr in samples.values())
    if n_draws < MIN_RECOMMENDED_DRAWS:
        warnings.warn(
            f"Only {n_draws} posterior draws; interval endpoints and "
            f"quantiles will be noisy (>= {MIN_RECOMMENDED_DRAWS} recommended).",
            UserWarning,
            stacklevel=2,
        )

    timer = Timer()
    timer.start()

    alpha = 1.0 - conf_level
    truth = data.params.as_dict()
    warnings_list: list[str] = []

    parameters = []
    for name, arr in samples.items():
        mean = float(np.mean(arr))
        sd = float(np.std(arr, ddof=1))
        lower, upper = (float(q) for q in np.quantile(arr, [alpha / 2.0, 1.0 - alpha / 2.0]))
        if sd == 0.0:
            warnings_list.append(f"draws['{name}'] are constant; z is undefined")
            z = float('nan')
        else:
            z = (mean - truth[name]) / sd
        parameters.append(ParameterRecovery(
            name=name,
            truth=truth[name],
            estimate=mean,
            spread=sd,
            lower=lower,
            upper=upper,
            z=z,
            covered=lower <= truth[name] <= upper,
            quantile=float(np.mean(arr < truth[name])),
        ))

    timer.stop()

    result = Result(
        params=RecoveryParams(
            parameters=tuple(parameters),
            conf_level=conf_level,
            method='posterior',
        ),
        info={'n': data.n, 'n_draws': {k: int(v.shape[0]) for k, v in samples.items()}},
        timing=timer.result(),
        backend_name='cpu_posterior_recovery',
        warnings=tuple(warnings_list),
    )
    return RecoverySolution(_result=result)


def coverage(
    rng: RandomSource,
    n: int,
    n_sims: int,
    mean_count_rate: float = 8.0,
    *,
    conf_level: float = 0.95,
    priors: Priors | None = None,
    tol: float = 1e-8,
    max_iter: int = 25,
) -> CoverageSolution:
    """
    Frequentist coverage of the reference fit over repeated simulations.

    Each replicate draws fresh parameters and data with simulate(), fits
    them with fit_poisson() and checks the Wald intervals. All replicates
    share one Generator, so a seed reproduces the whole study.

    Replicates whose design is rank-deficient (possible for small n, e.g.
    every indicator equal) or whose fit diverges are skipped and counted
    in ``n_failed``.

    Args:
        rng: numpy Generator or integer seed.
        n: Units per simulated dataset. At least 3.
        n_sims: Number of replicates. Positive integer.
        mean_count_rate: Rate of the count covariate.
        conf_level: Interval coverage, in (0, 1).
        priors: Parameter priors. Defaults to DEFAULT_PRIORS.
        tol, max_iter: IRLS settings.

    Returns:
        CoverageSolution.

    Raises:
        ValidationError: If any argument is invalid.
        NumericalError: If every replicate failed.
    """
    from scipy import stats

    check_rng(rng)
    n = check_positive_int(n, 'n')
    if n < len(PARAMETER_NAMES):
        raise ValidationError(
            f"n: the reference fit needs at least {len(PARAMETER_NAMES)} units, got {n}"
        )
    n_sims = check_positive_int(n_sims, 'n_sims')
    conf_level = check_open_unit_interval(conf_level, 'conf_level')
    tol = check_positive(tol, 'tol')
    max_iter = check_positive_int(max_iter, 'max_iter')
    mean_count_rate = check_mean_count_rate(mean_count_rate)
    if priors is not None and not isinstance(priors, Priors):
        raise ValidationError(
            f"priors: must be a Priors instance, got {type(priors).__name__}"
        )
    gen = resolve_rng(rng)

    timer = Timer()
    timer.start()

    crit = float(stats.norm.ppf(0.5 + conf_level / 2.0))
    backend = CPUIRLSBackend()
    family = Poisson()
    z_rows: list[np.ndarray] = []
    n_failed = 0
    n_not_converged = 0

    for _ in range(n_sims):
        with timer.section('simulate'):
            data = simulate(gen, n, mean_count_rate, priors=priors)
        with timer.section('fit'):
            design = FitDesign.from_solution(data)
            try:
                fit = backend.solve(design, family, tol=tol, max_iter=max_iter)
            except (SingularMatrixError, ConvergenceError):
                n_failed += 1
                continue
        if not fit.params.converged:
            n_not_converged += 1
        z_rows.append(
            (fit.params.coefficients - data.params.as_array())
            / fit.params.standard_errors
        )

    timer.stop()

    if not z_rows:
        raise NumericalError(
            f"All {n_sims} replicates failed to fit; increase n (got {n})"
        )

    z = np.vstack(z_rows)
    covered = np.abs(z) <= crit

    warnings_list: list[str] = []
    if n_failed:
        warnings_list.append(
            f"{n_failed} of {n_sims} replicates skipped: rank-deficient design or diverging fit"
        )
    if n_not_converged:
        warnings_list.append(
            f"{n_not_converged} of {n_sims} replicates did not converge"
        )

    result = Result(
        params=CoverageParams(
            names=PARAMETER_NAMES,
            z=z,
            covered=covered,
            coverage=np.mean(covered, axis=0),
            conf_level=conf_level,
            n_sims=n_sims,
            n_failed=n_failed,
            n_not_converged=n_not_converged,
        ),
        info={
            'n': n,
            'mean_count_rate': float(mean_count_rate),
            'critical_value': crit,
        },
        timing=timer.result(),
        backend_name='cpu_coverage',
        warnings=tuple(warnings_list),
    )
    return CoverageSolution(_result=result)


def _check_solution(data: DGPSolution) -> None:
    if not isinstance(data, DGPSolution):
        raise ValidationError(
            f"data: must be a DGPSolution, got {type(data).__name__}"
        )
