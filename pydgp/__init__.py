"""
PyDGP: synthetic data-generating processes for model-recovery checks.

Simulate datasets with known ground-truth parameters, fit them, and check
that the truth is recovered. Built for the Bayesian-workshop tutorials on
Poisson count regression.

Submodules:
    simulation: Poisson regression DGP (simulate, simulate_outcomes)
    recovery: Reference Poisson fit and recovery/coverage checks
"""

__version__ = "0.1.0"

from pydgp import simulation
from pydgp import recovery
from pydgp.simulation import simulate, simulate_outcomes

__all__ = [
    "__version__",
    "simulation",
    "recovery",
    "simulate",
    "simulate_outcomes",
]
