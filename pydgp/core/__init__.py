"""
Core infrastructure for PyDGP.

Shared abstractions used by the simulation and recovery submodules.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    random: Randomness-source resolution (no global RNG state)
    compute: Hardware detection, timing, QR least squares
"""

from pydgp.core.result import Result
from pydgp.core.random import RandomSource, resolve_rng
from pydgp.core.exceptions import (
    PyDGPError,
    ValidationError,
    DimensionError,
    NumericalError,
    SingularMatrixError,
    ConvergenceError,
)

__all__ = [
    # Result
    "Result",
    # Randomness
    "RandomSource",
    "resolve_rng",
    # Exceptions
    "PyDGPError",
    "ValidationError",
    "DimensionError",
    "NumericalError",
    "SingularMatrixError",
    "ConvergenceError",
]
