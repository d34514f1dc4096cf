"""
Exception hierarchy for PyDGP.

Everything the library raises on purpose derives from PyDGPError, so
callers can catch library errors without catching programming errors.

    PyDGPError
    ├── ValidationError          bad arguments, raised before any draw
    │   └── DimensionError       wrong ndim or mismatched lengths
    ├── NumericalError           a rate or fit left floating-point range
    │   └── SingularMatrixError  rank-deficient design in the reference fit
    └── ConvergenceError         IRLS diverged

Messages name the offending argument and the value received. Diagnostic
details are kept as attributes rather than only in the message.
"""


class PyDGPError(Exception):
    """Base exception for all PyDGP errors."""


class ValidationError(PyDGPError):
    """
    Invalid argument.

    Raised before any random draws are made, so a failed call never
    produces partial output or advances a caller's Generator.
    """


class DimensionError(ValidationError):
    """Covariate arrays are not 1D or have different lengths."""


class NumericalError(PyDGPError):
    """
    A computation left the range floating point can represent.

    Raised, for instance, when exp(linear predictor) overflows or
    underflows so that a Poisson rate is unusable.
    """


class SingularMatrixError(NumericalError):
    """
    The reference fit's design matrix is rank-deficient.

    Happens when a covariate is constant across units, e.g. every
    indicator is 1, so its coefficient cannot be estimated.

    Attributes:
        matrix_name: Which matrix, e.g. 'X'
        rank: Numerical rank found
        expected_rank: Number of columns
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank


class ConvergenceError(PyDGPError):
    """
    IRLS could not continue.

    Non-convergence within max_iter is only a warning on the result; this
    error is for fits that cannot produce a result at all.

    Attributes:
        iterations: Iterations completed
        final_change: Last relative deviance change, if known
        reason: Short tag, e.g. 'diverging'
        threshold: The tolerance in force
    """

    def __init__(
        self,
        message: str,
        iterations: int,
        final_change: float | None = None,
        reason: str | None = None,
        threshold: float | None = None,
    ):
        super().__init__(message)
        self.iterations = iterations
        self.final_change = final_change
        self.reason = reason
        self.threshold = threshold
