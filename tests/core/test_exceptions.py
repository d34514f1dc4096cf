"""
Tests for the PyDGP exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via PyDGPError)
    - Diagnostic attributes on SingularMatrixError and ConvergenceError
    - Default attribute values (None for optional attributes)
"""

import pytest

from pydgp.core.exceptions import (
    ConvergenceError,
    DimensionError,
    NumericalError,
    PyDGPError,
    SingularMatrixError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via PyDGPError."""

    def test_validation_error_is_pydgp_error(self):
        with pytest.raises(PyDGPError):
            raise ValidationError("bad input")

    def test_dimension_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise DimensionError("wrong shape")

    def test_numerical_error_is_pydgp_error(self):
        with pytest.raises(PyDGPError):
            raise NumericalError("overflow")

    def test_singular_matrix_error_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise SingularMatrixError("singular")

    def test_convergence_error_is_not_numerical_error(self):
        err = ConvergenceError("did not converge", iterations=25)
        assert isinstance(err, PyDGPError)
        assert not isinstance(err, NumericalError)

    def test_validation_error_is_not_numerical_error(self):
        assert not isinstance(ValidationError("x"), NumericalError)


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestSingularMatrixError:

    def test_all_attributes(self):
        err = SingularMatrixError(
            "X is rank-deficient",
            matrix_name="X",
            rank=2,
            expected_rank=3,
        )
        assert str(err) == "X is rank-deficient"
        assert err.matrix_name == "X"
        assert err.rank == 2
        assert err.expected_rank == 3

    def test_defaults_are_none(self):
        err = SingularMatrixError("singular")
        assert err.matrix_name is None
        assert err.rank is None
        assert err.expected_rank is None


class TestConvergenceError:

    def test_all_attributes(self):
        err = ConvergenceError(
            "IRLS diverged",
            iterations=7,
            final_change=float('inf'),
            reason='diverging',
            threshold=1e-8,
        )
        assert err.iterations == 7
        assert err.final_change == float('inf')
        assert err.reason == 'diverging'
        assert err.threshold == 1e-8

    def test_defaults_are_none(self):
        err = ConvergenceError("slow", iterations=25)
        assert err.final_change is None
        assert err.reason is None
        assert err.threshold is None
