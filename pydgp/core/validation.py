"""
Argument validators for PyDGP.

Each validator checks one property and raises at once, naming the
argument and the value it received. Nothing is repaired silently: a
fractional count or a 2.0 sample size is an error, not a rounding job.
Entry points run all of their validators before the randomness source
is touched, so a rejected call draws nothing.
"""

import math
import numbers
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pydgp.core.exceptions import ValidationError, DimensionError


def check_array(array: ArrayLike, name: str) -> NDArray[Any]:
    """
    Convert to a numeric numpy array, keeping integer dtypes.

    Booleans become int64 so a boolean mask is a valid indicator. Integer
    dtypes are kept so count checks can tell 3 from 3.5.

    Raises:
        ValidationError: If array is ragged, mixed, complex or non-numeric
    """
    try:
        arr = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: not array-like ({e})") from e

    if arr.dtype == np.bool_:
        return arr.astype(np.int64)
    if arr.dtype == object:
        raise ValidationError(
            f"{name}: got object dtype; values must all be numbers"
        )
    if np.issubdtype(arr.dtype, np.complexfloating):
        raise ValidationError(f"{name}: complex values are not supported, got {arr.dtype}")
    if not (np.issubdtype(arr.dtype, np.integer) or np.issubdtype(arr.dtype, np.floating)):
        raise ValidationError(f"{name}: non-numeric dtype {arr.dtype}")
    return arr


def check_finite(array: NDArray[Any], name: str) -> None:
    """Raise ValidationError if array holds NaN or ±Inf."""
    nan = np.isnan(array)
    inf = np.isinf(array)
    if nan.any() or inf.any():
        raise ValidationError(
            f"{name}: contains non-finite values "
            f"({int(nan.sum())} NaN, {int(inf.sum())} Inf)"
        )


def check_1d(array: NDArray[Any], name: str) -> None:
    """Raise DimensionError unless array.ndim == 1."""
    if array.ndim != 1:
        raise DimensionError(
            f"{name}: expected 1D array, got shape {array.shape}"
        )


def check_consistent_length(*arrays: NDArray[Any], names: tuple[str, ...]) -> None:
    """
    Verify all arrays share their first dimension.

    Raises:
        ValueError: If names and arrays differ in number (a caller bug)
        DimensionError: If the lengths differ
    """
    if len(arrays) != len(names):
        raise ValueError(f"got {len(arrays)} arrays but {len(names)} names")

    lengths = {name: arr.shape[0] for name, arr in zip(names, arrays)}
    if len(set(lengths.values())) > 1:
        details = ", ".join(f"{k}={v}" for k, v in lengths.items())
        raise DimensionError(f"Inconsistent lengths: {details}")


def check_min_samples(array: NDArray[Any], min_samples: int, name: str) -> None:
    """Raise ValidationError if array has fewer than min_samples rows."""
    if array.shape[0] < min_samples:
        raise ValidationError(
            f"{name}: needs at least {min_samples} values, got {array.shape[0]}"
        )


def check_positive_int(value: Any, name: str) -> int:
    """
    Verify value is a positive integer and return it as a Python int.

    Booleans and integral floats (5.0) are rejected: a sample size is a
    count, not something to be coerced.

    Raises:
        ValidationError: If value is not an integer >= 1
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Integral):
        raise ValidationError(
            f"{name}: must be a positive integer, got {type(value).__name__} {value!r}"
        )
    if value < 1:
        raise ValidationError(f"{name}: must be a positive integer, got {value}")
    return int(value)


def check_positive(value: Any, name: str) -> float:
    """
    Verify value is a finite, strictly positive real number.

    Raises:
        ValidationError: If value is not a real number, not finite, or <= 0
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        raise ValidationError(
            f"{name}: must be a positive real number, got {type(value).__name__} {value!r}"
        )
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{name}: must be finite and > 0, got {value}")
    return value


def check_probability(value: Any, name: str) -> float:
    """
    Verify value is a real number in [0, 1].

    Raises:
        ValidationError: If value is outside [0, 1] or not a real number
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        raise ValidationError(
            f"{name}: must be a probability, got {type(value).__name__} {value!r}"
        )
    value = float(value)
    if not 0.0 <= value <= 1.0:
        raise ValidationError(f"{name}: must be in [0, 1], got {value}")
    return value


def check_open_unit_interval(value: Any, name: str) -> float:
    """
    Verify value is a real number strictly between 0 and 1.

    Used for confidence levels, where 0 and 1 give degenerate intervals.

    Raises:
        ValidationError: If value is not in (0, 1)
    """
    value = check_probability(value, name)
    if value in (0.0, 1.0):
        raise ValidationError(f"{name}: must be strictly between 0 and 1, got {value}")
    return value


def check_binary(array: NDArray[Any], name: str) -> None:
    """
    Verify every element is 0 or 1.

    Raises:
        ValidationError: If any element is outside {0, 1}
    """
    bad = ~np.isin(array, (0, 1))
    if np.any(bad):
        examples = np.unique(array[bad])[:5].tolist()
        raise ValidationError(
            f"{name}: must contain only 0 and 1, found {examples}"
        )


def check_nonnegative_integers(array: NDArray[Any], name: str) -> None:
    """
    Verify every element is a non-negative whole number.

    Float arrays are accepted when every value is integral (3.0), since
    count covariates often arrive through pandas as float64.

    Raises:
        ValidationError: If any element is negative, fractional or too
            large for int64
    """
    if np.any(array < 0):
        raise ValidationError(
            f"{name}: must be non-negative, found minimum {array.min()}"
        )
    if np.issubdtype(array.dtype, np.floating) and np.any(array != np.floor(array)):
        raise ValidationError(f"{name}: must contain whole numbers only")

    if np.issubdtype(array.dtype, np.floating):
        too_large = np.any(array >= 2.0 ** 63)
    elif np.issubdtype(array.dtype, np.unsignedinteger):
        too_large = np.any(array > np.uint64(np.iinfo(np.int64).max))
    else:
        too_large = False
    if too_large:
        raise ValidationError(
            f"{name}: values must fit in int64, found maximum {array.max():g}"
        )
