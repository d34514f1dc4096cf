"""
Randomness-source handling.

Every simulation call receives its randomness source explicitly. There is
no module-level generator and nothing here ever calls ``np.random.seed``.

Accepted sources:
    - ``numpy.random.Generator``: used as-is and advanced in place, so a
      caller can thread one generator through many calls.
    - integer seed: a fresh ``Generator`` is built from it, so the same
      seed always reproduces the same draws.
"""

import numbers

import numpy as np

from pydgp.core.exceptions import ValidationError


RandomSource = np.random.Generator | int


def check_rng(rng: object, name: str = 'rng') -> None:
    """
    Verify rng is an accepted randomness source without consuming it.

    Raises:
        ValidationError: If rng is not a Generator or a non-negative int
    """
    if isinstance(rng, np.random.Generator):
        return
    if isinstance(rng, (bool, np.bool_)) or not isinstance(rng, numbers.Integral):
        raise ValidationError(
            f"{name}: must be a numpy.random.Generator or an integer seed, "
            f"got {type(rng).__name__}"
        )
    if rng < 0:
        raise ValidationError(f"{name}: integer seed must be non-negative, got {rng}")


def resolve_rng(rng: RandomSource, name: str = 'rng') -> np.random.Generator:
    """Return a Generator for rng, validating it first."""
    check_rng(rng, name)
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(int(rng))


def derive_seed(rng: np.random.Generator) -> int:
    """
    Draw a 63-bit integer seed from rng.

    Used to seed generators of other frameworks (torch) from a numpy
    source so that one seed still pins down the whole computation.
    """
    return int(rng.integers(0, 2**63 - 1, dtype=np.int64))
