"""
Generic result container for all PyDGP computations.

The Result class provides a standardized envelope that all domain-specific
results use. Simulations, reference fits and recovery checks all return a
Result wrapped in a domain Solution, so timing, warnings and provenance are
reported the same way everywhere.

Design decisions:
    - Generic over parameter payload P for type safety
    - info dict for flexible metadata (n, method, converged, ...)
    - timing is optional (don't burden unit tests)
    - provenance records library versions for reproducibility
    - Immutable (frozen=True)
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any
import platform

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    """Version metadata attached to every Result unless overridden."""
    import numpy as np
    from pydgp import __version__

    return {
        'pydgp_version': __version__,
        'numpy_version': np.__version__,
        'python_version': platform.python_version(),
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope for simulations and fits.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific payload (drawn parameters and data, coefficients, ...)
        info: Structured metadata (method, n, convergence, ...)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions used to produce the result

    Examples:
        >>> Result(
        ...     params=SimulationParams(...),
        ...     info={'method': 'poisson_dgp', 'n': 100},
        ...     timing={'total_seconds': 0.001},
        ...     backend_name='cpu_poisson_dgp'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
