"""
Linear algebra kernels for PyDGP.

CPU only: NumPy/SciPy (LAPACK under the hood). Each operation returns a
structured result dataclass and raises immediately on rank deficiency.
"""

from pydgp.core.compute.linalg.qr import (
    QRResult,
    qr_cpu,
    qr_solve_cpu,
    unscaled_covariance,
)

__all__ = [
    "QRResult",
    "qr_cpu",
    "qr_solve_cpu",
    "unscaled_covariance",
]
