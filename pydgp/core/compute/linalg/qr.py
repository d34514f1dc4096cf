"""
QR decomposition and least squares.

The reference Poisson fit solves one weighted least squares problem per
IRLS iteration through these functions.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray

from pydgp.core.exceptions import SingularMatrixError


@dataclass(frozen=True)
class QRResult:
    """
    Result of a reduced QR decomposition.

    Attributes:
        Q: Orthonormal columns (n x p)
        R: Upper triangular matrix (p x p)
        rank: Numerical rank determined from the R diagonal
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    rank: int


def qr_cpu(X: NDArray[np.floating[Any]]) -> QRResult:
    """
    Reduced QR decomposition using LAPACK (via NumPy).

    Rank is the number of |R_ii| above max(n, p) * eps * |R_00|.
    """
    Q, R = np.linalg.qr(X, mode='reduced')

    diag_R = np.abs(np.diag(R))
    if len(diag_R) > 0 and diag_R[0] > 0:
        tol = max(X.shape) * np.finfo(X.dtype).eps * diag_R[0]
        rank = int(np.sum(diag_R > tol))
    else:
        rank = 0

    return QRResult(Q=Q, R=R, rank=rank)


def qr_solve_cpu(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
) -> tuple[NDArray[np.floating[Any]], QRResult]:
    """
    Solve min_β ||y - Xβ||² via QR decomposition.

        X = QR
        β = R⁻¹ Q'y

    Args:
        X: Design matrix (n x p), n >= p
        y: Response vector (n,)

    Returns:
        (β, QRResult). The factorization is returned so callers can
        form (X'X)⁻¹ = R⁻¹ R⁻ᵀ without refactoring.

    Raises:
        SingularMatrixError: If X is rank-deficient
    """
    from scipy.linalg import solve_triangular

    n, p = X.shape
    qr_result = qr_cpu(X)

    if qr_result.rank < p:
        raise SingularMatrixError(
            f"Design matrix is rank-deficient: rank={qr_result.rank}, expected={p}. "
            f"Check for a covariate that is constant across all units.",
            matrix_name='X',
            rank=qr_result.rank,
            expected_rank=p
        )

    Qty = qr_result.Q.T @ y
    beta = solve_triangular(qr_result.R[:p, :p], Qty[:p], lower=False)

    return beta, qr_result


def unscaled_covariance(qr_result: QRResult) -> NDArray[np.floating[Any]]:
    """
    (X'X)⁻¹ from the R factor of X.

    Since X'X = R'R, the inverse is R⁻¹ R⁻ᵀ.
    """
    from scipy.linalg import solve_triangular

    p = qr_result.R.shape[1]
    R_inv = solve_triangular(qr_result.R[:p, :p], np.eye(p), lower=False)
    return R_inv @ R_inv.T
