"""
CPU backend for linear regression.

Solves least squares by QR decomposition (LAPACK via NumPy) followed by
triangular back substitution (SciPy).
"""

from typing import Any

import numpy as np
from scipy.linalg import solve_triangular

from pycausalsim.core.exceptions import SingularMatrixError
from pycausalsim.core.result import Result
from pycausalsim.core.timing import Timer
from pycausalsim.regression.design import Design
from pycausalsim.regression.solution import LinearParams


def _numerical_rank(R: np.ndarray, shape: tuple[int, int]) -> int:
    """Numerical rank from the diagonal of the QR factor R."""
    diag_R = np.abs(np.diag(R))
    if len(diag_R) == 0 or diag_R.max() == 0:
        return 0
    tol = max(shape) * np.finfo(R.dtype).eps * diag_R.max()
    return int(np.sum(diag_R > tol))


class CPUQRBackend:
    """
    CPU backend using QR decomposition.

    Rank-deficient designs raise SingularMatrixError rather than
    returning aliased coefficients.
    """

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: Design) -> Result[LinearParams]:
        """
        Solve OLS via QR decomposition.

        Algorithm:
            1. X = QR
            2. β = R⁻¹ Q'y
            3. Residuals, fitted values, sums of squares

        Raises:
            SingularMatrixError: If X is rank-deficient
        """
        timer = Timer()
        timer.start()

        X = design.X
        y = design.y
        n, p = design.n, design.p

        with timer.section('qr_decomposition'):
            Q, R = np.linalg.qr(X, mode='reduced')
            rank = _numerical_rank(R, X.shape)

        if rank < p:
            raise SingularMatrixError(
                f"Design matrix is rank-deficient: rank={rank}, expected={p}. "
                f"This indicates perfect multicollinearity.",
                matrix_name='X',
                rank=rank,
                expected_rank=p,
            )

        with timer.section('solve'):
            coefficients = solve_triangular(R[:p, :p], (Q.T @ y)[:p], lower=False)

        with timer.section('residuals'):
            fitted_values = X @ coefficients
            residuals = y - fitted_values

        with timer.section('statistics'):
            rss = float(residuals @ residuals)
            tss = float(np.sum((y - np.mean(y)) ** 2))

        timer.stop()

        params = LinearParams(
            coefficients=coefficients,
            residuals=residuals,
            fitted_values=fitted_values,
            rss=rss,
            tss=tss,
            rank=rank,
            df_residual=n - rank,
        )

        info: dict[str, Any] = {
            'method': 'qr',
            'rank': rank,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=(),
        )
