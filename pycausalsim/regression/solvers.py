"""
Solver dispatch for regression.

This module provides fit() and fit_formula() (public API) and backend
selection.
"""

from typing import Any, Literal, Mapping

from numpy.typing import ArrayLike

from pycausalsim.regression.design import Design, Formula
from pycausalsim.regression.solution import LinearSolution
from pycausalsim.regression.backends.cpu import CPUQRBackend


BackendChoice = Literal['auto', 'cpu', 'cpu_qr']


def fit(
    X: ArrayLike,
    y: ArrayLike,
    *,
    backend: BackendChoice = 'auto',
) -> LinearSolution:
    """
    Fit a linear regression model.

    Solves the ordinary least squares problem:
        min_β ||y - Xβ||²

    X is used as given; add a column of ones for an intercept.

    Args:
        X: Design matrix (n x p). Can be any array-like.
        y: Response vector (n,). Can be any array-like.
        backend: 'auto', 'cpu' or 'cpu_qr' (all QR on CPU).

    Returns:
        LinearSolution with coefficients, fitted values and residuals

    Raises:
        ValidationError: If inputs are invalid
        DimensionError: If X and y have inconsistent dimensions
        SingularMatrixError: If X is rank-deficient
    """
    design = Design.from_arrays(X, y)
    return _solve(design, backend)


def fit_formula(
    data: Mapping[str, Any],
    formula: str | Formula,
    *,
    backend: BackendChoice = 'auto',
) -> LinearSolution:
    """
    Fit a linear regression from named columns.

    Example:
        >>> sol = fit_formula({'y': y, 'x': x}, "y ~ x")
        >>> sol.coefficient('x')
    """
    design = Design.from_formula(data, formula)
    return _solve(design, backend)


def _solve(design: Design, backend: BackendChoice) -> LinearSolution:
    backend_impl = _get_backend(backend)
    result = backend_impl.solve(design)
    return LinearSolution(_result=result, _design=design)


def _get_backend(choice: BackendChoice):
    """
    Select and instantiate the appropriate backend.

    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('auto', 'cpu', 'cpu_qr'):
        return CPUQRBackend()
    raise ValueError(f"Unknown backend: {choice!r}")
