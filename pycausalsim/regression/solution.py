"""
Regression solution types.

Contains the parameter payload and user-facing solution wrapper.
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pycausalsim.core.result import Result

if TYPE_CHECKING:
    from pycausalsim.regression.design import Design


@dataclass(frozen=True)
class LinearParams:
    """
    Parameter payload for linear regression.

    This is the immutable data computed by backends.
    """
    coefficients: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rss: float
    tss: float
    rank: int
    df_residual: int


@dataclass
class LinearSolution:
    """
    User-facing regression results.

    Wraps the backend Result and provides accessors for coefficients,
    fitted values, residuals and standard errors.
    """
    _result: Result[LinearParams]
    _design: 'Design'

    _standard_errors: NDArray[np.floating[Any]] | None = None

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def names(self) -> tuple[str, ...]:
        """Coefficient names; positional labels when fit from arrays."""
        if self._design.names is not None:
            return self._design.names
        return tuple(f"x{i}" for i in range(self._design.p))

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        return self._result.params.tss

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - (self.rss / self.tss)

    @property
    def residual_std_error(self) -> float:
        df = self._result.params.df_residual
        if df <= 0:
            return 0.0
        return float(np.sqrt(self.rss / df))

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """
        Standard errors of coefficients.

        SE(β) = sqrt(diag(σ² (X'X)⁻¹)); NaN when there are no residual
        degrees of freedom.
        """
        if self._standard_errors is not None:
            return self._standard_errors

        df = self._result.params.df_residual
        p = len(self.coefficients)

        if df <= 0:
            self._standard_errors = np.full(p, np.nan, dtype=np.float64)
            return self._standard_errors

        sigma_sq = self.rss / df
        XtX_inv = np.linalg.inv(self._design.XtX())
        self._standard_errors = np.sqrt(sigma_sq * np.diag(XtX_inv))
        return self._standard_errors

    def coefficient(self, name: str) -> float:
        """Look up a single coefficient by name."""
        try:
            idx = self.names.index(name)
        except ValueError:
            raise KeyError(f"No coefficient named {name!r}; have {self.names}") from None
        return float(self.coefficients[idx])

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def df_residual(self) -> int:
        return self._result.params.df_residual

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    def summary(self) -> str:
        """Coefficient table with standard errors."""
        lines = [
            "Linear Regression Results",
            "=" * 52,
            f"Observations: {self._design.n}",
            f"R-squared: {self.r_squared:.6f}",
            f"Residual Std. Error: {self.residual_std_error:.6f} on {self.df_residual} DF",
            "",
            f"{'':<14} {'Estimate':>14} {'Std.Error':>12}",
            "-" * 52,
        ]
        for name, coef, se in zip(self.names, self.coefficients, self.standard_errors):
            se_str = f"{se:12.6f}" if not np.isnan(se) else "          NA"
            lines.append(f"{name:<14} {coef:14.6f} {se_str}")
        lines.append("-" * 52)
        lines.append(f"Backend: {self.backend_name}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"LinearSolution(n={self._design.n}, p={self._design.p}, "
            f"r_squared={self.r_squared:.4f})"
        )
