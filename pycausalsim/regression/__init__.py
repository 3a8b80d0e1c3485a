"""
Linear regression used by the simulators.

Public API:
    fit(X, y) -> LinearSolution
    fit_formula(data, "y ~ a + b") -> LinearSolution

The residual bootstrap and the regression-adjusted treatment-effect
estimator call these; they only need coefficients, fitted values and
residuals.

Example:
    >>> from pycausalsim.regression import fit_formula
    >>> result = fit_formula({'y': y, 'x': x}, "y ~ x")
    >>> print(result.summary())
"""

from pycausalsim.regression.design import Design, Formula
from pycausalsim.regression.solution import LinearSolution, LinearParams
from pycausalsim.regression.solvers import fit, fit_formula

__all__ = [
    "fit",
    "fit_formula",
    "Design",
    "Formula",
    "LinearSolution",
    "LinearParams",
]
