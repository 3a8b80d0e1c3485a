"""
Regression Design.

Design holds the validated design matrix X and response y. It is built
either from arrays or from a mapping of named columns plus a
"y ~ a + b" formula.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from pycausalsim.core.exceptions import ValidationError
from pycausalsim.core.validation import (
    check_array,
    check_finite,
    check_2d,
    check_1d,
    check_consistent_length,
    check_min_samples,
)


@dataclass(frozen=True)
class Formula:
    """Parsed "response ~ term + term" formula."""
    response: str
    terms: tuple[str, ...]
    intercept: bool

    @classmethod
    def parse(cls, formula: str) -> Formula:
        """
        Parse a minimal Wilkinson formula.

        Supports additive terms only. "- 1" or a "0" term drops the
        intercept.

        Raises:
            ValidationError: If the formula is malformed
        """
        if formula.count('~') != 1:
            raise ValidationError(
                f"formula: expected exactly one '~', got {formula!r}"
            )
        lhs, rhs = (side.strip() for side in formula.split('~'))
        if not lhs:
            raise ValidationError(f"formula: missing response in {formula!r}")

        intercept = True
        rhs = rhs.replace('-', '+-')
        terms: list[str] = []
        for raw in rhs.split('+'):
            term = raw.strip()
            if not term:
                continue
            if term in ('-1', '- 1', '0'):
                intercept = False
            elif term == '1':
                intercept = True
            elif term.startswith('-'):
                raise ValidationError(
                    f"formula: only '- 1' may be subtracted, got {term!r}"
                )
            else:
                terms.append(term)

        return cls(response=lhs, terms=tuple(terms), intercept=intercept)

    @property
    def names(self) -> tuple[str, ...]:
        """Coefficient names in design-matrix column order."""
        if self.intercept:
            return ('(Intercept)',) + self.terms
        return self.terms


@dataclass(frozen=True)
class Design:
    """
    Regression design matrix specification.

    Immutable after construction.

    Construction:
        Design.from_arrays(X, y)                    # Direct from arrays
        Design.from_formula(data, "y ~ a + b")      # Named columns
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _n: int
    _p: int
    _names: tuple[str, ...] | None = None

    @classmethod
    def from_arrays(cls, X, y) -> Design:
        """Build Design directly from arrays."""
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')
        return cls._build(X_arr, y_arr, names=None)

    @classmethod
    def from_formula(
        cls,
        data: Mapping[str, Any],
        formula: str | Formula,
    ) -> Design:
        """
        Build Design from named columns and a formula.

        Args:
            data: Mapping of column name to 1D array-like
            formula: "y ~ a + b" string or parsed Formula

        Raises:
            ValidationError: If a referenced column is missing
        """
        parsed = formula if isinstance(formula, Formula) else Formula.parse(formula)

        missing = [
            name for name in (parsed.response,) + parsed.terms
            if name not in data
        ]
        if missing:
            raise ValidationError(
                f"formula references unknown columns: {missing}"
            )

        y_arr = check_array(data[parsed.response], parsed.response)
        n = y_arr.shape[0]

        columns = [np.ones(n)] if parsed.intercept else []
        for term in parsed.terms:
            columns.append(check_array(data[term], term).ravel())

        if not columns:
            raise ValidationError("formula: model has no terms")

        X_arr = np.column_stack(columns)
        return cls._build(X_arr, y_arr, names=parsed.names)

    @classmethod
    def _build(
        cls,
        X: NDArray,
        y: NDArray,
        names: tuple[str, ...] | None,
    ) -> Design:
        """Internal builder with validation."""
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if y.ndim == 2 and y.shape[1] == 1:
            y = y.ravel()

        check_2d(X, 'X')
        check_1d(y, 'y')
        check_finite(X, 'X')
        check_finite(y, 'y')
        check_consistent_length(X, y, names=('X', 'y'))

        n, p = X.shape
        check_min_samples(X, p, 'X')

        return cls(_X=X, _y=y, _n=n, _p=p, _names=names)

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix (n x p)."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._n

    @property
    def p(self) -> int:
        """Number of predictors."""
        return self._p

    @property
    def names(self) -> tuple[str, ...] | None:
        """Coefficient names, when built from a formula."""
        return self._names

    def XtX(self) -> NDArray[np.floating[Any]]:
        """Compute X'X (for standard errors)."""
        return self._X.T @ self._X
