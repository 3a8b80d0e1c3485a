"""
Tests for the least-squares collaborator used by the simulators.
"""

import numpy as np
import pytest

from pycausalsim.core.exceptions import (
    DimensionError,
    SingularMatrixError,
    ValidationError,
)
from pycausalsim.regression import Formula, fit, fit_formula


class TestFit:

    def test_exact_line(self):
        x = np.arange(10.0)
        X = np.column_stack([np.ones(10), x])
        y = 3.0 + 2.0 * x
        sol = fit(X, y)
        np.testing.assert_allclose(sol.coefficients, [3.0, 2.0], atol=1e-10)
        np.testing.assert_allclose(sol.fitted_values, y, atol=1e-10)
        np.testing.assert_allclose(sol.residuals, 0.0, atol=1e-10)
        assert sol.r_squared == pytest.approx(1.0)

    def test_matches_lstsq(self, rng):
        X = np.column_stack([np.ones(50), rng.standard_normal((50, 2))])
        y = X @ [1.0, -2.0, 0.5] + rng.standard_normal(50)
        sol = fit(X, y)
        expected, *_ = np.linalg.lstsq(X, y, rcond=None)
        np.testing.assert_allclose(sol.coefficients, expected, rtol=1e-10)
        np.testing.assert_allclose(sol.fitted_values + sol.residuals, y)
        assert sol.df_residual == 47
        assert np.all(sol.standard_errors > 0)

    def test_collinear_raises(self, rng):
        x1 = rng.standard_normal(20)
        X = np.column_stack([np.ones(20), x1, 2.0 * x1])
        with pytest.raises(SingularMatrixError) as exc:
            fit(X, rng.standard_normal(20))
        assert exc.value.rank == 2
        assert exc.value.expected_rank == 3

    def test_length_mismatch(self):
        with pytest.raises(DimensionError):
            fit(np.ones((5, 1)), np.ones(4))

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="non-finite"):
            fit(np.ones((3, 1)), [1.0, np.nan, 2.0])

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            fit(np.ones((3, 1)), np.ones(3), backend="gpu")


class TestFormula:

    def test_parse_intercept(self):
        f = Formula.parse("y ~ a + b")
        assert f.response == "y"
        assert f.terms == ("a", "b")
        assert f.intercept
        assert f.names == ("(Intercept)", "a", "b")

    @pytest.mark.parametrize("text", ["y ~ a - 1", "y ~ 0 + a", "y ~ a -1"])
    def test_parse_no_intercept(self, text):
        f = Formula.parse(text)
        assert not f.intercept
        assert f.terms == ("a",)

    @pytest.mark.parametrize("text", ["y a", "~ a", "y ~ a - b"])
    def test_parse_malformed(self, text):
        with pytest.raises(ValidationError):
            Formula.parse(text)

    def test_fit_formula(self, rng):
        x = rng.standard_normal(40)
        data = {'y': 1.0 + 4.0 * x, 'x': x}
        sol = fit_formula(data, "y ~ x")
        assert sol.names == ("(Intercept)", "x")
        assert sol.coefficient('x') == pytest.approx(4.0)
        assert sol.coefficient('(Intercept)') == pytest.approx(1.0)
        assert "x" in sol.summary()

    def test_fit_formula_unknown_column(self):
        with pytest.raises(ValidationError, match="unknown columns"):
            fit_formula({'y': [1.0, 2.0]}, "y ~ z")

    def test_coefficient_unknown_name(self):
        sol = fit_formula({'y': [1.0, 2.0, 4.0], 'x': [0.0, 1.0, 2.0]}, "y ~ x")
        with pytest.raises(KeyError):
            sol.coefficient('w')
