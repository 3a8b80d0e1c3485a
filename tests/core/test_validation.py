"""
Tests for input validation utilities.
"""

import numpy as np
import pytest

from pycausalsim.core.exceptions import DimensionError, ValidationError
from pycausalsim.core.validation import (
    check_1d,
    check_2d,
    check_array,
    check_consistent_length,
    check_finite,
    check_int,
    check_min_samples,
    check_positive_int,
    check_probability,
    check_seed,
)


class TestCheckArray:
    """check_array converts to float64 and rejects non-numeric data."""

    def test_list_to_float_array(self):
        result = check_array([1, 2, 3], "x")
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [1.0, 2.0, 3.0])

    def test_bool_accepted(self):
        result = check_array([True, False], "z")
        np.testing.assert_array_equal(result, [1.0, 0.0])

    def test_strings_rejected(self):
        with pytest.raises(ValidationError, match="non-numeric"):
            check_array(["a", "b"], "x")

    def test_mixed_rejected(self):
        with pytest.raises(ValidationError, match="x"):
            check_array([1, "a", None], "x")


class TestShapeChecks:

    def test_check_1d_passes(self):
        check_1d(np.zeros(3), "x")

    def test_check_1d_fails(self):
        with pytest.raises(DimensionError, match="expected 1D"):
            check_1d(np.zeros((3, 2)), "x")

    def test_check_2d_fails(self):
        with pytest.raises(DimensionError, match="expected 2D"):
            check_2d(np.zeros(3), "X")

    def test_consistent_length(self):
        with pytest.raises(DimensionError, match="y0=3, y1=4"):
            check_consistent_length(np.zeros(3), np.zeros(4), names=("y0", "y1"))

    def test_consistent_length_name_mismatch(self):
        with pytest.raises(ValueError):
            check_consistent_length(np.zeros(3), names=("a", "b"))

    def test_min_samples(self):
        with pytest.raises(ValidationError, match="at least 2"):
            check_min_samples(np.zeros(1), 2, "y0")


class TestScalarChecks:

    def test_finite(self):
        with pytest.raises(ValidationError, match="1 NaN, 1 Inf"):
            check_finite(np.array([1.0, np.nan, np.inf]), "x")

    @pytest.mark.parametrize("value", [0, -3, 1.5, True, "10"])
    def test_positive_int_rejects(self, value):
        with pytest.raises(ValidationError):
            check_positive_int(value, "T")

    def test_positive_int_accepts_numpy(self):
        assert check_positive_int(np.int64(5), "T") == 5

    @pytest.mark.parametrize("p", [0.0, 1.0, -0.1, 1.2])
    def test_probability_open(self, p):
        with pytest.raises(ValidationError):
            check_probability(p, "p")

    def test_probability_closed(self):
        assert check_probability(0.0, "p", open_interval=False) == 0.0

    @pytest.mark.parametrize("value", [4.9, 4.0, True, "4"])
    def test_int_rejects_non_integers(self, value):
        with pytest.raises(ValidationError, match="expected an integer"):
            check_int(value, "n_treated")

    def test_int_allows_any_sign(self):
        assert check_int(-2, "k") == -2
        assert check_int(np.int32(0), "k") == 0

    def test_seed_accepts_none_and_large(self):
        assert check_seed(None) is None
        assert check_seed(2**100) == 2**100

    @pytest.mark.parametrize("seed", [-1, 1.5, "7"])
    def test_seed_rejects(self, seed):
        with pytest.raises(ValidationError, match="seed"):
            check_seed(seed)
