"""
Location and spread summaries for a 1D sample.

These are the quantities used to report simulation uncertainty: mean,
median, sample sd, scaled median absolute deviation, and quantile
intervals. NaN handling is the caller's job; every function here
propagates NaN like its NumPy counterpart.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike

from pycausalsim.core.exceptions import ValidationError
from pycausalsim.core.validation import check_array, check_1d
from pycausalsim.descriptive._quantile_types import sorted_quantile


# 1 / Phi^{-1}(3/4): makes the MAD consistent for sigma under normality
MAD_SCALE = 1.4826


def _as_1d(x: ArrayLike) -> np.ndarray:
    arr = check_array(x, 'x')
    check_1d(arr, 'x')
    return arr


def mean(x: ArrayLike) -> float:
    arr = _as_1d(x)
    if arr.size == 0:
        return float('nan')
    return float(np.mean(arr))


def median(x: ArrayLike) -> float:
    arr = _as_1d(x)
    if arr.size == 0:
        return float('nan')
    return float(np.median(arr))


def sd(x: ArrayLike) -> float:
    """Sample standard deviation (n - 1 denominator); NaN for n < 2."""
    arr = _as_1d(x)
    if arr.size < 2:
        return float('nan')
    return float(np.std(arr, ddof=1))


def mad_sd(x: ArrayLike) -> float:
    """
    Scaled median absolute deviation.

    mad_sd = 1.4826 * median(|x - median(x)|)

    A robust estimate of the standard deviation that ignores the tails.
    """
    arr = _as_1d(x)
    if arr.size == 0:
        return float('nan')
    center = np.median(arr)
    return float(MAD_SCALE * np.median(np.abs(arr - center)))


def quantile(x: ArrayLike, probs: ArrayLike, *, type: int = 7) -> np.ndarray:
    """
    Sample quantiles, Hyndman-Fan continuous types 4-9.

    Type 7 (default) is linear interpolation between order statistics at
    position 1 + p(n - 1), matching R and NumPy defaults.

    Returns NaN for every probability when x contains NaN or is empty.
    """
    arr = _as_1d(x)
    if np.isnan(arr).any():
        return np.full(np.size(probs), np.nan)
    return sorted_quantile(np.sort(arr), np.asarray(probs), qtype=type)


def quantile_interval(
    x: ArrayLike,
    p_low: float = 0.025,
    p_high: float = 0.975,
    *,
    type: int = 7,
) -> tuple[float, float]:
    """
    Pair of type-7 quantiles bounding the central mass of x.

    Raises:
        ValidationError: If p_low > p_high
    """
    if p_low > p_high:
        raise ValidationError(
            f"p_low ({p_low}) must not exceed p_high ({p_high})"
        )
    lo, hi = quantile(x, [p_low, p_high], type=type)
    return float(lo), float(hi)
