"""
Continuous sample quantiles (Hyndman & Fan types 4-9).

Each type is linear interpolation between order statistics with a
different plotting position p(k) = (k - a) / (n + 1 - a - b). Type 7
(a = b = 1) is the default of R's quantile() and numpy.quantile().

Reference:
    Hyndman, R.J. and Fan, Y. (1996) "Sample Quantiles in Statistical
    Packages", The American Statistician, 50(4), 361-365.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pycausalsim.core.exceptions import ValidationError


# (a, b) plotting-position constants per type
_PLOTTING_POSITIONS = {
    4: (0.0, 1.0),
    5: (0.5, 0.5),
    6: (0.0, 0.0),
    7: (1.0, 1.0),
    8: (1.0 / 3.0, 1.0 / 3.0),
    9: (3.0 / 8.0, 3.0 / 8.0),
}

# Absorbs rounding in n*p so that exact order statistics are hit exactly.
_FUZZ = 4.0 * np.finfo(np.float64).eps


def sorted_quantile(x: NDArray, probs: NDArray, qtype: int = 7) -> NDArray:
    """
    Quantiles of an already-sorted, NaN-free 1D array.

    Args:
        x: Sorted values.
        probs: Probabilities in [0, 1].
        qtype: Hyndman-Fan type, 4 through 9.

    Returns:
        One quantile per probability; NaN everywhere when x is empty.
    """
    if qtype not in _PLOTTING_POSITIONS:
        raise ValidationError(f"Quantile type must be 4-9, got {qtype}")

    probs = np.atleast_1d(np.asarray(probs, dtype=np.float64))
    if np.any((probs < 0.0) | (probs > 1.0)):
        raise ValidationError(f"probs must lie in [0, 1], got {probs.tolist()}")

    n = len(x)
    if n == 0:
        return np.full(len(probs), np.nan)
    if n == 1:
        return np.full(len(probs), float(x[0]))

    a, b = _PLOTTING_POSITIONS[qtype]
    nppm = a + probs * (n + 1.0 - a - b)
    j = np.floor(nppm + _FUZZ).astype(int)
    h = nppm - j
    h = np.where(np.abs(h) < _FUZZ, 0.0, h)

    # nppm is 1-indexed: position j sits at x[j - 1]
    lo = np.clip(j - 1, 0, n - 1)
    hi = np.clip(j, 0, n - 1)
    result = (1.0 - h) * x[lo] + h * x[hi]
    result = np.where(j < 1, x[0], result)
    result = np.where(j >= n, x[n - 1], result)
    return result
