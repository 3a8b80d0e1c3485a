"""
Bootstrap confidence interval computation.

Methods, all on the valid (non-missing) replicates:
- perc: percentile interval, type-7 quantiles
- basic: basic (pivotal) bootstrap interval
- normal: bias-corrected normal approximation
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy import stats as sp_stats

from pycausalsim import descriptive
from pycausalsim.core.exceptions import ValidationError

if TYPE_CHECKING:
    from pycausalsim.montecarlo.solution import BootstrapSolution


CI_TYPES = ("perc", "basic", "normal")


def compute_ci(
    boot_out: 'BootstrapSolution',
    types: tuple[str, ...],
    conf_level: float,
) -> dict[str, tuple[float, float]]:
    """
    Compute bootstrap confidence intervals.

    Returns:
        Dict mapping CI type name to (lower, upper). Both bounds are NaN
        when fewer than two replicates are valid.
    """
    t0 = boot_out.t0
    t = boot_out.distribution.valid
    alpha = 1.0 - conf_level

    ci_dict: dict[str, tuple[float, float]] = {}
    for ci_type in types:
        if ci_type not in CI_TYPES:
            raise ValidationError(
                f"Unknown CI type: {ci_type!r}; expected one of {CI_TYPES}"
            )
        if t.size < 2:
            ci_dict[ci_type] = (float('nan'), float('nan'))
        elif ci_type == "perc":
            ci_dict[ci_type] = _ci_percentile(t, alpha)
        elif ci_type == "basic":
            ci_dict[ci_type] = _ci_basic(t0, t, alpha)
        else:
            ci_dict[ci_type] = _ci_normal(t0, t, alpha)

    return ci_dict


def _ci_percentile(t: np.ndarray, alpha: float) -> tuple[float, float]:
    """CI = [Q(alpha/2), Q(1-alpha/2)]"""
    return descriptive.quantile_interval(t, alpha / 2.0, 1.0 - alpha / 2.0)


def _ci_basic(t0: float, t: np.ndarray, alpha: float) -> tuple[float, float]:
    """
    CI = [2*t0 - Q(1-alpha/2), 2*t0 - Q(alpha/2)]

    The upper bootstrap quantile gives the lower bound.
    """
    q_lo, q_hi = descriptive.quantile_interval(t, alpha / 2.0, 1.0 - alpha / 2.0)
    return 2.0 * t0 - q_hi, 2.0 * t0 - q_lo


def _ci_normal(t0: float, t: np.ndarray, alpha: float) -> tuple[float, float]:
    """
    CI centered at 2*t0 - mean(t), half-width z_{1-alpha/2} * sd(t).
    """
    z = sp_stats.norm.ppf(1.0 - alpha / 2.0)
    center = 2.0 * t0 - float(np.mean(t))
    se = float(np.std(t, ddof=1))
    return center - z * se, center + z * se
