"""
Treatment-effect estimators and bootstrap statistics.

Estimators take a RevealedSample and return the estimated effect.
Bootstrap statistics are built by factories that bind column names (or
column indices, for array data) and return fn(dataset) -> float.

A statistic that has no value on the given sample raises
UndefinedStatisticError; the simulators record that trial as missing.
"""

from __future__ import annotations

from typing import Any, Callable

import numpy as np

from pycausalsim.core.exceptions import SingularMatrixError, UndefinedStatisticError
from pycausalsim.montecarlo._common import RevealedSample
from pycausalsim.regression import fit


def _difference(y: np.ndarray, z: np.ndarray) -> float:
    treated = z == 1
    n1 = int(treated.sum())
    if n1 == 0 or n1 == len(z):
        raise UndefinedStatisticError(
            f"difference in means needs both groups; got {n1} treated of {len(z)}"
        )
    return float(y[treated].mean() - y[~treated].mean())


def mean_difference(sample: RevealedSample) -> float:
    """mean(y | z = 1) - mean(y | z = 0)."""
    return _difference(sample.y, sample.z)


def block_weighted_difference(sample: RevealedSample) -> float:
    """
    Block-size-weighted average of per-block mean differences.

        tau = sum_j n_j * tau_j / sum_j n_j

    Without blocks this is the plain difference in means.
    """
    if sample.blocks is None:
        return mean_difference(sample)

    total = 0.0
    weight = 0
    for label in np.unique(sample.blocks):
        in_block = sample.blocks == label
        n_j = int(in_block.sum())
        try:
            tau_j = _difference(sample.y[in_block], sample.z[in_block])
        except UndefinedStatisticError as e:
            raise UndefinedStatisticError(f"block {label!r}: {e}") from e
        total += n_j * tau_j
        weight += n_j
    return total / weight


def regression_adjusted_difference(sample: RevealedSample) -> float:
    """
    Coefficient on z in the least-squares fit of y ~ 1 + z + covariates.
    """
    columns = [np.ones(sample.n), sample.z.astype(np.float64)]
    if sample.covariates is not None:
        columns.append(sample.covariates)
    X = np.column_stack(columns)
    try:
        sol = fit(X, sample.y)
    except SingularMatrixError as e:
        raise UndefinedStatisticError(
            f"regression adjustment is not identified: {e}"
        ) from e
    return float(sol.coefficients[1])


# ---------------------------------------------------------------------------
# Bootstrap statistic factories
# ---------------------------------------------------------------------------

def _column(data: Any, key) -> np.ndarray:
    if isinstance(data, dict):
        return np.asarray(data[key])
    return np.asarray(data)[:, key]


def median_ratio(
    outcome,
    group,
    numerator: float = 1,
    denominator: float = 0,
) -> Callable[[Any], float]:
    """
    Ratio of group medians, e.g. median earnings of women over men.

    Args:
        outcome: Outcome column name (dict data) or index (array data).
        group: Group column name or index.
        numerator: Group value whose median is the numerator.
        denominator: Group value whose median is the denominator.
    """
    def statistic(data) -> float:
        y = _column(data, outcome)
        g = _column(data, group)
        top = y[g == numerator]
        bottom = y[g == denominator]
        if top.size == 0 or bottom.size == 0:
            raise UndefinedStatisticError(
                f"median ratio needs both groups; got {top.size} and {bottom.size} rows"
            )
        denom = np.median(bottom)
        if denom == 0:
            raise UndefinedStatisticError("denominator median is zero")
        return float(np.median(top) / denom)

    return statistic


def group_mean_difference(
    outcome,
    group,
    treated: float = 1,
    control: float = 0,
) -> Callable[[Any], float]:
    """Difference in outcome means between two groups."""
    def statistic(data) -> float:
        y = _column(data, outcome)
        g = _column(data, group)
        a = y[g == treated]
        b = y[g == control]
        if a.size == 0 or b.size == 0:
            raise UndefinedStatisticError(
                f"group difference needs both groups; got {a.size} and {b.size} rows"
            )
        return float(a.mean() - b.mean())

    return statistic
