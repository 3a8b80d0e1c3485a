"""
Common data structures for Monte Carlo methods.

RandomizationParams and BootParams are the parameter payloads wrapped by
Result[P] and exposed through Solution classes. RevealedSample and
Resample are the per-trial objects handed to statistics; they are
created fresh in every trial and discarded once the statistic is taken.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Union

import numpy as np
from numpy.typing import NDArray

from pycausalsim.montecarlo.distribution import EmpiricalDistribution


@dataclass(frozen=True, eq=False)
class RevealedSample:
    """
    What an estimator sees in one randomization trial.

    Attributes:
        y: Revealed outcomes, y1 where z == 1 and y0 elsewhere.
        z: Assignment vector of 0/1 labels.
        blocks: Block label per unit, or None.
        covariates: Pre-treatment covariates (n, k), or None.
    """
    y: NDArray[np.floating[Any]]
    z: NDArray[np.int_]
    blocks: NDArray | None = None
    covariates: NDArray[np.floating[Any]] | None = None

    @property
    def n(self) -> int:
        return int(self.y.shape[0])


@dataclass(frozen=True, eq=False)
class Resample:
    """
    One bootstrap draw.

    Attributes:
        units: Indices of the resampled units (rows, residuals, or
            groups), drawn with replacement. Its length always equals
            the resampling-unit population.
        rows: Row indices of the rebuilt dataset, in order.
    """
    units: NDArray[np.int_]
    rows: NDArray[np.int_]


# A statistic maps one dataset to a scalar. None, NaN or an
# UndefinedStatisticError all mean "no value for this trial".
Estimator = Callable[[RevealedSample], Union[float, None]]
Statistic = Callable[[Any], Union[float, None]]


@dataclass(frozen=True, eq=False)
class RandomizationParams:
    """
    Parameter payload for randomization simulation results.

    - estimates: one estimate per trial (NaN where undefined)
    - sate: true sample average treatment effect, mean(y1 - y0)
    """
    estimates: EmpiricalDistribution
    sate: float
    T: int
    n_missing: int


@dataclass(frozen=True, eq=False)
class BootParams:
    """
    Parameter payload for bootstrap results.

    - t0: statistic on the original data
    - t: bootstrap replicates (NaN where undefined)
    - bias: mean(valid t) - t0
    - se: sd(valid t)
    """
    t0: float
    t: EmpiricalDistribution
    T: int
    bias: float
    se: float
    n_missing: int
