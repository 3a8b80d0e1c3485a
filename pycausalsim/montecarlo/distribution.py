"""
Empirical distribution of a simulated statistic.

An EmpiricalDistribution is the ordered sequence of per-trial values
produced by a simulator. Slot t holds the value from trial t; NaN marks
a trial whose statistic was undefined.

Missing-value policy, applied identically by every query:
    na_rm=True  (default) drop missing trials, warn with
                MissingTrialsWarning if any were dropped
    na_rm=False propagate: the query returns NaN if any trial is missing
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Any, Iterator

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pycausalsim import descriptive
from pycausalsim.core.exceptions import MissingTrialsWarning
from pycausalsim.core.validation import check_array, check_1d


@dataclass(frozen=True, eq=False)
class EmpiricalDistribution:
    """
    Immutable sequence of trial outcomes with summary queries.

    Attributes:
        values: Read-only float array of length T, NaN where missing.
    """
    values: NDArray[np.floating[Any]]

    def __post_init__(self):
        arr = check_array(self.values, 'values')
        check_1d(arr, 'values')
        arr = arr.copy()
        arr.setflags(write=False)
        object.__setattr__(self, 'values', arr)

    @classmethod
    def from_values(cls, values: ArrayLike) -> EmpiricalDistribution:
        return cls(values=np.asarray(values, dtype=np.float64))

    # --- Shape ---

    @property
    def T(self) -> int:
        """Number of trials, missing ones included."""
        return int(self.values.shape[0])

    @property
    def missing(self) -> NDArray[np.bool_]:
        """Boolean mask of missing trials."""
        return np.isnan(self.values)

    @property
    def n_missing(self) -> int:
        return int(self.missing.sum())

    @property
    def n_valid(self) -> int:
        return self.T - self.n_missing

    @property
    def valid(self) -> NDArray[np.floating[Any]]:
        """Non-missing values in trial order."""
        return self.values[~self.missing]

    def __len__(self) -> int:
        return self.T

    def __iter__(self) -> Iterator[float]:
        return iter(self.values.tolist())

    def __array__(self, dtype=None, copy=None):
        if dtype is None:
            return self.values
        return self.values.astype(dtype)

    # --- Missing-value policy ---

    def _sample(self, na_rm: bool) -> NDArray[np.floating[Any]] | None:
        """Values a query should see, or None if the result must be NaN."""
        n_missing = self.n_missing
        if n_missing == 0:
            return self.values
        if not na_rm:
            return None
        warnings.warn(
            f"{n_missing} of {self.T} trials produced no value and were dropped",
            MissingTrialsWarning,
            stacklevel=3,
        )
        return self.valid

    # --- Queries ---

    def mean(self, *, na_rm: bool = True) -> float:
        x = self._sample(na_rm)
        return float('nan') if x is None else descriptive.mean(x)

    def median(self, *, na_rm: bool = True) -> float:
        x = self._sample(na_rm)
        return float('nan') if x is None else descriptive.median(x)

    def sd(self, *, na_rm: bool = True) -> float:
        """Sample standard deviation (n - 1 denominator)."""
        x = self._sample(na_rm)
        return float('nan') if x is None else descriptive.sd(x)

    def mad_sd(self, *, na_rm: bool = True) -> float:
        """1.4826 * median absolute deviation from the median."""
        x = self._sample(na_rm)
        return float('nan') if x is None else descriptive.mad_sd(x)

    def quantile(self, probs: ArrayLike, *, na_rm: bool = True) -> NDArray[np.floating[Any]]:
        """Type-7 quantiles."""
        x = self._sample(na_rm)
        if x is None:
            return np.full(np.size(probs), np.nan)
        return descriptive.quantile(x, probs)

    def quantile_interval(
        self,
        p_low: float = 0.025,
        p_high: float = 0.975,
        *,
        na_rm: bool = True,
    ) -> tuple[float, float]:
        """Type-7 quantile bounds (q(p_low), q(p_high))."""
        x = self._sample(na_rm)
        if x is None:
            return float('nan'), float('nan')
        return descriptive.quantile_interval(x, p_low, p_high)

    def describe(self, *, na_rm: bool = True) -> dict[str, float | int]:
        """All summaries at once; warns at most once."""
        x = self._sample(na_rm)
        if x is None:
            nan = float('nan')
            lo = hi = mean = median = sd = mad = nan
        else:
            mean = descriptive.mean(x)
            median = descriptive.median(x)
            sd = descriptive.sd(x)
            mad = descriptive.mad_sd(x)
            lo, hi = descriptive.quantile_interval(x, 0.025, 0.975)
        return {
            'T': self.T,
            'n_missing': self.n_missing,
            'mean': mean,
            'median': median,
            'sd': sd,
            'mad_sd': mad,
            'q025': lo,
            'q975': hi,
        }

    def summary(self) -> str:
        d = self.describe()
        lines = [
            f"Trials: {d['T']} ({d['n_missing']} missing, dropped)",
            f"{'mean':>8s} {'median':>12s} {'sd':>12s} {'mad_sd':>12s}",
            f"{d['mean']:8.4g} {d['median']:12.4g} {d['sd']:12.4g} {d['mad_sd']:12.4g}",
            f"95% interval: ({d['q025']:.4g}, {d['q975']:.4g})",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"EmpiricalDistribution(T={self.T}, n_missing={self.n_missing})"
