"""
Descriptive statistics used to summarize simulation output.

Public API:
    mean(x), median(x)            - location
    sd(x)                         - sample standard deviation (n - 1)
    mad_sd(x)                     - 1.4826 * median absolute deviation
    quantile(x, probs, type=7)    - Hyndman-Fan types 4-9
    quantile_interval(x, lo, hi)  - pair of type-7 quantiles
"""

from pycausalsim.descriptive.summaries import (
    MAD_SCALE,
    mean,
    median,
    sd,
    mad_sd,
    quantile,
    quantile_interval,
)

__all__ = [
    "MAD_SCALE",
    "mean",
    "median",
    "sd",
    "mad_sd",
    "quantile",
    "quantile_interval",
]
