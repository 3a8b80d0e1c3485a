"""
pycausalsim Monte Carlo methods.

Provides the randomization simulator (repeated random assignment over
fixed potential outcomes) and the bootstrap (row, residual, group, and
two-stage resampling), both returning EmpiricalDistribution objects.

Usage:
    from pycausalsim.montecarlo import simulate_randomization, bootstrap, boot_ci

    # Randomization distribution of the difference in means
    sol = simulate_randomization(y0, y1, n_treated=4, T=1000, seed=18)
    sol.distribution.mean(), sol.distribution.sd()

    # Bootstrap
    result = bootstrap(data, statistic, policy="groups", groups=g, seed=42)
    ci_result = boot_ci(result, types=("perc", "normal"))
"""

from pycausalsim.montecarlo._common import Resample, RevealedSample
from pycausalsim.montecarlo.distribution import EmpiricalDistribution
from pycausalsim.montecarlo.design import BootstrapDesign, RandomizationDesign
from pycausalsim.montecarlo.estimators import (
    mean_difference,
    block_weighted_difference,
    regression_adjusted_difference,
    median_ratio,
    group_mean_difference,
)
from pycausalsim.montecarlo.solution import BootstrapSolution, RandomizationSolution
from pycausalsim.montecarlo.solvers import simulate_randomization, bootstrap, boot_ci

__all__ = [
    "simulate_randomization",
    "bootstrap",
    "boot_ci",
    "EmpiricalDistribution",
    "RandomizationDesign",
    "BootstrapDesign",
    "RandomizationSolution",
    "BootstrapSolution",
    "RevealedSample",
    "Resample",
    "mean_difference",
    "block_weighted_difference",
    "regression_adjusted_difference",
    "median_ratio",
    "group_mean_difference",
]
