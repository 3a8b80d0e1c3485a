"""
Solver dispatch for Monte Carlo methods.

Public API:
    simulate_randomization(y0, y1, ...) -> RandomizationSolution
    bootstrap(data, statistic, ...) -> BootstrapSolution
    boot_ci(solution, ...) -> BootstrapSolution with CIs attached
"""

from __future__ import annotations

from dataclasses import replace
from typing import Literal, Mapping

from pycausalsim.core.exceptions import ValidationError
from pycausalsim.core.validation import check_probability
from pycausalsim.montecarlo._ci import compute_ci
from pycausalsim.montecarlo._common import Estimator, Statistic
from pycausalsim.montecarlo.backends.cpu import CPUBootstrapBackend, CPURandomizationBackend
from pycausalsim.montecarlo.design import BootstrapDesign, RandomizationDesign
from pycausalsim.montecarlo.solution import BootstrapSolution, RandomizationSolution


BackendChoice = Literal['auto', 'cpu']


def simulate_randomization(
    y0,
    y1,
    *,
    policy: str = "complete",
    n_treated: int | Mapping | None = None,
    n_control: int | None = None,
    p: float = 0.5,
    blocks=None,
    covariates=None,
    estimator: Estimator | None = None,
    T: int = 1000,
    seed: int | None = None,
    n_jobs: int | None = None,
    backend: BackendChoice = 'auto',
) -> RandomizationSolution:
    """
    Randomization distribution of a treatment-effect estimator.

    Holds the potential outcomes fixed and re-draws the treatment
    assignment T times, revealing y1 for treated and y0 for control
    units and applying the estimator each time.

    Args:
        y0, y1: Potential outcomes under control and treatment.
        policy: "complete", "bernoulli", or "block".
        n_treated: Treated count (complete), total or per-block mapping
            (block).
        n_control: Optional control count for complete randomization.
        p: Treatment probability (bernoulli) or treated share (block
            without n_treated).
        blocks: Block label per unit.
        covariates: Pre-treatment covariates for regression adjustment.
        estimator: fn(RevealedSample) -> float.
        T: Number of trials.
        seed: Random seed. None runs unseeded and warns.
        n_jobs: Worker threads; output is identical for any value.
        backend: 'auto' or 'cpu'.

    Returns:
        RandomizationSolution

    Example:
        >>> sol = simulate_randomization(y0, y1, n_treated=4, T=1000, seed=18)
        >>> sol.distribution.mean(), sol.distribution.sd()
    """
    design = RandomizationDesign.for_randomization(
        y0, y1,
        policy=policy,
        n_treated=n_treated,
        n_control=n_control,
        p=p,
        blocks=blocks,
        covariates=covariates,
        estimator=estimator,
        T=T,
        seed=seed,
        n_jobs=n_jobs,
    )
    result = _get_backend(backend, CPURandomizationBackend).solve(design)
    return RandomizationSolution(_result=result, _design=design)


def bootstrap(
    data,
    statistic: Statistic,
    *,
    policy: str = "rows",
    groups=None,
    formula: str | None = None,
    response: int | None = None,
    T: int = 1000,
    seed: int | None = None,
    n_jobs: int | None = None,
    backend: BackendChoice = 'auto',
) -> BootstrapSolution:
    """
    Bootstrap sampling distribution of a statistic.

    Args:
        data: 1D/2D array-like or mapping of column name -> 1D array.
        statistic: fn(dataset) -> float. Return None/NaN or raise
            UndefinedStatisticError when a resample has no value.
        policy: "rows", "residual", "groups", or "two_stage".
        groups: Group labels (or column name) for the group policies.
        formula: Model for the residual policy on named columns.
        response: Response column index for the residual policy on arrays.
        T: Number of replicates.
        seed: Random seed. None runs unseeded and warns.
        n_jobs: Worker threads; output is identical for any value.
        backend: 'auto' or 'cpu'.

    Returns:
        BootstrapSolution

    Example:
        >>> stat = median_ratio('earn', 'male', numerator=0, denominator=1)
        >>> sol = bootstrap({'earn': earn, 'male': male}, stat, T=1000, seed=1)
        >>> sol.se
    """
    design = BootstrapDesign.for_bootstrap(
        data, statistic,
        policy=policy,
        groups=groups,
        formula=formula,
        response=response,
        T=T,
        seed=seed,
        n_jobs=n_jobs,
    )
    result = _get_backend(backend, CPUBootstrapBackend).solve(design)
    return BootstrapSolution(_result=result, _design=design)


def boot_ci(
    boot_out: BootstrapSolution,
    *,
    conf_level: float = 0.95,
    types: tuple[str, ...] | str = ("perc",),
) -> BootstrapSolution:
    """
    Attach confidence intervals to a bootstrap result.

    Args:
        boot_out: Result of bootstrap().
        conf_level: Confidence level in (0, 1).
        types: Any of "perc", "basic", "normal".

    Returns:
        A new BootstrapSolution with ci and ci_conf_level populated.
    """
    conf_level = check_probability(conf_level, 'conf_level')
    if isinstance(types, str):
        types = (types,)
    ci = compute_ci(boot_out, tuple(types), conf_level)
    return replace(boot_out, _ci=ci, _ci_conf_level=conf_level)


def _get_backend(choice: BackendChoice, cpu_backend):
    """
    Select and instantiate the backend.

    Raises:
        ValidationError: If unknown backend specified
    """
    if choice in ('auto', 'cpu'):
        return cpu_backend()
    raise ValidationError(f"Unknown backend: {choice!r}")
