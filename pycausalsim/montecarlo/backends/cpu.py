"""
CPU backends for the randomization simulator and the bootstrap.

CPURandomizationBackend: repeated random assignment over fixed potential
    outcomes.
CPUBootstrapBackend: resampling with replacement under a unit policy.

Trial t always draws from stream t of trial_streams(seed, T), and its
value is written to slot t. Running the trials on a thread pool
(n_jobs > 1) therefore gives the same output as the serial loop.
"""

from __future__ import annotations

import warnings
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

import numpy as np
from numpy.typing import NDArray

from pycausalsim.core.exceptions import MissingTrialsWarning, UndefinedStatisticError
from pycausalsim.core.result import Result
from pycausalsim.core.rng import trial_streams
from pycausalsim.core.timing import Timer
from pycausalsim.montecarlo._assignment import draw_assignment
from pycausalsim.montecarlo._common import BootParams, RandomizationParams, RevealedSample
from pycausalsim.montecarlo._resample import draw_resample, rebuild
from pycausalsim.montecarlo.design import BootstrapDesign, RandomizationDesign
from pycausalsim.montecarlo.distribution import EmpiricalDistribution


def evaluate(statistic: Callable, dataset: Any) -> float:
    """Apply a statistic, mapping an undefined result to NaN."""
    try:
        value = statistic(dataset)
    except UndefinedStatisticError:
        return float('nan')
    if value is None:
        return float('nan')
    return float(value)


# trials submitted to the pool at a time, per worker
_CHUNK_PER_WORKER = 256


def run_trials(
    trial: Callable[[int, np.random.Generator], float],
    streams: Sequence[np.random.Generator],
    n_jobs: int,
) -> NDArray[np.floating[Any]]:
    """
    Run trial(t, streams[t]) for every t; results in trial-index order.

    streams[t] is only built when trial t starts, so memory does not grow
    with T beyond the output array.
    """
    T = len(streams)
    out = np.empty(T, dtype=np.float64)

    def run(t: int) -> float:
        return trial(t, streams[t])

    if n_jobs <= 1:
        for t in range(T):
            out[t] = run(t)
    else:
        chunk = n_jobs * _CHUNK_PER_WORKER
        with ThreadPoolExecutor(max_workers=n_jobs) as executor:
            for start in range(0, T, chunk):
                stop = min(start + chunk, T)
                # map yields in submission order, not completion order
                out[start:stop] = list(executor.map(run, range(start, stop)))
    return out


def _missing_note(n_missing: int, T: int, warnings_list: list[str]) -> None:
    if n_missing:
        msg = f"{n_missing} of {T} trials produced no value (recorded as NaN)"
        warnings_list.append(msg)
        warnings.warn(msg, MissingTrialsWarning, stacklevel=4)


class CPURandomizationBackend:
    """
    CPU backend for randomization simulation.

    Per trial: draw an assignment, reveal y = y1 where treated and y0
    elsewhere, apply the estimator.
    """

    @property
    def name(self) -> str:
        return 'cpu_randomization'

    def solve(self, design: RandomizationDesign) -> Result[RandomizationParams]:
        """Run the simulation and return Result[RandomizationParams]."""
        timer = Timer()
        timer.start()

        y0, y1 = design.y0, design.y1
        estimator = design.estimator

        with timer.section('seeding'):
            entropy, streams = trial_streams(design.seed, design.T)

        def trial(t: int, rng: np.random.Generator) -> float:
            z = draw_assignment(design, rng)
            sample = RevealedSample(
                y=np.where(z == 1, y1, y0),
                z=z,
                blocks=design.blocks,
                covariates=design.covariates,
            )
            return evaluate(estimator, sample)

        with timer.section('trials'):
            values = run_trials(trial, streams, design.n_jobs)

        estimates = EmpiricalDistribution.from_values(values)
        n_missing = estimates.n_missing
        warnings_list: list[str] = []
        _missing_note(n_missing, design.T, warnings_list)

        timer.stop()

        params = RandomizationParams(
            estimates=estimates,
            sate=float(np.mean(y1 - y0)),
            T=design.T,
            n_missing=n_missing,
        )

        info: dict[str, Any] = {
            'policy': design.policy,
            'n': design.n,
            'n_treated': design.n_treated,
            'entropy': entropy,
            'n_jobs': design.n_jobs,
        }
        if design.policy == "block":
            info['block_treated'] = dict(zip(design.block_labels, design.block_treated))

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )


class CPUBootstrapBackend:
    """
    CPU backend for bootstrap resampling.

    Supports row, residual, group, and two-stage resampling.
    """

    @property
    def name(self) -> str:
        return 'cpu_bootstrap'

    def solve(self, design: BootstrapDesign) -> Result[BootParams]:
        """Run bootstrap and return Result[BootParams]."""
        timer = Timer()
        timer.start()

        statistic = design.statistic

        with timer.section('t0_computation'):
            t0 = evaluate(statistic, design.original())

        with timer.section('seeding'):
            entropy, streams = trial_streams(design.seed, design.T)

        def trial(t: int, rng: np.random.Generator) -> float:
            resample = draw_resample(design, rng)
            return evaluate(statistic, rebuild(design, resample))

        with timer.section('bootstrap_replicates'):
            values = run_trials(trial, streams, design.n_jobs)

        t = EmpiricalDistribution.from_values(values)
        n_missing = t.n_missing
        warnings_list: list[str] = []
        _missing_note(n_missing, design.T, warnings_list)

        with timer.section('summary_statistics'):
            valid = t.valid
            bias = float(np.mean(valid) - t0) if valid.size else float('nan')
            se = float(np.std(valid, ddof=1)) if valid.size > 1 else float('nan')

        timer.stop()

        params = BootParams(
            t0=t0,
            t=t,
            T=design.T,
            bias=bias,
            se=se,
            n_missing=n_missing,
        )

        return Result(
            params=params,
            info={
                'policy': design.policy,
                'n': design.n,
                'n_units': design.n_units,
                'entropy': entropy,
                'n_jobs': design.n_jobs,
            },
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
