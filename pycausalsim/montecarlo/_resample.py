"""
Bootstrap resampling policies.

Each policy draws, with replacement, as many resampling units as the
population has, then rebuilds a dataset of the original shape:

- rows:      n rows
- residual:  n residuals, added back onto the fitted values of a linear
             model fitted once to the original data
- groups:    G whole groups; every row of each drawn group is kept
- two_stage: G groups, then rows with replacement inside each drawn group
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

import numpy as np

from pycausalsim.montecarlo._common import Resample

if TYPE_CHECKING:
    from pycausalsim.montecarlo.design import BootstrapDesign


POLICIES = ("rows", "residual", "groups", "two_stage")


def draw_resample(design: BootstrapDesign, rng: np.random.Generator) -> Resample:
    """Draw one resample under the design's policy."""
    policy = design.policy

    if policy == "rows":
        units = rng.integers(0, design.n, size=design.n)
        return Resample(units=units, rows=units)

    if policy == "residual":
        units = rng.integers(0, design.n, size=design.n)
        return Resample(units=units, rows=np.arange(design.n))

    members = design.group_members
    G = len(members)
    units = rng.integers(0, G, size=G)

    if policy == "groups":
        rows = np.concatenate([members[g] for g in units])
    elif policy == "two_stage":
        rows = np.concatenate([
            rng.choice(members[g], size=len(members[g]), replace=True)
            for g in units
        ])
    else:
        raise ValueError(f"Unknown policy: {policy!r}")

    return Resample(units=units, rows=rows)


def rebuild(design: BootstrapDesign, resample: Resample) -> Any:
    """
    Dataset implied by a resample, in the form the statistic receives:
    an array for array data, a dict of columns for mapping data.
    """
    if design.policy == "residual":
        y_star = design.fitted + design.residuals[resample.units]
        if design.columns is not None:
            out = dict(design.data)
            out[design.response] = y_star
            return out
        if design.data.ndim == 1:
            return y_star
        data = design.data.copy()
        data[:, design.response] = y_star
        return data
    if design.columns is not None:
        return {name: col[resample.rows] for name, col in design.data.items()}
    return design.data[resample.rows]
