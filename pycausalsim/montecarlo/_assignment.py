"""
Treatment assignment policies.

Each policy is a pure function of (design, rng) returning a 0/1
assignment vector:

- complete:  exactly n_treated of n units treated, uniformly at random
- bernoulli: each unit treated independently with probability p
- block:     complete randomization inside every block

Block allocation rule
---------------------
When a total number of treated units K is spread over blocks, block j
gets floor(K * n_j / n) units, and the K - sum(floor) leftovers go one
each to the blocks with the largest fractional remainders. Equal
remainders are resolved in sorted block-label order. Every block must
end up with at least one treated and one control unit.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

import numpy as np
from numpy.typing import NDArray

from pycausalsim.core.exceptions import ConfigurationError
from pycausalsim.core.validation import check_int

if TYPE_CHECKING:
    from pycausalsim.montecarlo.design import RandomizationDesign


POLICIES = ("complete", "bernoulli", "block")


def largest_remainder(total: int, sizes: NDArray[np.int_]) -> NDArray[np.int_]:
    """
    Split `total` into integer shares proportional to `sizes`.

    Ties in the fractional remainder go to the earlier position.
    """
    sizes = np.asarray(sizes, dtype=np.int64)
    quotas = total * sizes / sizes.sum()
    shares = np.floor(quotas).astype(np.int64)
    leftover = int(total - shares.sum())
    if leftover > 0:
        remainders = quotas - shares
        # stable sort keeps label order among equal remainders
        order = np.argsort(-remainders, kind='stable')
        shares[order[:leftover]] += 1
    return shares


def allocate_block_counts(
    labels: NDArray,
    sizes: NDArray[np.int_],
    n_treated: int | Mapping | None,
    p: float,
) -> NDArray[np.int_]:
    """
    Number of treated units per block, in label order.

    Args:
        labels: Sorted unique block labels.
        sizes: Units per block, aligned with labels.
        n_treated: Mapping label -> count, total count to spread by the
            largest-remainder rule, or None for floor(n * p) in total.
        p: Treated share used when n_treated is None.

    Raises:
        ConfigurationError: If a block would lack a treated or control unit
    """
    n = int(sizes.sum())

    if isinstance(n_treated, Mapping):
        unknown = set(n_treated) - set(labels.tolist())
        if unknown:
            raise ConfigurationError(
                f"n_treated names unknown blocks: {sorted(unknown, key=str)}",
                policy="block",
            )
        try:
            counts = np.array([
                check_int(n_treated[label], f"n_treated[{label!r}]")
                for label in labels.tolist()
            ])
        except KeyError as e:
            raise ConfigurationError(
                f"n_treated has no count for block {e.args[0]!r}",
                policy="block",
            ) from None
    else:
        if n_treated is None:
            total = int(np.floor(n * p))
        else:
            total = check_int(n_treated, 'n_treated')
        if not 0 <= total <= n:
            raise ConfigurationError(
                f"n_treated={total} is outside [0, {n}]",
                policy="block",
                detail="more treated units requested than exist",
            )
        counts = largest_remainder(total, sizes)

    for label, size, k in zip(labels.tolist(), sizes.tolist(), counts.tolist()):
        if not 1 <= k <= size - 1:
            raise ConfigurationError(
                f"block {label!r} would have {k} treated of {size} units; "
                f"each block needs at least one treated and one control unit",
                policy="block",
                detail="block with fewer than two treatment levels",
            )
    return counts


def draw_assignment(design: RandomizationDesign, rng: np.random.Generator) -> NDArray[np.int_]:
    """Draw one assignment vector under the design's policy."""
    n = design.n
    z = np.zeros(n, dtype=np.int64)

    if design.policy == "complete":
        treated = rng.choice(n, size=design.n_treated, replace=False)
        z[treated] = 1
    elif design.policy == "bernoulli":
        z[rng.random(n) < design.p] = 1
    elif design.policy == "block":
        for members, k in zip(design.block_members, design.block_treated):
            treated = rng.choice(members, size=k, replace=False)
            z[treated] = 1
    else:
        raise ValueError(f"Unknown policy: {design.policy!r}")

    return z
