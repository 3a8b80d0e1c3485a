"""
Per-trial random streams.

Every trial of a simulation draws from its own Generator, derived from a
single SeedSequence. Stream t depends only on (seed, t), so trials can run
in any order, or concurrently, and still reproduce bit-for-bit.

Streams are built on demand: stream t is the SeedSequence child that
root.spawn() would hand out at position t, constructed directly from the
root entropy and spawn key (t,). Only the root is kept in memory.
"""

from __future__ import annotations

import warnings
from collections.abc import Sequence

import numpy as np

from pycausalsim.core.exceptions import NonReproducibleWarning, ValidationError


class TrialStreams(Sequence):
    """
    Lazy sequence of T generators sharing one root SeedSequence.

    Indexing creates a fresh Generator for that trial; calling it twice
    returns two generators in the same initial state.
    """

    def __init__(self, root: np.random.SeedSequence, T: int):
        self._root = root
        self._T = T

    @property
    def entropy(self) -> int:
        return int(self._root.entropy)

    def __len__(self) -> int:
        return self._T

    def __getitem__(self, t):
        if isinstance(t, slice):
            return [self[i] for i in range(*t.indices(self._T))]
        if t < 0:
            t += self._T
        if not 0 <= t < self._T:
            raise IndexError(f"trial index {t} out of range for T={self._T}")
        child = np.random.SeedSequence(
            self._root.entropy,
            spawn_key=self._root.spawn_key + (int(t),),
            pool_size=self._root.pool_size,
        )
        return np.random.default_rng(child)


def trial_streams(seed: int | None, T: int) -> tuple[int, TrialStreams]:
    """
    Derive T independent generators from one seed.

    Args:
        seed: Non-negative integer seed. None draws fresh OS entropy and
            emits NonReproducibleWarning.
        T: Number of trials.

    Returns:
        (entropy, streams). streams[t] is the generator of trial t.
        Passing entropy back as the seed replays the same streams.
    """
    if seed is None:
        warnings.warn(
            "No seed given: results cannot be reproduced unless the "
            "reported entropy is passed back as the seed.",
            NonReproducibleWarning,
            stacklevel=4,
        )
    elif seed < 0:
        raise ValidationError(f"seed: must be >= 0, got {seed}")
    root = np.random.SeedSequence(seed)
    streams = TrialStreams(root, T)
    return streams.entropy, streams
