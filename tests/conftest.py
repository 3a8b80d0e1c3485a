"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def eight_units():
    """Fixed potential outcomes for 8 units, true effect -7.5."""
    y0 = np.array([140, 140, 150, 150, 160, 160, 170, 170], dtype=float)
    y1 = np.array([135, 135, 140, 140, 155, 155, 160, 160], dtype=float)
    return y0, y1


@pytest.fixture
def sixteen_units_four_blocks(rng):
    """16 units in 4 age blocks of 4, heterogeneous effects."""
    blocks = np.repeat([1, 2, 3, 4], 4)
    y0 = rng.normal(50.0, 10.0, 16) + 5.0 * blocks
    y1 = y0 + 2.0 * blocks
    return y0, y1, blocks


@pytest.fixture
def earnings(rng):
    """Earnings by sex, with a clear median gap."""
    n = 200
    male = (rng.random(n) < 0.5).astype(float)
    earn = np.exp(rng.normal(10.0, 0.6, n)) * np.where(male == 1, 1.0, 0.6)
    return {'earn': earn, 'male': male}
