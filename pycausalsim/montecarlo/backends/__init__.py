"""
Monte Carlo backends.

Available backends:
    CPURandomizationBackend: repeated random assignment
    CPUBootstrapBackend: resampling with replacement
"""

from pycausalsim.montecarlo.backends.cpu import (
    CPURandomizationBackend,
    CPUBootstrapBackend,
)

__all__ = [
    "CPURandomizationBackend",
    "CPUBootstrapBackend",
]
