"""
pycausalsim: randomization and bootstrap simulation for causal inference.

Simulates the sampling behavior of treatment-effect estimators under
repeated random assignment, and approximates the sampling distribution
of arbitrary statistics by resampling, with reproducible per-trial
random streams.

Submodules:
    montecarlo: Randomization simulator, bootstrap, empirical distributions
    descriptive: mean, median, sd, mad_sd, quantiles
    regression: Least-squares fits used by the simulators
"""

__version__ = "0.1.0"

from pycausalsim import descriptive
from pycausalsim import regression
from pycausalsim import montecarlo

__all__ = [
    "__version__",
    "descriptive",
    "regression",
    "montecarlo",
]
