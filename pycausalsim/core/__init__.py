"""
Core infrastructure for pycausalsim.

Shared abstractions used by the regression, descriptive and montecarlo
submodules.

Key components:
    result: Generic Result[P] envelope
    exceptions: Exception and warning hierarchy
    validation: Input validators
    rng: Per-trial random stream derivation
    timing: Section timer used by backends
"""

from pycausalsim.core.result import Result
from pycausalsim.core.exceptions import (
    CausalSimError,
    ValidationError,
    DimensionError,
    ConfigurationError,
    NumericalError,
    SingularMatrixError,
    UndefinedStatisticError,
    CausalSimWarning,
    NonReproducibleWarning,
    MissingTrialsWarning,
)
from pycausalsim.core.rng import trial_streams

__all__ = [
    # Result
    "Result",
    # Exceptions
    "CausalSimError",
    "ValidationError",
    "DimensionError",
    "ConfigurationError",
    "NumericalError",
    "SingularMatrixError",
    "UndefinedStatisticError",
    # Warnings
    "CausalSimWarning",
    "NonReproducibleWarning",
    "MissingTrialsWarning",
    # Random streams
    "trial_streams",
]
