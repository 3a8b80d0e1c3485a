"""
Exception and warning hierarchy for pycausalsim.

All exceptions inherit from CausalSimError to allow catching any
library-specific error. Warnings inherit from CausalSimWarning so callers
can filter everything the package emits in one place.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Configuration problems surface before any trial runs
"""


class CausalSimError(Exception):
    """Base exception for all pycausalsim errors."""
    pass


class ValidationError(CausalSimError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class DimensionError(ValidationError):
    """
    Array dimensions are incorrect or inconsistent.

    Raised when array shapes don't match expected dimensions or
    when multiple arrays have inconsistent shapes.
    """
    pass


class ConfigurationError(ValidationError):
    """
    An assignment or resampling policy cannot be carried out.

    Raised while a design is being built, e.g. when more units are
    requested for treatment than exist, or when a block would end up
    without a treated or a control unit.

    Attributes:
        policy: Name of the offending policy ('complete', 'block', ...)
        detail: Free-form description of the violated constraint
    """

    def __init__(
        self,
        message: str,
        policy: str | None = None,
        detail: str | None = None,
    ):
        super().__init__(message)
        self.policy = policy
        self.detail = detail


class NumericalError(CausalSimError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    Matrix is singular or nearly singular.

    Attributes:
        matrix_name: Name/description of the problematic matrix
        rank: Numerical rank, if computed
        expected_rank: Expected rank (typically the number of columns)
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        rank: int | None = None,
        expected_rank: int | None = None,
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.rank = rank
        self.expected_rank = expected_rank


class UndefinedStatisticError(NumericalError):
    """
    A statistic has no value on the given (re)sample.

    Statistics raise this for degenerate draws, e.g. a resample that
    contains only one treatment group. Simulation loops record the trial
    as missing instead of aborting the run.
    """
    pass


class CausalSimWarning(UserWarning):
    """Base category for warnings emitted by pycausalsim."""
    pass


class NonReproducibleWarning(CausalSimWarning):
    """A simulation ran without a seed."""
    pass


class MissingTrialsWarning(CausalSimWarning):
    """Some trials produced no value and were dropped from a summary."""
    pass
