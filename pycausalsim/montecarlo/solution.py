"""
Solution wrappers for Monte Carlo results.

RandomizationSolution and BootstrapSolution wrap Result[P] and provide
convenient accessors and text summaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pycausalsim.core.exceptions import ValidationError
from pycausalsim.core.result import Result
from pycausalsim.montecarlo._common import BootParams, RandomizationParams
from pycausalsim.montecarlo.distribution import EmpiricalDistribution

if TYPE_CHECKING:
    from pycausalsim.montecarlo.design import BootstrapDesign, RandomizationDesign


@dataclass
class RandomizationSolution:
    """
    User-facing randomization simulation results.

    The estimates form the randomization distribution of the estimator:
    the spread induced by assignment alone, potential outcomes held fixed.
    """
    _result: Result[RandomizationParams]
    _design: 'RandomizationDesign'

    # --- Core fields ---

    @property
    def distribution(self) -> EmpiricalDistribution:
        """Estimates in trial order, NaN where undefined."""
        return self._result.params.estimates

    @property
    def estimates(self) -> NDArray[np.floating[Any]]:
        return self._result.params.estimates.values

    @property
    def sate(self) -> float:
        """True sample average treatment effect, mean(y1 - y0)."""
        return self._result.params.sate

    @property
    def T(self) -> int:
        return self._result.params.T

    @property
    def n_missing(self) -> int:
        return self._result.params.n_missing

    def p_value(self, observed: float, alternative: str = "two.sided") -> float:
        """
        Randomization p-value of an observed estimate.

        Compares observed against the valid simulated estimates with the
        Phipson-Smyth correction, (count + 1) / (n_valid + 1). Only a
        test of the sharp null when the population was simulated with
        y1 == y0.
        """
        draws = self.distribution.valid
        if alternative == "two.sided":
            count = np.sum(np.abs(draws) >= abs(observed))
        elif alternative == "greater":
            count = np.sum(draws >= observed)
        elif alternative == "less":
            count = np.sum(draws <= observed)
        else:
            raise ValidationError(
                f"alternative must be 'two.sided', 'less', or 'greater', "
                f"got {alternative!r}"
            )
        return float(count + 1) / float(draws.size + 1)

    # --- Metadata ---

    @property
    def policy(self) -> str:
        return self._design.policy

    @property
    def seed(self) -> int | None:
        return self._design.seed

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Display ---

    def summary(self) -> str:
        """Randomization distribution summary."""
        d = self.distribution.describe()
        lines = [
            "\nRANDOMIZATION DISTRIBUTION",
            "",
            f"Policy: {self.policy}  (n = {self._design.n}, T = {self.T})",
            f"True SATE: {self.sate:.6g}",
            f"Missing trials: {self.n_missing}",
            "",
            f"{'mean':>12s} {'sd':>12s} {'median':>12s} {'mad_sd':>12s}",
            f"{d['mean']:12.5f} {d['sd']:12.5f} {d['median']:12.5f} {d['mad_sd']:12.5f}",
            f"95% interval: ({d['q025']:.5f}, {d['q975']:.5f})",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"RandomizationSolution(T={self.T}, policy={self.policy!r}, "
            f"sate={self.sate:.4g}, n_missing={self.n_missing})"
        )


@dataclass
class BootstrapSolution:
    """
    User-facing bootstrap results.

    t0, replicate distribution, bias and SE, plus CIs once boot_ci has
    been applied.
    """
    _result: Result[BootParams]
    _design: 'BootstrapDesign'
    _ci: dict[str, tuple[float, float]] | None = None
    _ci_conf_level: float | None = None

    # --- Core fields ---

    @property
    def t0(self) -> float:
        """Statistic on the original data."""
        return self._result.params.t0

    @property
    def distribution(self) -> EmpiricalDistribution:
        """Replicates in trial order, NaN where undefined."""
        return self._result.params.t

    @property
    def t(self) -> NDArray[np.floating[Any]]:
        return self._result.params.t.values

    @property
    def T(self) -> int:
        return self._result.params.T

    @property
    def bias(self) -> float:
        """mean(valid replicates) - t0."""
        return self._result.params.bias

    @property
    def se(self) -> float:
        """sd(valid replicates)."""
        return self._result.params.se

    @property
    def n_missing(self) -> int:
        return self._result.params.n_missing

    @property
    def ci(self) -> dict[str, tuple[float, float]] | None:
        """Confidence intervals keyed by type, or None if not computed."""
        return self._ci

    @property
    def ci_conf_level(self) -> float | None:
        return self._ci_conf_level

    # --- Metadata ---

    @property
    def policy(self) -> str:
        return self._design.policy

    @property
    def seed(self) -> int | None:
        return self._design.seed

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Display ---

    def summary(self) -> str:
        """
        Bootstrap summary:

            BOOTSTRAP (ROWS)

            Bootstrap Statistics :
                  original       bias    std. error
            t1*    0.60000    0.00312       0.04210
        """
        lines = [
            f"\nBOOTSTRAP ({self.policy.upper()})\n",
            f"Replicates: {self.T} ({self.n_missing} missing)",
            "",
            "Bootstrap Statistics :",
            f"{'':>8s} {'original':>14s} {'bias':>14s} {'std. error':>14s}",
            f"{'t1*':>8s} {self.t0:14.5f} {self.bias:14.5f} {self.se:14.5f}",
        ]

        if self.ci is not None:
            lines.append("")
            conf_pct = int(round((self.ci_conf_level or 0.95) * 100))
            for ci_type, (lo, hi) in self.ci.items():
                lines.append(f"{conf_pct}% {ci_type} CI: ({lo:.5f}, {hi:.5f})")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"BootstrapSolution(T={self.T}, policy={self.policy!r}, "
            f"n_missing={self.n_missing}, backend={self.backend_name!r})"
        )
