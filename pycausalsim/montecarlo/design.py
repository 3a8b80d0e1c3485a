"""
Design classes for Monte Carlo methods.

RandomizationDesign and BootstrapDesign encapsulate all inputs needed
by backends to run trials. Immutable, validated at construction: a
policy that cannot be carried out raises ConfigurationError here, before
any trial runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from pycausalsim.core.exceptions import ConfigurationError, ValidationError
from pycausalsim.core.validation import (
    check_array,
    check_finite,
    check_1d,
    check_2d,
    check_consistent_length,
    check_int,
    check_min_samples,
    check_positive_int,
    check_probability,
    check_seed,
)
from pycausalsim.montecarlo import _assignment, _resample, estimators
from pycausalsim.montecarlo._common import Estimator, Statistic
from pycausalsim.regression import fit, fit_formula
from pycausalsim.regression.design import Formula


def _check_n_jobs(n_jobs: int | None) -> int:
    if n_jobs is None:
        return 1
    return check_positive_int(n_jobs, 'n_jobs')


@dataclass(frozen=True, eq=False)
class RandomizationDesign:
    """
    Frozen design for a randomization simulation.

    Attributes:
        y0: Potential outcome under control, shape (n,).
        y1: Potential outcome under treatment, shape (n,).
        policy: "complete", "bernoulli", or "block".
        n_treated: Treated units for complete randomization.
        p: Treatment probability for Bernoulli randomization.
        blocks: Block label per unit, or None. Shown to the estimator
            under every policy; restricts assignment only for "block".
        block_labels: Sorted unique block labels.
        block_members: Unit indices per block, aligned with block_labels.
        block_treated: Treated units per block, aligned with block_labels.
        covariates: Pre-treatment covariates (n, k), or None.
        estimator: fn(RevealedSample) -> float.
        T: Number of trials.
        seed: Random seed for reproducibility.
        n_jobs: Worker threads for trial dispatch.
    """
    y0: NDArray[np.floating[Any]]
    y1: NDArray[np.floating[Any]]
    policy: str
    n_treated: int | None
    p: float | None
    blocks: NDArray | None
    block_labels: tuple
    block_members: tuple[NDArray[np.int_], ...]
    block_treated: tuple[int, ...]
    covariates: NDArray[np.floating[Any]] | None
    estimator: Estimator
    T: int
    seed: int | None
    n_jobs: int

    @property
    def n(self) -> int:
        return int(self.y0.shape[0])

    @classmethod
    def for_randomization(
        cls,
        y0,
        y1,
        *,
        policy: str = "complete",
        n_treated: int | Mapping | None = None,
        n_control: int | None = None,
        p: float = 0.5,
        blocks=None,
        covariates=None,
        estimator: Estimator | None = None,
        T: int = 1000,
        seed: int | None = None,
        n_jobs: int | None = None,
    ) -> RandomizationDesign:
        """
        Create a randomization design with validation.

        Args:
            y0: Control potential outcomes.
            y1: Treated potential outcomes, same length as y0.
            policy: "complete" (default), "bernoulli", or "block".
            n_treated: complete: treated count (default n // 2).
                block: total treated count spread by the largest-remainder
                rule, or a mapping block label -> treated count.
            n_control: complete only; if given, n_treated + n_control
                must equal n.
            p: bernoulli: per-unit treatment probability. block: treated
                share when n_treated is omitted.
            blocks: Block label per unit. Required for policy="block";
                with other policies it is passed to the estimator only
                (post-stratification).
            covariates: Pre-treatment covariates, shape (n,) or (n, k).
            estimator: fn(RevealedSample) -> float. Defaults to
                block_weighted_difference for blocks, else mean_difference.
            T: Number of trials. Must be >= 1.
            seed: Random seed.
            n_jobs: Worker threads; None or 1 runs serially.

        Raises:
            ValidationError: If arrays are malformed
            ConfigurationError: If the policy cannot be carried out
        """
        y0_arr = check_array(y0, 'y0')
        y1_arr = check_array(y1, 'y1')
        check_1d(y0_arr, 'y0')
        check_1d(y1_arr, 'y1')
        check_finite(y0_arr, 'y0')
        check_finite(y1_arr, 'y1')
        check_consistent_length(y0_arr, y1_arr, names=('y0', 'y1'))
        check_min_samples(y0_arr, 2, 'y0')
        n = y0_arr.shape[0]

        T = check_positive_int(T, 'T')
        n_jobs = _check_n_jobs(n_jobs)
        seed = check_seed(seed)

        if policy not in _assignment.POLICIES:
            raise ConfigurationError(
                f"policy must be one of {_assignment.POLICIES}, got {policy!r}",
                policy=policy,
            )

        cov_arr = None
        if covariates is not None:
            cov_arr = check_array(covariates, 'covariates')
            if cov_arr.ndim == 1:
                cov_arr = cov_arr.reshape(-1, 1)
            check_2d(cov_arr, 'covariates')
            check_finite(cov_arr, 'covariates')
            check_consistent_length(y0_arr, cov_arr, names=('y0', 'covariates'))

        # Blocks are kept under every policy so post-stratified estimators
        # see them; only policy="block" restricts the assignment by block.
        blocks_arr = None
        if blocks is not None:
            blocks_arr = np.asarray(blocks)
            check_1d(blocks_arr, 'blocks')
            check_consistent_length(y0_arr, blocks_arr, names=('y0', 'blocks'))

        labels: tuple = ()
        members: tuple = ()
        treated_per_block: tuple = ()
        k: int | None = None
        prob: float | None = None

        if policy == "complete":
            k = n // 2 if n_treated is None else n_treated
            if isinstance(k, Mapping):
                raise ConfigurationError(
                    "a per-block n_treated mapping needs policy='block'",
                    policy=policy,
                )
            k = check_int(k, 'n_treated')
            if n_control is not None:
                n_control = check_int(n_control, 'n_control')
            if n_control is not None and k + n_control != n:
                raise ConfigurationError(
                    f"n_treated + n_control = {k + n_control} but the "
                    f"population has {n} units",
                    policy=policy,
                    detail="group sizes must account for every unit",
                )
            if not 1 <= k <= n - 1:
                raise ConfigurationError(
                    f"n_treated={k} leaves no room for both a treated and a "
                    f"control group among {n} units",
                    policy=policy,
                )

        elif policy == "bernoulli":
            if n_treated is not None:
                raise ConfigurationError(
                    "n_treated is fixed by complete randomization; Bernoulli "
                    "assignment takes p",
                    policy=policy,
                )
            prob = check_probability(p, 'p')

        elif policy == "block":
            if blocks_arr is None:
                raise ConfigurationError(
                    "policy='block' requires blocks", policy=policy,
                )
            prob = check_probability(p, 'p')

            unique, inverse = np.unique(blocks_arr, return_inverse=True)
            sizes = np.bincount(inverse, minlength=len(unique))
            counts = _assignment.allocate_block_counts(unique, sizes, n_treated, prob)
            labels = tuple(unique.tolist())
            members = tuple(np.flatnonzero(inverse == j) for j in range(len(unique)))
            treated_per_block = tuple(int(c) for c in counts)
            k = int(counts.sum())

        if estimator is None:
            if policy == "block":
                estimator = estimators.block_weighted_difference
            else:
                estimator = estimators.mean_difference
        elif not callable(estimator):
            raise ValidationError(f"estimator must be callable, got {estimator!r}")

        return cls(
            y0=y0_arr,
            y1=y1_arr,
            policy=policy,
            n_treated=k,
            p=prob,
            blocks=blocks_arr,
            block_labels=labels,
            block_members=members,
            block_treated=treated_per_block,
            covariates=cov_arr,
            estimator=estimator,
            T=T,
            seed=seed,
            n_jobs=n_jobs,
        )


@dataclass(frozen=True, eq=False)
class BootstrapDesign:
    """
    Frozen design for bootstrap resampling.

    Attributes:
        data: Original data. A float array of shape (n,) or (n, p), or,
            when given as a mapping, a dict of read-only 1D column arrays
            of any dtype (numeric, string, categorical codes).
        columns: Column names when data was given as a mapping, else None.
        statistic: fn(dataset) -> float. Receives an array, or a dict of
            columns when data was given as a mapping.
        policy: "rows", "residual", "groups", or "two_stage".
        group_members: Row indices per group (group policies), else None.
        response: Response column (residual policy): an index for array
            data, a name for mapping data; else None.
        fitted: Fitted values of the original model (residual policy).
        residuals: Residuals of the original model (residual policy).
        T: Number of bootstrap replicates.
        seed: Random seed for reproducibility.
        n_jobs: Worker threads for trial dispatch.
    """
    data: NDArray[np.floating[Any]] | dict[str, NDArray]
    columns: tuple[str, ...] | None
    statistic: Statistic
    policy: str
    group_members: tuple[NDArray[np.int_], ...] | None
    response: int | str | None
    fitted: NDArray[np.floating[Any]] | None
    residuals: NDArray[np.floating[Any]] | None
    T: int
    seed: int | None
    n_jobs: int

    @property
    def n(self) -> int:
        """Number of rows in the original data."""
        if self.columns is not None:
            return int(self.data[self.columns[0]].shape[0])
        return int(self.data.shape[0])

    @property
    def n_units(self) -> int:
        """Size of the resampling-unit population."""
        if self.group_members is not None:
            return len(self.group_members)
        return self.n

    def original(self) -> Any:
        """The original dataset, in the form the statistic receives."""
        if self.columns is not None:
            return dict(self.data)
        return self.data

    @classmethod
    def for_bootstrap(
        cls,
        data,
        statistic: Statistic,
        *,
        policy: str = "rows",
        groups=None,
        formula: str | None = None,
        response: int | None = None,
        T: int = 1000,
        seed: int | None = None,
        n_jobs: int | None = None,
    ) -> BootstrapDesign:
        """
        Create a bootstrap design with validation.

        Args:
            data: 1D/2D numeric array-like, or mapping of column name ->
                1D array. Mapping columns may hold any dtype; only the
                columns named in a residual formula must be numeric.
            statistic: fn(dataset) -> float.
            policy: "rows" (default), "residual", "groups", "two_stage".
            groups: Group label per row, or a column name for mapping data.
                Required for the group policies.
            formula: "y ~ a + b" model for the residual policy on mapping data.
            response: Response column index for the residual policy on 2D
                array data (default: last column); the other columns are
                predictors. 1D data uses an intercept-only model.
            T: Number of replicates. Must be >= 1.
            seed: Random seed.
            n_jobs: Worker threads; None or 1 runs serially.

        Raises:
            ValidationError: If inputs are invalid
            ConfigurationError: If the policy cannot be carried out
        """
        if not callable(statistic):
            raise ValidationError(f"statistic must be callable, got {statistic!r}")

        columns = None
        if isinstance(data, Mapping):
            if not data:
                raise ValidationError("data: mapping has no columns")
            columns = tuple(data.keys())
            table: dict[str, NDArray] = {}
            for name in columns:
                col = np.array(data[name])
                check_1d(col, name)
                col.setflags(write=False)
                table[name] = col
            check_consistent_length(*table.values(), names=columns)
            dataset: Any = table
            rows_of = table[columns[0]]
        else:
            dataset = check_array(data, 'data').copy()
            if dataset.ndim not in (1, 2):
                raise ValidationError(
                    f"data must be 1D or 2D, got {dataset.ndim}D"
                )
            rows_of = dataset
        check_min_samples(rows_of, 1, 'data')

        T = check_positive_int(T, 'T')
        n_jobs = _check_n_jobs(n_jobs)
        seed = check_seed(seed)

        if policy not in _resample.POLICIES:
            raise ConfigurationError(
                f"policy must be one of {_resample.POLICIES}, got {policy!r}",
                policy=policy,
            )

        members = None
        if policy in ("groups", "two_stage"):
            if groups is None:
                raise ConfigurationError(
                    f"policy={policy!r} requires groups", policy=policy,
                )
            if isinstance(groups, str):
                if columns is None or groups not in columns:
                    raise ConfigurationError(
                        f"groups names unknown column {groups!r}", policy=policy,
                    )
                labels = dataset[groups]
            else:
                labels = np.asarray(groups)
                check_1d(labels, 'groups')
                check_consistent_length(rows_of, labels, names=('data', 'groups'))
            _, inverse = np.unique(labels, return_inverse=True)
            members = tuple(
                np.flatnonzero(inverse == g) for g in range(inverse.max() + 1)
            )

        response_col = fitted = residuals = None
        if policy == "residual":
            response_col, fitted, residuals = _fit_for_residuals(
                dataset, columns, formula, response,
            )

        return cls(
            data=dataset,
            columns=columns,
            statistic=statistic,
            policy=policy,
            group_members=members,
            response=response_col,
            fitted=fitted,
            residuals=residuals,
            T=T,
            seed=seed,
            n_jobs=n_jobs,
        )


def _fit_for_residuals(
    data: Any,
    columns: tuple[str, ...] | None,
    formula: str | None,
    response: int | None,
) -> tuple[int | str | None, NDArray, NDArray]:
    """Fit the original-data model once; return (response, fitted, residuals)."""
    if columns is not None:
        if formula is None:
            raise ConfigurationError(
                "policy='residual' on named columns requires a formula",
                policy="residual",
            )
        parsed = Formula.parse(formula)
        # only the columns the formula names are converted to float
        sol = fit_formula(data, parsed)
        return parsed.response, sol.fitted_values, sol.residuals

    n = data.shape[0]
    if data.ndim == 1:
        sol = fit(np.ones((n, 1)), data)
        return None, sol.fitted_values, sol.residuals

    p = data.shape[1]
    col = p - 1 if response is None else check_int(response, 'response')
    if not -p <= col < p:
        raise ConfigurationError(
            f"response column {col} is out of range for {p} columns",
            policy="residual",
        )
    col %= p
    predictors = np.delete(data, col, axis=1)
    X = np.column_stack([np.ones(n), predictors])
    sol = fit(X, data[:, col])
    return col, sol.fitted_values, sol.residuals
