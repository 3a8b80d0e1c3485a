"""
Tests for the randomization simulator.

Covers determinism, unbiasedness, block weighting, missing trials under
Bernoulli assignment, threaded dispatch, and configuration errors.
"""

import numpy as np
import pytest

from pycausalsim.core.exceptions import (
    ConfigurationError,
    MissingTrialsWarning,
    NonReproducibleWarning,
    ValidationError,
)
from pycausalsim.core.rng import trial_streams
from pycausalsim.montecarlo import (
    RandomizationDesign,
    RevealedSample,
    block_weighted_difference,
    regression_adjusted_difference,
    simulate_randomization,
)
from pycausalsim.montecarlo._assignment import draw_assignment


# ---------------------------------------------------------------------------
# End-to-end: 8 units, 4 treated
# ---------------------------------------------------------------------------

class TestEightUnits:

    def test_mean_and_spread(self, eight_units):
        y0, y1 = eight_units
        sol = simulate_randomization(y0, y1, n_treated=4, T=1000, seed=18)

        assert sol.T == 1000
        assert sol.sate == pytest.approx(-7.5)
        assert sol.n_missing == 0
        assert sol.distribution.mean() == pytest.approx(-7.5, abs=1.0)
        assert 6.0 < sol.distribution.sd() < 10.0

    def test_estimates_are_attainable_differences(self, eight_units):
        """Every estimate is a difference of two 4-unit means."""
        y0, y1 = eight_units
        sol = simulate_randomization(y0, y1, n_treated=4, T=200, seed=18)
        # all outcomes are multiples of 5, so 4-unit means are multiples of 1.25
        np.testing.assert_allclose(sol.estimates / 1.25, np.round(sol.estimates / 1.25))

    def test_summary(self, eight_units):
        y0, y1 = eight_units
        sol = simulate_randomization(y0, y1, n_treated=4, T=50, seed=18)
        s = sol.summary()
        assert "RANDOMIZATION DISTRIBUTION" in s
        assert "complete" in s
        assert "RandomizationSolution" in repr(sol)
        assert sol.backend_name == "cpu_randomization"
        assert 'total_seconds' in sol.timing


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------

class TestDeterminism:

    def test_same_seed_bit_identical(self, eight_units):
        y0, y1 = eight_units
        a = simulate_randomization(y0, y1, T=300, seed=7)
        b = simulate_randomization(y0, y1, T=300, seed=7)
        np.testing.assert_array_equal(a.estimates, b.estimates)

    def test_different_seeds_differ(self, eight_units):
        y0, y1 = eight_units
        a = simulate_randomization(y0, y1, T=300, seed=7)
        b = simulate_randomization(y0, y1, T=300, seed=8)
        assert not np.array_equal(a.estimates, b.estimates)

    @pytest.mark.parametrize("policy_kw", [
        {"policy": "complete"},
        {"policy": "bernoulli", "p": 0.3},
    ])
    def test_threads_match_serial(self, rng, policy_kw):
        y0 = rng.normal(0, 1, 40)
        serial = simulate_randomization(y0, y0 + 1.0, T=200, seed=11, **policy_kw)
        threaded = simulate_randomization(
            y0, y0 + 1.0, T=200, seed=11, n_jobs=4, **policy_kw,
        )
        np.testing.assert_array_equal(serial.estimates, threaded.estimates)

    def test_threads_match_serial_across_chunks(self, rng, monkeypatch):
        monkeypatch.setattr(
            "pycausalsim.montecarlo.backends.cpu._CHUNK_PER_WORKER", 3,
        )
        y0 = rng.normal(0, 1, 30)
        serial = simulate_randomization(y0, y0 + 1.0, T=101, seed=15)
        threaded = simulate_randomization(y0, y0 + 1.0, T=101, seed=15, n_jobs=4)
        np.testing.assert_array_equal(serial.estimates, threaded.estimates)

    def test_unseeded_warns_and_reports_entropy(self, eight_units):
        y0, y1 = eight_units
        with pytest.warns(NonReproducibleWarning):
            sol = simulate_randomization(y0, y1, T=20)
        replay = simulate_randomization(y0, y1, T=20, seed=sol.info['entropy'])
        np.testing.assert_array_equal(sol.estimates, replay.estimates)


# ---------------------------------------------------------------------------
# Statistical properties
# ---------------------------------------------------------------------------

class TestUnbiasedness:

    def test_constant_effect(self, rng):
        y0 = rng.normal(100.0, 15.0, 120)
        y1 = y0 + 10.0
        sol = simulate_randomization(y0, y1, n_treated=60, T=1000, seed=1)
        assert abs(sol.distribution.mean() - 10.0) < 0.5

    def test_zero_variance_outcomes(self):
        """Constant potential outcomes give exactly the deterministic difference."""
        y0 = np.full(10, 3.0)
        y1 = np.full(10, 5.0)
        sol = simulate_randomization(y0, y1, n_treated=3, T=50, seed=2)
        np.testing.assert_array_equal(sol.estimates, 2.0)
        assert sol.distribution.sd() == 0.0

    def test_bernoulli_unbiased(self, rng):
        y0 = rng.normal(0.0, 1.0, 200)
        sol = simulate_randomization(y0, y0 + 2.0, policy="bernoulli", p=0.5, T=500, seed=3)
        assert sol.distribution.mean() == pytest.approx(2.0, abs=0.1)


class TestBlocks:

    def test_weighting_identity(self, sixteen_units_four_blocks):
        """Simulator estimates equal the hand-computed weighted block average."""
        y0, y1, blocks = sixteen_units_four_blocks
        T, seed = 25, 4
        sol = simulate_randomization(
            y0, y1, policy="block", blocks=blocks, n_treated=4, T=T, seed=seed,
        )
        design = RandomizationDesign.for_randomization(
            y0, y1, policy="block", blocks=blocks, n_treated=4, T=T, seed=seed,
        )
        _, gens = trial_streams(seed, T)
        for t in range(T):
            z = draw_assignment(design, gens[t])
            y = np.where(z == 1, y1, y0)
            num = 0.0
            for b in (1, 2, 3, 4):
                m = blocks == b
                assert z[m].sum() == 1
                tau_b = y[m & (z == 1)].mean() - y[m & (z == 0)].mean()
                num += m.sum() * tau_b
            assert sol.estimates[t] == pytest.approx(num / 16.0, rel=1e-12)

    def test_block_counts_reported(self, sixteen_units_four_blocks):
        y0, y1, blocks = sixteen_units_four_blocks
        sol = simulate_randomization(
            y0, y1, policy="block", blocks=blocks, n_treated=4, T=5, seed=1,
        )
        assert sol.info['block_treated'] == {1: 1, 2: 1, 3: 1, 4: 1}

    def test_block_mean_is_sate(self, sixteen_units_four_blocks):
        y0, y1, blocks = sixteen_units_four_blocks
        sol = simulate_randomization(
            y0, y1, policy="block", blocks=blocks, T=1000, seed=5,
        )
        # effect is 2 * block, so SATE = 2 * 2.5 = 5
        assert sol.sate == pytest.approx(5.0)
        assert sol.distribution.mean() == pytest.approx(5.0, abs=0.75)

    def test_weighted_estimator_direct(self):
        y = np.array([1.0, 3.0, 10.0, 20.0, 30.0, 60.0])
        z = np.array([0, 1, 0, 1, 0, 1])
        blocks = np.array(["a", "a", "b", "b", "b", "b"])
        sample = RevealedSample(y=y, z=z, blocks=blocks)
        # block a: 3 - 1 = 2 (n=2); block b: 40 - 20 = 20 (n=4)
        assert block_weighted_difference(sample) == pytest.approx((2 * 2 + 4 * 20) / 6)


class TestPostStratification:

    @pytest.fixture
    def two_blocks(self):
        # constant outcomes inside each block, effect 1 everywhere
        y0 = np.array([5.0, 5.0, 5.0, 5.0, 100.0, 100.0, 100.0, 100.0])
        blocks = np.array([1, 1, 1, 1, 2, 2, 2, 2])
        return y0, y0 + 1.0, blocks

    def test_complete_policy_keeps_blocks(self, two_blocks):
        y0, y1, blocks = two_blocks
        design = RandomizationDesign.for_randomization(
            y0, y1, policy="complete", blocks=blocks, seed=1,
        )
        np.testing.assert_array_equal(design.blocks, blocks)
        assert design.block_labels == ()

    def test_block_weighted_under_complete_policy(self, two_blocks):
        y0, y1, blocks = two_blocks
        with pytest.warns(MissingTrialsWarning):
            sol = simulate_randomization(
                y0, y1, policy="complete", blocks=blocks,
                estimator=block_weighted_difference, T=500, seed=3,
            )
        # draws that leave a block with one arm only have no estimate
        assert sol.n_missing > 0
        np.testing.assert_allclose(sol.distribution.valid, 1.0)

    def test_plain_difference_ignores_blocks(self, two_blocks):
        y0, y1, blocks = two_blocks
        sol = simulate_randomization(
            y0, y1, policy="complete", blocks=blocks, T=200, seed=3,
        )
        assert sol.distribution.sd() > 1.0

    def test_blocks_length_checked_for_every_policy(self, two_blocks):
        y0, y1, _ = two_blocks
        with pytest.raises(ValidationError):
            simulate_randomization(y0, y1, policy="bernoulli", blocks=[1, 2], seed=1)


class TestMissingTrials:

    def test_bernoulli_degenerate_draws(self):
        y0 = np.array([1.0, 2.0, 3.0])
        with pytest.warns(MissingTrialsWarning):
            sol = simulate_randomization(y0, y0 + 1.0, policy="bernoulli", T=300, seed=9)
        assert sol.n_missing > 0
        assert sol.distribution.n_missing == sol.n_missing
        assert sol.T == 300
        assert sol._result.has_warning("no value")
        assert np.isnan(sol.distribution.mean(na_rm=False))
        with pytest.warns(MissingTrialsWarning):
            assert np.isfinite(sol.distribution.mean())

    def test_other_errors_propagate(self, eight_units):
        y0, y1 = eight_units

        def broken(sample):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            simulate_randomization(y0, y1, estimator=broken, T=5, seed=1)


class TestRegressionAdjustment:

    def test_recovers_constant_effect(self, rng):
        n = 80
        x = rng.normal(0.0, 1.0, n)
        y0 = 3.0 * x + rng.normal(0.0, 0.1, n)
        sol = simulate_randomization(
            y0, y0 + 4.0, covariates=x, estimator=regression_adjusted_difference,
            T=100, seed=6,
        )
        assert sol.distribution.mean() == pytest.approx(4.0, abs=0.05)
        # adjustment removes the covariate noise
        plain = simulate_randomization(y0, y0 + 4.0, T=100, seed=6)
        assert sol.distribution.sd() < plain.distribution.sd()


class TestP_Value:

    def test_sharp_null(self, rng):
        y = rng.normal(0.0, 1.0, 20)
        sol = simulate_randomization(y, y, T=999, seed=12)
        assert sol.p_value(10.0) == pytest.approx(1.0 / 1000.0)
        assert sol.p_value(0.0) == pytest.approx(1.0)
        assert 0.0 < sol.p_value(0.3, alternative="greater") <= 1.0

    def test_bad_alternative(self, eight_units):
        y0, y1 = eight_units
        sol = simulate_randomization(y0, y1, T=10, seed=1)
        with pytest.raises(ValidationError):
            sol.p_value(1.0, alternative="both")


# ---------------------------------------------------------------------------
# Configuration errors, raised before any trial runs
# ---------------------------------------------------------------------------

class TestConfiguration:

    @pytest.mark.parametrize("k", [0, 8, 9])
    def test_complete_group_sizes(self, eight_units, k):
        y0, y1 = eight_units
        with pytest.raises(ConfigurationError):
            simulate_randomization(y0, y1, n_treated=k, seed=1)

    def test_sizes_exceed_population(self, eight_units):
        y0, y1 = eight_units
        with pytest.raises(ConfigurationError) as exc:
            simulate_randomization(y0, y1, n_treated=5, n_control=5, seed=1)
        assert exc.value.policy == "complete"

    def test_block_without_control(self):
        y0 = np.zeros(6)
        blocks = [1, 1, 2, 2, 2, 2]
        with pytest.raises(ConfigurationError, match="block 1"):
            simulate_randomization(
                y0, y0, policy="block", blocks=blocks, n_treated={1: 2, 2: 2}, seed=1,
            )

    def test_singleton_block(self):
        y0 = np.zeros(5)
        with pytest.raises(ConfigurationError):
            simulate_randomization(y0, y0, policy="block", blocks=[1, 2, 2, 2, 2], seed=1)

    def test_block_requires_labels(self, eight_units):
        y0, y1 = eight_units
        with pytest.raises(ConfigurationError, match="requires blocks"):
            simulate_randomization(y0, y1, policy="block", seed=1)

    def test_unknown_policy(self, eight_units):
        y0, y1 = eight_units
        with pytest.raises(ConfigurationError, match="policy"):
            simulate_randomization(y0, y1, policy="cluster", seed=1)

    def test_bernoulli_rejects_counts(self, eight_units):
        y0, y1 = eight_units
        with pytest.raises(ConfigurationError):
            simulate_randomization(y0, y1, policy="bernoulli", n_treated=4, seed=1)

    def test_bernoulli_probability(self, eight_units):
        y0, y1 = eight_units
        with pytest.raises(ValidationError):
            simulate_randomization(y0, y1, policy="bernoulli", p=1.0, seed=1)

    def test_T_positive(self, eight_units):
        y0, y1 = eight_units
        with pytest.raises(ValidationError):
            simulate_randomization(y0, y1, T=0, seed=1)

    def test_estimator_callable(self, eight_units):
        y0, y1 = eight_units
        with pytest.raises(ValidationError):
            simulate_randomization(y0, y1, estimator="mean", seed=1)

    def test_length_mismatch(self):
        with pytest.raises(ValidationError):
            simulate_randomization([1.0, 2.0, 3.0], [1.0, 2.0], seed=1)

    def test_no_trial_runs_on_error(self, eight_units):
        y0, y1 = eight_units
        calls = []

        def spy(sample):
            calls.append(1)
            return 0.0

        with pytest.raises(ConfigurationError):
            simulate_randomization(y0, y1, n_treated=10, estimator=spy, seed=1)
        assert calls == []

    @pytest.mark.parametrize("k", [4.9, 4.0, "4"])
    def test_n_treated_must_be_integer(self, eight_units, k):
        y0, y1 = eight_units
        with pytest.raises(ValidationError, match="expected an integer"):
            simulate_randomization(y0, y1, n_treated=k, seed=1)

    def test_block_counts_must_be_integer(self, sixteen_units_four_blocks):
        y0, y1, blocks = sixteen_units_four_blocks
        with pytest.raises(ValidationError, match="expected an integer"):
            simulate_randomization(
                y0, y1, policy="block", blocks=blocks, n_treated=4.5, seed=1,
            )

    @pytest.mark.parametrize("seed", [-1, 2.5])
    def test_seed_validated(self, eight_units, seed):
        y0, y1 = eight_units
        with pytest.raises(ValidationError, match="seed"):
            simulate_randomization(y0, y1, T=5, seed=seed)
