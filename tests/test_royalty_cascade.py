"""
Test suite for the royalty cascade.
Tests sequential deductions, ordering, and conservation of the base.
"""
import numpy as np
import pytest

from dealcalc.engine import apply_cascade
from dealcalc.models import RoyaltyTier

TIERS = [
    RoyaltyTier("Originator", 0.15),
    RoyaltyTier("Co-inventor", 0.075),
    RoyaltyTier("Institution", 0.15),
    RoyaltyTier("Formulation Partner", 0.10),
    RoyaltyTier("Agent", 0.04),
]


class TestCascadeAmounts:
    """Test per-tier amounts."""

    def test_known_breakdown_on_price_of_5(self):
        """Each tier takes its rate of what the earlier tiers left."""
        result = apply_cascade(5.0, TIERS, 22_000)

        per_unit = [line.per_unit for line in result.breakdown]
        np.testing.assert_allclose(
            per_unit, [0.75, 0.31875, 0.5896875, 0.33415625, 0.12029625], rtol=1e-12
        )
        assert result.royalties_per_unit == pytest.approx(2.11289)
        assert result.total_royalties == pytest.approx(2.11289 * 22_000)

    def test_amount_is_per_unit_times_volume(self):
        result = apply_cascade(5.0, TIERS, 1_500)
        for line in result.breakdown:
            assert line.amount == pytest.approx(line.per_unit * 1_500)

    def test_breakdown_preserves_tier_order(self):
        result = apply_cascade(5.0, TIERS, 100)
        assert [line.name for line in result.breakdown] == [t.name for t in TIERS]
        assert [line.rate for line in result.breakdown] == [t.rate for t in TIERS]

    def test_order_changes_amounts(self):
        """Same rates in a different order give different per-tier amounts."""
        forward = apply_cascade(5.0, TIERS, 1)
        backward = apply_cascade(5.0, list(reversed(TIERS)), 1)

        assert forward.breakdown[0].per_unit != backward.breakdown[-1].per_unit
        # Total is a product of (1 - rate) terms, so it does not depend on order
        assert forward.total_royalties == pytest.approx(backward.total_royalties)

    def test_not_parallel_percentages(self):
        """Second tier is applied to the remainder, not the original base."""
        result = apply_cascade(10.0, [RoyaltyTier("A", 0.5), RoyaltyTier("B", 0.5)], 1)
        assert result.breakdown[1].per_unit == pytest.approx(2.5)


class TestCascadeConservation:
    """Test that royalties plus residual equal the base."""

    @pytest.mark.parametrize("base", [0.01, 1.0, 3.2, 5.0, 1234.5])
    def test_conservation(self, base):
        result = apply_cascade(base, TIERS, 10)
        np.testing.assert_almost_equal(result.royalties_per_unit + result.residual_per_unit, base)

    def test_residual_matches_product_of_remainders(self):
        result = apply_cascade(5.0, TIERS, 1)
        expected = 5.0 * np.prod([1 - t.rate for t in TIERS])
        assert result.residual_per_unit == pytest.approx(expected)


class TestCascadeEdgeCases:
    """Test empty and degenerate inputs."""

    def test_no_tiers(self):
        result = apply_cascade(5.0, [], 1_000)
        assert result.breakdown == ()
        assert result.total_royalties == 0
        assert result.residual_per_unit == 5.0

    def test_zero_volume(self):
        result = apply_cascade(5.0, TIERS, 0)
        assert result.total_royalties == 0
        assert result.breakdown[0].per_unit == pytest.approx(0.75)

    def test_zero_base(self):
        result = apply_cascade(0.0, TIERS, 1_000)
        assert result.total_royalties == 0
        assert all(line.amount == 0 for line in result.breakdown)

    def test_negative_base_is_not_clamped(self):
        """Clamping is the caller's job; a negative base propagates."""
        result = apply_cascade(-2.0, [RoyaltyTier("A", 0.1)], 10)
        assert result.total_royalties == pytest.approx(-2.0)
