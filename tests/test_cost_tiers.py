"""
Test suite for unit cost tier resolution.
Tests table boundaries, overrides, and monotonicity.
"""
import pytest

from dealcalc.engine import COST_TIERS, TOP_TIER_COST, resolve_unit_cost


class TestResolveUnitCost:
    """Test volume-to-cost step table."""

    @pytest.mark.parametrize("volume, expected", [
        (0, 2.19),
        (10_999, 2.19),
        (11_000, 2.19),
        (21_999, 2.19),
        (22_000, 1.79),
        (43_999, 1.79),
        (44_000, 1.49),
        (65_999, 1.49),
        (66_000, 1.42),
        (109_999, 1.42),
        (110_000, 1.37),
        (5_000_000, 1.37),
    ])
    def test_table_boundaries(self, volume, expected):
        """Upper bounds are exclusive."""
        assert resolve_unit_cost(volume) == expected

    def test_lowest_tier_for_11000(self):
        assert resolve_unit_cost(11_000) == 2.19

    def test_first_two_bands_share_a_price(self):
        assert COST_TIERS[0][1] == COST_TIERS[1][1] == 2.19

    def test_monotonic_non_increasing(self):
        """Cost never goes up as volume increases."""
        volumes = [0] + [bound for bound, _ in COST_TIERS] + [1_000_000]
        costs = [resolve_unit_cost(v) for v in volumes]
        assert all(a >= b for a, b in zip(costs, costs[1:]))
        assert costs[-1] == TOP_TIER_COST


class TestCostOverride:
    """Test explicit per-unit cost."""

    @pytest.mark.parametrize("volume", [0, 1_000, 22_000, 250_000])
    def test_override_bypasses_table(self, volume):
        assert resolve_unit_cost(volume, override=1.25) == 1.25

    def test_zero_override_is_honoured(self):
        """An override of 0 is a value, not 'no override'."""
        assert resolve_unit_cost(22_000, override=0.0) == 0.0

    def test_none_uses_table(self):
        assert resolve_unit_cost(22_000, override=None) == 1.79
