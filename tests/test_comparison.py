"""
Test suite for side-by-side deal mode comparison.
"""
from dataclasses import replace

import pytest

from dealcalc.engine import (
    alternate_parameters,
    compare_deal_modes,
    evaluate_alternate_mode,
    evaluate_five_years,
)
from dealcalc.models import DealMode, DealParameters, RoyaltyTier, ServiceFee, ServiceFees

TIERS = [RoyaltyTier("Originator", 0.15), RoyaltyTier("Agent", 0.04)]


@pytest.fixture
def params():
    return DealParameters(
        forecast_sales=[10_000, 20_000, 30_000, 40_000, 50_000],
        royalty_tiers=TIERS,
        mode=DealMode.TRANSFER_PRICE,
        overhead_rate=0.05,
        cost_override=2.0,
        transfer_price_per_unit=5.0,
        partner_selling_price=10.0,
        sla_share_percent=0.4,
        service_fees=ServiceFees(signing=ServiceFee(25_000, 1)),
    )


class TestAlternateMode:
    """Test evaluating the mode the deal is not configured for."""

    def test_alternate_parameters_switch_mode_only(self, params):
        alt = alternate_parameters(params)
        assert alt.mode == DealMode.PROFIT_SHARE
        assert replace(alt, mode=params.mode) == params

    def test_switches_back(self, params):
        assert alternate_parameters(alternate_parameters(params)) == params

    def test_alternate_matches_direct_evaluation(self, params):
        alt = evaluate_alternate_mode(params)
        direct = evaluate_five_years(replace(params, mode=DealMode.PROFIT_SHARE))
        assert alt == direct

    def test_shares_volumes_and_cost_basis(self, params):
        alt = evaluate_alternate_mode(params)
        assert [y.sales for y in alt.years] == list(params.forecast_sales)
        assert all(y.cost_per_unit == 2.0 for y in alt.years)
        assert alt.years[0].service_fee_income == 25_000


class TestCompareDealModes:
    """Test the combined comparison."""

    def test_primary_is_configured_mode(self, params):
        comparison = compare_deal_modes(params)
        assert comparison.primary.mode == DealMode.TRANSFER_PRICE
        assert comparison.alternate.mode == DealMode.PROFIT_SHARE
        assert comparison.primary == evaluate_five_years(params)

    def test_net_profit_delta(self, params):
        comparison = compare_deal_modes(params)
        expected = comparison.alternate.total_net_profit - comparison.primary.total_net_profit
        assert comparison.net_profit_delta == pytest.approx(expected)

    def test_preferred_mode(self, params):
        # Profit share: 40% of (10 - 2) = 3.20 per unit before royalties, vs 5 - 2 = 3.00 margin
        # under transfer price before royalties on the full 5.00.
        comparison = compare_deal_modes(params)
        assert comparison.preferred_mode == DealMode.PROFIT_SHARE

    def test_tie_prefers_primary(self):
        params = DealParameters(forecast_sales=[0] * 5, royalty_tiers=TIERS, mode=DealMode.PROFIT_SHARE)
        comparison = compare_deal_modes(params)
        assert comparison.net_profit_delta == 0
        assert comparison.preferred_mode == DealMode.PROFIT_SHARE
