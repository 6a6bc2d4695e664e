"""
Test suite for five-year aggregation.
Tests fee placement, totals, margin guards, and the yearly table.
"""
from dataclasses import replace

import pytest

from dealcalc.engine import evaluate_five_years
from dealcalc.models import (
    DealMode,
    DealParameters,
    RoyaltyTier,
    ServiceFee,
    ServiceFees,
)

TIERS = [
    RoyaltyTier("Originator", 0.15),
    RoyaltyTier("Co-inventor", 0.075),
    RoyaltyTier("Institution", 0.15),
    RoyaltyTier("Formulation Partner", 0.10),
    RoyaltyTier("Agent", 0.04),
]
FORECAST = [11_000, 22_000, 44_000, 66_000, 110_000]


@pytest.fixture
def transfer_price_params():
    return DealParameters(
        forecast_sales=FORECAST,
        royalty_tiers=TIERS,
        mode=DealMode.TRANSFER_PRICE,
        overhead_rate=0.1,
        transfer_price_per_unit=5.0,
        partner_selling_price=9.0,
        sla_share_percent=0.4,
        service_fees=ServiceFees(
            signing=ServiceFee(50_000, 1),
            approval=ServiceFee(100_000, 2),
            launch=ServiceFee(150_000, 3),
        ),
    )


class TestDealParameters:
    """Test the parameter set's structural checks."""

    @pytest.mark.parametrize("sales", [[], [1, 2, 3, 4], [1, 2, 3, 4, 5, 6]])
    def test_forecast_must_have_five_years(self, sales):
        with pytest.raises(ValueError):
            DealParameters(forecast_sales=sales, royalty_tiers=TIERS)

    def test_sequences_become_tuples(self):
        params = DealParameters(forecast_sales=[1, 2, 3, 4, 5], royalty_tiers=list(TIERS))
        assert params.forecast_sales == (1, 2, 3, 4, 5)
        assert isinstance(params.royalty_tiers, tuple)


class TestFeePlacement:
    """Test service fees land in their scheduled year only."""

    def test_fees_by_year(self, transfer_price_params):
        result = evaluate_five_years(transfer_price_params)
        income = [y.service_fee_income for y in result.years]
        assert income == [50_000, 100_000, 150_000, 0, 0]

    def test_fees_in_same_year_are_summed(self):
        fees = ServiceFees(
            signing=ServiceFee(10, 2),
            approval=ServiceFee(20, 2),
            launch=ServiceFee(30, 3),
        )
        assert fees.income_for_year(1) == 0
        assert fees.income_for_year(2) == 30
        assert fees.income_for_year(3) == 30

    def test_zero_fee_counted_once(self):
        fees = ServiceFees(signing=ServiceFee(0, 2), approval=ServiceFee(0, 2), launch=ServiceFee(5, 1))
        params = DealParameters(forecast_sales=[0] * 5, royalty_tiers=TIERS, service_fees=fees)
        result = evaluate_five_years(params)
        assert [y.service_fee_income for y in result.years] == [5, 0, 0, 0, 0]

    def test_fee_affects_only_its_year(self, transfer_price_params):
        without = evaluate_five_years(
            DealParameters(
                forecast_sales=FORECAST, royalty_tiers=TIERS,
                overhead_rate=0.1, transfer_price_per_unit=5.0,
            )
        )
        with_fees = evaluate_five_years(transfer_price_params)
        deltas = [b.net_profit - a.net_profit for a, b in zip(without.years, with_fees.years)]
        assert deltas == pytest.approx([50_000, 100_000, 150_000, 0, 0])


class TestTotals:
    """Test five-year totals equal the sum of the years."""

    @pytest.mark.parametrize("mode", list(DealMode))
    def test_aggregate_consistency(self, transfer_price_params, mode):
        result = evaluate_five_years(replace(transfer_price_params, mode=mode))
        assert result.mode == mode
        assert len(result.years) == 5
        assert [y.year for y in result.years] == [1, 2, 3, 4, 5]
        assert result.total_revenue == pytest.approx(sum(y.revenue for y in result.years))
        assert result.total_cost == pytest.approx(sum(y.total_cost for y in result.years))
        assert result.total_royalties == pytest.approx(sum(y.total_royalties for y in result.years))
        assert result.total_overhead == pytest.approx(sum(y.overhead for y in result.years))
        assert result.total_net_profit == pytest.approx(sum(y.net_profit for y in result.years))
        assert result.total_service_income == pytest.approx(300_000)

    def test_years_use_their_own_volume(self, transfer_price_params):
        result = evaluate_five_years(transfer_price_params)
        assert [y.sales for y in result.years] == FORECAST
        assert [y.cost_per_unit for y in result.years] == [2.19, 1.79, 1.49, 1.42, 1.37]

    def test_average_margin(self, transfer_price_params):
        result = evaluate_five_years(transfer_price_params)
        expected = result.total_net_profit / result.total_revenue * 100
        assert result.average_margin_percent == pytest.approx(expected)

    def test_average_margin_zero_revenue(self):
        fees = ServiceFees(signing=ServiceFee(1_000, 1))
        params = DealParameters(forecast_sales=[0] * 5, royalty_tiers=TIERS, service_fees=fees)
        result = evaluate_five_years(params)
        assert result.total_revenue == 0
        assert result.total_net_profit == 1_000
        assert result.average_margin_percent == 0

    def test_average_margin_negative_revenue(self):
        """A profit share sold below cost keeps the ratio of two negative totals."""
        params = DealParameters(
            forecast_sales=[1_000] * 5,
            royalty_tiers=[],
            mode=DealMode.PROFIT_SHARE,
            cost_override=2.0,
            partner_selling_price=1.0,
            sla_share_percent=0.5,
        )
        result = evaluate_five_years(params)
        assert result.total_revenue == pytest.approx(-2_500)
        assert result.total_net_profit == pytest.approx(-2_500)
        assert result.average_margin_percent == pytest.approx(100.0)
        assert all(y.profit_margin_percent == 0 for y in result.years)

    def test_partner_profit_total(self, transfer_price_params):
        result = evaluate_five_years(transfer_price_params)
        expected = sum(y.partner_analysis.partner_margin for y in result.years)
        assert result.total_partner_profit == pytest.approx(expected)
        assert result.total_partner_profit == pytest.approx((9.0 - 5.0) * sum(FORECAST))

    def test_partner_profit_absent(self):
        params = DealParameters(forecast_sales=FORECAST, royalty_tiers=TIERS, transfer_price_per_unit=5.0)
        assert evaluate_five_years(params).total_partner_profit is None

    def test_partner_profit_skips_zero_volume_years(self):
        params = DealParameters(
            forecast_sales=[1_000, 0, 0, 0, 0], royalty_tiers=TIERS,
            transfer_price_per_unit=5.0, partner_selling_price=6.0,
        )
        result = evaluate_five_years(params)
        assert result.years[1].partner_analysis is None
        assert result.total_partner_profit == pytest.approx(1_000)

    def test_royalty_totals_by_tier(self, transfer_price_params):
        result = evaluate_five_years(transfer_price_params)
        totals = result.royalty_totals()
        assert list(totals) == [t.name for t in TIERS]
        assert sum(totals.values()) == pytest.approx(result.total_royalties)

    def test_inputs_unchanged(self, transfer_price_params):
        before = replace(transfer_price_params)
        evaluate_five_years(transfer_price_params)
        assert transfer_price_params == before
        assert transfer_price_params.forecast_sales == tuple(FORECAST)


class TestYearTable:
    """Test the DataFrame view of a result."""

    def test_to_dataframe(self, transfer_price_params):
        result = evaluate_five_years(transfer_price_params)
        df = result.to_dataframe()

        assert list(df.index) == [1, 2, 3, 4, 5]
        assert df["net_profit"].sum() == pytest.approx(result.total_net_profit)
        assert df.loc[2, "service_fee_income"] == 100_000
        assert df.loc[1, "partner_margin"] == pytest.approx(4.0 * 11_000)
