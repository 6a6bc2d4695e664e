"""
Five-year aggregation of yearly deal results.

Each forecast year is evaluated independently with that year's volume and
scheduled service fees; totals are then folded from the yearly results.
"""

import logging
import math
from typing import Optional, Sequence

from ..models import DealParameters, FiveYearResult, YearlyResult
from .deal_modes import DealModel, create_deal_model

logger = logging.getLogger(__name__)


def evaluate_years(model: DealModel, params: DealParameters) -> Sequence[YearlyResult]:
    """
    Evaluate every forecast year with a deal model.

    Args:
        model: Deal-mode strategy to evaluate with
        params: Deal parameters supplying volumes and service fees

    Returns:
        Tuple of YearlyResult for years 1-5
    """
    return tuple(
        model.evaluate_year(
            year=year,
            volume=volume,
            service_fee_income=params.service_fees.income_for_year(year),
        )
        for year, volume in enumerate(params.forecast_sales, start=1)
    )


def average_margin(total_net_profit: float, total_revenue: float) -> float:
    """
    Five-year margin in percent.

    Unlike the per-year margin, a negative total revenue (a profit-share deal
    sold below cost) still yields a ratio. Only zero revenue or a non-finite
    ratio give 0.
    """
    if total_revenue == 0:
        return 0.0
    value = total_net_profit / total_revenue * 100
    return value if math.isfinite(value) else 0.0


def summarize_years(params: DealParameters, years: Sequence[YearlyResult]) -> FiveYearResult:
    """
    Fold yearly results into five-year totals.

    Args:
        params: Deal parameters the years were evaluated with
        years: Yearly results in year order

    Returns:
        FiveYearResult
    """
    total_revenue = sum(y.revenue for y in years)
    total_net_profit = sum(y.net_profit for y in years)

    partner_years = [y.partner_analysis for y in years if y.partner_analysis is not None]
    total_partner_profit: Optional[float] = None
    if partner_years:
        total_partner_profit = sum(p.partner_margin for p in partner_years)

    return FiveYearResult(
        mode=params.mode,
        years=tuple(years),
        total_revenue=total_revenue,
        total_cost=sum(y.total_cost for y in years),
        total_royalties=sum(y.total_royalties for y in years),
        total_overhead=sum(y.overhead for y in years),
        total_service_income=sum(y.service_fee_income for y in years),
        total_net_profit=total_net_profit,
        average_margin_percent=average_margin(total_net_profit, total_revenue),
        total_partner_profit=total_partner_profit,
    )


def evaluate_five_years(params: DealParameters, **collaborators) -> FiveYearResult:
    """
    Evaluate a deal over the five-year forecast.

    Args:
        params: Deal parameters
        **collaborators: Optional ``cost_resolver`` / ``cascade`` replacements

    Returns:
        FiveYearResult with yearly results and totals
    """
    model = create_deal_model(params, **collaborators)
    result = summarize_years(params, evaluate_years(model, params))

    logger.debug(
        "Evaluated %s deal: revenue=%.2f net_profit=%.2f margin=%.2f%%",
        params.mode.value,
        result.total_revenue,
        result.total_net_profit,
        result.average_margin_percent,
    )
    return result
