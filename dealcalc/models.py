"""Data models for deal economics calculations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import pandas as pd

FORECAST_YEARS = 5


class DealMode(Enum):
    """Deal structure under which a year is evaluated."""

    TRANSFER_PRICE = "transfer_price"
    PROFIT_SHARE = "profit_share"

    @property
    def label(self) -> str:
        return "Transfer Price" if self is DealMode.TRANSFER_PRICE else "Profit Share"

    @property
    def alternate(self) -> "DealMode":
        if self is DealMode.TRANSFER_PRICE:
            return DealMode.PROFIT_SHARE
        return DealMode.TRANSFER_PRICE


class RoyaltyBase(Enum):
    """What the royalty cascade is applied to in Transfer-Price mode."""

    ON_PRICE = "on_price"
    ON_PRICE_MINUS_COST = "on_price_minus_cost"


@dataclass(frozen=True)
class RoyaltyTier:
    """A single royalty holder and its rate (e.g. 0.15 for 15%)."""
    name: str
    rate: float


@dataclass(frozen=True)
class ServiceFee:
    """One-off fee paid to the deal owner in a given forecast year."""
    amount: float = 0.0
    year: int = 1


@dataclass(frozen=True)
class ServiceFees:
    """The three scheduled service fees of a deal."""
    signing: ServiceFee = field(default_factory=lambda: ServiceFee(0.0, 1))
    approval: ServiceFee = field(default_factory=lambda: ServiceFee(0.0, 2))
    launch: ServiceFee = field(default_factory=lambda: ServiceFee(0.0, 3))

    def as_tuple(self) -> Tuple[ServiceFee, ServiceFee, ServiceFee]:
        return (self.signing, self.approval, self.launch)

    def income_for_year(self, year: int) -> float:
        """Sum of every fee scheduled in ``year``."""
        return sum(fee.amount for fee in self.as_tuple() if fee.year == year)


@dataclass(frozen=True)
class DealParameters:
    """
    Complete, immutable input for a five-year deal evaluation.

    Both modes' fields are carried so the same parameters can be evaluated
    under the alternate mode for comparison. ``cost_override`` and
    ``partner_selling_price`` use None for "not set"; 0 is a real value.
    """

    forecast_sales: Tuple[float, ...]
    royalty_tiers: Tuple[RoyaltyTier, ...]
    mode: DealMode = DealMode.TRANSFER_PRICE
    overhead_rate: float = 0.0
    cost_override: Optional[float] = None
    service_fees: ServiceFees = field(default_factory=ServiceFees)

    # Transfer-Price mode
    transfer_price_per_unit: float = 0.0
    royalty_base: RoyaltyBase = RoyaltyBase.ON_PRICE

    # Profit-Share mode (partner price is also used for the partner view in Transfer-Price mode)
    partner_selling_price: Optional[float] = None
    sla_share_percent: float = 0.5

    def __post_init__(self) -> None:
        sales = tuple(self.forecast_sales)
        if len(sales) != FORECAST_YEARS:
            raise ValueError(
                f"forecast_sales must have exactly {FORECAST_YEARS} entries, got {len(sales)}"
            )
        # Normalise sequences so callers may pass lists
        object.__setattr__(self, "forecast_sales", sales)
        object.__setattr__(self, "royalty_tiers", tuple(self.royalty_tiers))


@dataclass(frozen=True)
class RoyaltyLine:
    """One tier's share of the cascade for a year."""
    name: str
    rate: float
    per_unit: float
    amount: float


@dataclass(frozen=True)
class PartnerAnalysis:
    """Mirrored profit view for the counterparty."""
    partner_revenue: float
    partner_cost: float
    partner_margin: float
    partner_margin_percent: float


@dataclass(frozen=True)
class YearlyResult:
    """Outcome of a single forecast year."""

    year: int
    sales: float
    revenue: float  # deal owner's revenue: transfer-price revenue or owner share
    cost_per_unit: float
    total_cost: float
    royalty_breakdown: Tuple[RoyaltyLine, ...]
    total_royalties: float
    overhead: float
    service_fee_income: float
    net_profit: float
    profit_per_unit: float
    profit_margin_percent: float
    partner_analysis: Optional[PartnerAnalysis] = None


@dataclass(frozen=True)
class FiveYearResult:
    """Five yearly results and their totals."""

    mode: DealMode
    years: Tuple[YearlyResult, ...]
    total_revenue: float
    total_cost: float
    total_royalties: float
    total_overhead: float
    total_service_income: float
    total_net_profit: float
    average_margin_percent: float
    total_partner_profit: Optional[float] = None

    def royalty_totals(self) -> Dict[str, float]:
        """Five-year royalty amount per tier, in tier order."""
        totals: Dict[str, float] = {}
        for year in self.years:
            for line in year.royalty_breakdown:
                totals[line.name] = totals.get(line.name, 0.0) + line.amount
        return totals

    def to_dataframe(self) -> pd.DataFrame:
        """
        Year-by-year table of the result.

        Returns:
            DataFrame with one row per year, indexed by year number
        """
        rows: List[Dict[str, Optional[float]]] = []
        for y in self.years:
            partner = y.partner_analysis
            rows.append({
                "year": y.year,
                "sales": y.sales,
                "revenue": y.revenue,
                "cost_per_unit": y.cost_per_unit,
                "total_cost": y.total_cost,
                "total_royalties": y.total_royalties,
                "overhead": y.overhead,
                "service_fee_income": y.service_fee_income,
                "net_profit": y.net_profit,
                "profit_per_unit": y.profit_per_unit,
                "profit_margin_percent": y.profit_margin_percent,
                "partner_margin": partner.partner_margin if partner else None,
            })
        return pd.DataFrame(rows).set_index("year")
