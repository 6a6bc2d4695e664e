"""
Per-year evaluation for the two deal structures.

Both models share the cost tier resolver and the royalty cascade; they differ
in what the cascade is applied to and in what counts as the deal owner's
revenue:

- TRANSFER PRICE: the owner sells each unit to the partner at a fixed price.
  Revenue = price × units, the owner bears the production cost, and royalties
  are cascaded on the price (or on price minus unit cost).
- PROFIT SHARE: the partner sells the product and the owner takes an agreed
  share of the partner's gross profit. Revenue = owner share, and royalties
  are cascaded on the owner share per unit.

In both, overhead is charged on the pre-overhead profit only when it is
positive, and the year's service fees are added after overhead.
"""

import math
from typing import Callable, Optional, Sequence

from ..models import (
    DealMode,
    DealParameters,
    PartnerAnalysis,
    RoyaltyBase,
    RoyaltyTier,
    YearlyResult,
)
from .cost_tiers import resolve_unit_cost
from .royalty_cascade import CascadeResult, apply_cascade

CostResolver = Callable[[float, Optional[float]], float]
CascadeFn = Callable[[float, Sequence[RoyaltyTier], float], CascadeResult]


def safe_percent(numerator: float, denominator: float) -> float:
    """numerator / denominator × 100, or 0 when the denominator is not positive or the result is not finite."""
    if denominator <= 0:
        return 0.0
    value = numerator / denominator * 100
    return value if math.isfinite(value) else 0.0


def _per_unit(amount: float, volume: float) -> float:
    if volume <= 0:
        return 0.0
    value = amount / volume
    return value if math.isfinite(value) else 0.0


class DealModel:
    """
    Base class for deal-mode strategies.

    Subclasses implement ``evaluate_year``; the cost resolver and the cascade
    are injected so alternative tables can be used without touching the models.
    """

    mode: DealMode

    def __init__(
        self,
        royalty_tiers: Sequence[RoyaltyTier],
        overhead_rate: float,
        cost_override: Optional[float] = None,
        cost_resolver: CostResolver = resolve_unit_cost,
        cascade: CascadeFn = apply_cascade,
    ) -> None:
        self.royalty_tiers = tuple(royalty_tiers)
        self.overhead_rate = overhead_rate
        self.cost_override = cost_override
        self._resolve_cost = cost_resolver
        self._cascade = cascade

    def unit_cost(self, volume: float) -> float:
        return self._resolve_cost(volume, self.cost_override)

    def overhead_on(self, net_before_overhead: float) -> float:
        """Overhead charged on a year's pre-overhead profit (never on a loss)."""
        return max(0.0, net_before_overhead) * self.overhead_rate

    def evaluate_year(self, year: int, volume: float, service_fee_income: float = 0.0) -> YearlyResult:
        raise NotImplementedError


class TransferPriceDealModel(DealModel):
    """
    Model for fixed transfer-price deals.

    The partner buys each unit from the deal owner at ``transfer_price_per_unit``.
    If a partner selling price is known, a partner view is added showing the
    partner's margin on resale.
    """

    mode = DealMode.TRANSFER_PRICE

    def __init__(
        self,
        transfer_price_per_unit: float,
        royalty_tiers: Sequence[RoyaltyTier],
        overhead_rate: float,
        royalty_base: RoyaltyBase = RoyaltyBase.ON_PRICE,
        cost_override: Optional[float] = None,
        partner_selling_price: Optional[float] = None,
        **collaborators,
    ) -> None:
        """
        Initialize transfer-price deal model.

        Args:
            transfer_price_per_unit: Price the partner pays per unit
            royalty_tiers: Royalty tiers in payment order
            overhead_rate: Overhead as a fraction of positive pre-overhead profit
            royalty_base: Cascade on the price, or on price minus unit cost
            cost_override: Explicit unit cost instead of the tier table
            partner_selling_price: Partner's resale price per unit, if known
        """
        super().__init__(royalty_tiers, overhead_rate, cost_override, **collaborators)
        self.transfer_price_per_unit = transfer_price_per_unit
        self.royalty_base = royalty_base
        self.partner_selling_price = partner_selling_price

    def royalty_base_per_unit(self, unit_cost: float) -> float:
        if self.royalty_base == RoyaltyBase.ON_PRICE_MINUS_COST:
            return max(0.0, self.transfer_price_per_unit - unit_cost)
        return self.transfer_price_per_unit

    def _partner_view(self, volume: float, revenue: float) -> Optional[PartnerAnalysis]:
        price = self.partner_selling_price
        if price is None or price <= 0 or volume <= 0:
            return None

        partner_revenue = price * volume
        # What the partner pays the deal owner
        partner_cost = revenue
        partner_margin = partner_revenue - partner_cost
        return PartnerAnalysis(
            partner_revenue=partner_revenue,
            partner_cost=partner_cost,
            partner_margin=partner_margin,
            partner_margin_percent=safe_percent(partner_margin, partner_revenue),
        )

    def evaluate_year(self, year: int, volume: float, service_fee_income: float = 0.0) -> YearlyResult:
        """
        Evaluate one forecast year.

        Args:
            year: Year number (1-5)
            volume: Units sold in the year
            service_fee_income: Service fees scheduled in the year

        Returns:
            YearlyResult for the year
        """
        cost = self.unit_cost(volume)
        revenue = self.transfer_price_per_unit * volume
        total_cost = cost * volume

        cascade = self._cascade(self.royalty_base_per_unit(cost), self.royalty_tiers, volume)

        net_before_overhead = revenue - total_cost - cascade.total_royalties
        overhead = self.overhead_on(net_before_overhead)
        net_profit = net_before_overhead - overhead + service_fee_income

        return YearlyResult(
            year=year,
            sales=volume,
            revenue=revenue,
            cost_per_unit=cost,
            total_cost=total_cost,
            royalty_breakdown=cascade.breakdown,
            total_royalties=cascade.total_royalties,
            overhead=overhead,
            service_fee_income=service_fee_income,
            net_profit=net_profit,
            profit_per_unit=_per_unit(net_profit, volume),
            profit_margin_percent=safe_percent(net_profit, revenue),
            partner_analysis=self._partner_view(volume, revenue),
        )


class ProfitShareDealModel(DealModel):
    """
    Model for gross-profit share deals.

    The partner sells at ``partner_selling_price`` and carries the production
    cost. The deal owner takes ``sla_share_percent`` of the partner's gross
    profit; royalties are cascaded on that share spread per unit.
    """

    mode = DealMode.PROFIT_SHARE

    def __init__(
        self,
        partner_selling_price: Optional[float],
        sla_share_percent: float,
        royalty_tiers: Sequence[RoyaltyTier],
        overhead_rate: float,
        cost_override: Optional[float] = None,
        **collaborators,
    ) -> None:
        """
        Initialize profit-share deal model.

        Args:
            partner_selling_price: Partner's selling price per unit (None counts as 0)
            sla_share_percent: Owner's share of partner gross profit (e.g. 0.4)
            royalty_tiers: Royalty tiers in payment order
            overhead_rate: Overhead as a fraction of positive pre-overhead profit
            cost_override: Explicit unit cost instead of the tier table
        """
        super().__init__(royalty_tiers, overhead_rate, cost_override, **collaborators)
        self.partner_selling_price = partner_selling_price or 0.0
        self.sla_share_percent = sla_share_percent

    def evaluate_year(self, year: int, volume: float, service_fee_income: float = 0.0) -> YearlyResult:
        """
        Evaluate one forecast year.

        Args:
            year: Year number (1-5)
            volume: Units sold in the year
            service_fee_income: Service fees scheduled in the year

        Returns:
            YearlyResult for the year; ``revenue`` is the owner share
        """
        cost = self.unit_cost(volume)
        partner_revenue = self.partner_selling_price * volume
        total_cost = cost * volume

        gross_profit = partner_revenue - total_cost
        owner_share = gross_profit * self.sla_share_percent

        base = _per_unit(owner_share, volume)
        cascade = self._cascade(base, self.royalty_tiers, volume)

        net_before_overhead = owner_share - cascade.total_royalties
        overhead = self.overhead_on(net_before_overhead)
        net_profit = net_before_overhead - overhead + service_fee_income

        partner_margin = gross_profit * (1 - self.sla_share_percent)
        partner = PartnerAnalysis(
            partner_revenue=partner_revenue,
            partner_cost=total_cost + owner_share,
            partner_margin=partner_margin,
            partner_margin_percent=safe_percent(partner_margin, partner_revenue),
        )

        return YearlyResult(
            year=year,
            sales=volume,
            revenue=owner_share,
            cost_per_unit=cost,
            total_cost=total_cost,
            royalty_breakdown=cascade.breakdown,
            total_royalties=cascade.total_royalties,
            overhead=overhead,
            service_fee_income=service_fee_income,
            net_profit=net_profit,
            profit_per_unit=_per_unit(net_profit, volume),
            profit_margin_percent=safe_percent(net_profit, owner_share),
            partner_analysis=partner,
        )


def create_transfer_price_deal(params: DealParameters, **collaborators) -> TransferPriceDealModel:
    """Create a transfer-price model from deal parameters."""
    return TransferPriceDealModel(
        transfer_price_per_unit=params.transfer_price_per_unit,
        royalty_tiers=params.royalty_tiers,
        overhead_rate=params.overhead_rate,
        royalty_base=params.royalty_base,
        cost_override=params.cost_override,
        partner_selling_price=params.partner_selling_price,
        **collaborators,
    )


def create_profit_share_deal(params: DealParameters, **collaborators) -> ProfitShareDealModel:
    """Create a profit-share model from deal parameters."""
    return ProfitShareDealModel(
        partner_selling_price=params.partner_selling_price,
        sla_share_percent=params.sla_share_percent,
        royalty_tiers=params.royalty_tiers,
        overhead_rate=params.overhead_rate,
        cost_override=params.cost_override,
        **collaborators,
    )


def create_deal_model(params: DealParameters, **collaborators) -> DealModel:
    """
    Create the model for the parameters' deal mode.

    Args:
        params: Deal parameters
        **collaborators: Optional ``cost_resolver`` / ``cascade`` replacements

    Returns:
        DealModel instance
    """
    if params.mode == DealMode.TRANSFER_PRICE:
        return create_transfer_price_deal(params, **collaborators)
    elif params.mode == DealMode.PROFIT_SHARE:
        return create_profit_share_deal(params, **collaborators)
    else:
        raise ValueError(f"Unknown deal mode: {params.mode}")
