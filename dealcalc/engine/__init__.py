"""
Deal economics engine.

Provides unit cost tiers, the royalty cascade, per-year evaluation for
transfer-price and profit-share deals, and five-year aggregation.
"""

from .cost_tiers import (
    COST_TIERS,
    TOP_TIER_COST,
    resolve_unit_cost,
)
from .royalty_cascade import (
    CascadeResult,
    apply_cascade,
)
from .deal_modes import (
    DealModel,
    TransferPriceDealModel,
    ProfitShareDealModel,
    create_transfer_price_deal,
    create_profit_share_deal,
    create_deal_model,
    safe_percent,
)
from .aggregator import (
    average_margin,
    evaluate_years,
    summarize_years,
    evaluate_five_years,
)
from .comparison import (
    DealComparison,
    alternate_parameters,
    evaluate_alternate_mode,
    compare_deal_modes,
)

__version__ = "1.0.0"

__all__ = [
    # cost_tiers.py
    "COST_TIERS",
    "TOP_TIER_COST",
    "resolve_unit_cost",
    # royalty_cascade.py
    "CascadeResult",
    "apply_cascade",
    # deal_modes.py
    "DealModel",
    "TransferPriceDealModel",
    "ProfitShareDealModel",
    "create_transfer_price_deal",
    "create_profit_share_deal",
    "create_deal_model",
    "safe_percent",
    # aggregator.py
    "average_margin",
    "evaluate_years",
    "summarize_years",
    "evaluate_five_years",
    # comparison.py
    "DealComparison",
    "alternate_parameters",
    "evaluate_alternate_mode",
    "compare_deal_modes",
]
