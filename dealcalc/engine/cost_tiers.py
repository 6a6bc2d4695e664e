"""
Unit production cost (COGS) by annual batch volume.

Cost per unit steps down as the annual volume grows. The table is checked in
order and each bound is exclusive.
"""

from typing import List, Optional, Tuple

# (exclusive upper bound on annual units, cost per unit)
# The first two bands share a price; they are kept separate as quoted by the manufacturer.
COST_TIERS: List[Tuple[float, float]] = [
    (11_000, 2.19),
    (22_000, 2.19),
    (44_000, 1.79),
    (66_000, 1.49),
    (110_000, 1.42),
]
TOP_TIER_COST = 1.37


def resolve_unit_cost(volume: float, override: Optional[float] = None) -> float:
    """
    Get the per-unit production cost for an annual volume.

    Args:
        volume: Annual units
        override: Explicit per-unit cost; bypasses the table when not None

    Returns:
        Cost per unit

    Example:
        >>> resolve_unit_cost(22000)
        1.79
        >>> resolve_unit_cost(22000, override=1.25)
        1.25
    """
    if override is not None:
        return override

    for upper_bound, cost in COST_TIERS:
        if volume < upper_bound:
            return cost
    return TOP_TIER_COST
