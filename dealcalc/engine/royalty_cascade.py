"""
Royalty cascade for deal economics.

Royalty holders are paid in a fixed order. Each tier's rate is applied to what
is left of the per-unit base after every earlier tier has taken its cut, so
reordering the tiers changes every amount downstream:

    base 5.00, tiers 15% then 7.5%
    tier 1: 5.00 × 0.15  = 0.75     (4.25 left)
    tier 2: 4.25 × 0.075 = 0.31875  (3.93125 left)

Whatever remains after the last tier stays with the deal owner.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

from ..models import RoyaltyLine, RoyaltyTier


@dataclass(frozen=True)
class CascadeResult:
    """Result of running the cascade for one year."""

    breakdown: Tuple[RoyaltyLine, ...]
    total_royalties: float
    residual_per_unit: float

    @property
    def royalties_per_unit(self) -> float:
        return sum(line.per_unit for line in self.breakdown)


def apply_cascade(
    base_per_unit: float,
    tiers: Sequence[RoyaltyTier],
    volume: float,
) -> CascadeResult:
    """
    Apply the ordered royalty tiers to a per-unit base.

    The base is not clamped here; callers pass a non-negative base.

    Args:
        base_per_unit: Per-unit amount the first tier is applied to
        tiers: Royalty tiers in payment order
        volume: Units sold in the year

    Returns:
        CascadeResult with one line per tier, in tier order
    """
    remaining = base_per_unit
    lines = []

    for tier in tiers:
        per_unit = remaining * tier.rate
        lines.append(
            RoyaltyLine(
                name=tier.name,
                rate=tier.rate,
                per_unit=per_unit,
                amount=per_unit * volume,
            )
        )
        remaining -= per_unit

    return CascadeResult(
        breakdown=tuple(lines),
        total_royalties=sum(line.amount for line in lines),
        residual_per_unit=remaining,
    )
