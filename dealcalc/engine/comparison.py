"""Side-by-side evaluation of both deal modes on the same inputs."""

from dataclasses import dataclass, replace

from ..models import DealMode, DealParameters, FiveYearResult
from .aggregator import evaluate_five_years


@dataclass(frozen=True)
class DealComparison:
    """Primary and alternate mode results for one set of deal inputs."""

    primary: FiveYearResult
    alternate: FiveYearResult

    @property
    def net_profit_delta(self) -> float:
        """Alternate minus primary five-year net profit."""
        return self.alternate.total_net_profit - self.primary.total_net_profit

    @property
    def preferred_mode(self) -> DealMode:
        """Mode with the higher five-year net profit (primary on a tie)."""
        if self.alternate.total_net_profit > self.primary.total_net_profit:
            return self.alternate.mode
        return self.primary.mode


def alternate_parameters(params: DealParameters) -> DealParameters:
    """Same deal inputs with the other deal mode selected."""
    return replace(params, mode=params.mode.alternate)


def evaluate_alternate_mode(params: DealParameters, **collaborators) -> FiveYearResult:
    """
    Evaluate the deal under the mode it is not configured for.

    Volumes, royalty tiers, overhead, cost basis and fees are unchanged.
    """
    return evaluate_five_years(alternate_parameters(params), **collaborators)


def compare_deal_modes(params: DealParameters, **collaborators) -> DealComparison:
    """
    Evaluate the deal under both modes.

    Args:
        params: Deal parameters; ``params.mode`` is the primary mode

    Returns:
        DealComparison
    """
    return DealComparison(
        primary=evaluate_five_years(params, **collaborators),
        alternate=evaluate_alternate_mode(params, **collaborators),
    )
