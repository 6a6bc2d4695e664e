"""
Facade for deal analysis - ties deal records, currency conversion and the engine together.

Deal inputs are entered in the deal's own currency. The engine always works in
the base currency (EUR), so money inputs are converted on the way in, and
results are scaled into the comparison currency for display.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
import logging

import pandas as pd

from .config import settings
from .engine import DealComparison, compare_deal_modes
from .fx import FALLBACK_RATES, FXRates, convert_amount
from .models import (
    FORECAST_YEARS,
    DealMode,
    DealParameters,
    FiveYearResult,
    RoyaltyBase,
    RoyaltyTier,
    ServiceFee,
    ServiceFees,
)
from .territory import CountryForecast, forecast_sales_from_breakdown

logger = logging.getLogger(__name__)

DEAL_STATUSES = ("signed", "potential")

# Money columns of FiveYearResult.to_dataframe()
MONEY_COLUMNS = [
    "revenue",
    "cost_per_unit",
    "total_cost",
    "total_royalties",
    "overhead",
    "service_fee_income",
    "net_profit",
    "profit_per_unit",
    "partner_margin",
]


def _today() -> str:
    return datetime.now().date().isoformat()


@dataclass
class DealRecord:
    """A saved deal with its inputs in the deal currency."""

    # Identification
    id: str
    company_name: str
    status: str = "potential"  # "signed" or "potential"
    date_added: str = field(default_factory=_today)

    # Currencies
    deal_currency: str = "EUR"
    comparison_currency: str = "EUR"

    # Deal structure
    mode: str = DealMode.TRANSFER_PRICE.value
    transfer_price: float = 0.0
    royalty_base: str = RoyaltyBase.ON_PRICE.value
    partner_selling_price: Optional[float] = None
    sla_share_percent: float = 0.5
    overhead_rate: float = 0.0
    cost_override: Optional[float] = None

    # Forecast (ignored when a country breakdown is present)
    forecast_sales: List[float] = field(default_factory=lambda: [0.0] * FORECAST_YEARS)
    country_breakdown: List[CountryForecast] = field(default_factory=list)

    # Service fees: {"signing": {"amount": .., "year": ..}, ...}
    service_fees: Dict[str, Dict[str, float]] = field(default_factory=dict)

    # Royalty tiers; None means the configured defaults
    royalty_tiers: Optional[List[Dict[str, Any]]] = None

    def effective_forecast(self) -> Tuple[float, ...]:
        """Yearly units, from the country breakdown when one is present."""
        if self.country_breakdown:
            return forecast_sales_from_breakdown(self.country_breakdown)
        return tuple(self.forecast_sales)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "company_name": self.company_name,
            "status": self.status,
            "date_added": self.date_added,
            "deal_currency": self.deal_currency,
            "comparison_currency": self.comparison_currency,
            "mode": self.mode,
            "transfer_price": self.transfer_price,
            "royalty_base": self.royalty_base,
            "partner_selling_price": self.partner_selling_price,
            "sla_share_percent": self.sla_share_percent,
            "overhead_rate": self.overhead_rate,
            "cost_override": self.cost_override,
            "forecast_sales": list(self.forecast_sales),
            "country_breakdown": [c.to_dict() for c in self.country_breakdown],
            "service_fees": self.service_fees,
            "royalty_tiers": self.royalty_tiers,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DealRecord":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            company_name=data["company_name"],
            status=data.get("status", "potential"),
            date_added=data.get("date_added") or _today(),
            deal_currency=data.get("deal_currency", "EUR"),
            comparison_currency=data.get("comparison_currency", "EUR"),
            mode=data.get("mode", DealMode.TRANSFER_PRICE.value),
            transfer_price=data.get("transfer_price", 0.0),
            royalty_base=data.get("royalty_base", RoyaltyBase.ON_PRICE.value),
            partner_selling_price=data.get("partner_selling_price"),
            sla_share_percent=data.get("sla_share_percent", 0.5),
            overhead_rate=data.get("overhead_rate", 0.0),
            cost_override=data.get("cost_override"),
            forecast_sales=list(data.get("forecast_sales", [0.0] * FORECAST_YEARS)),
            country_breakdown=[
                CountryForecast.from_dict(c) for c in data.get("country_breakdown", [])
            ],
            service_fees=data.get("service_fees", {}),
            royalty_tiers=data.get("royalty_tiers"),
        )


@dataclass
class DealAnalysisResult:
    """Both modes' results for a deal, plus how to display them."""

    record: DealRecord
    parameters: DealParameters
    comparison: DealComparison
    display_currency: str
    display_factor: float  # base currency -> display currency
    analysis_timestamp: str

    @property
    def primary(self) -> FiveYearResult:
        return self.comparison.primary

    @property
    def alternate(self) -> FiveYearResult:
        return self.comparison.alternate

    def to_display(self, amount: Optional[float]) -> Optional[float]:
        if amount is None:
            return None
        return amount * self.display_factor

    def summary_frame(self) -> pd.DataFrame:
        """
        Yearly rows of both modes in the display currency.

        Returns:
            DataFrame indexed by (mode, year)
        """
        frames = []
        for result in (self.primary, self.alternate):
            df = result.to_dataframe()
            df[MONEY_COLUMNS] = df[MONEY_COLUMNS].astype(float) * self.display_factor
            df.insert(0, "mode", result.mode.label)
            frames.append(df.reset_index())
        return pd.concat(frames, ignore_index=True).set_index(["mode", "year"])


def royalty_tier_table(tiers: Optional[List[Dict[str, Any]]]) -> pd.DataFrame:
    """Editable table of a deal's royalty tiers, rates in percent."""
    if tiers is None:
        tiers = [{"name": t.name, "rate": t.rate} for t in settings.default_royalty_tiers()]
    return pd.DataFrame(
        [{"Holder": t["name"], "Rate (%)": float(t["rate"]) * 100} for t in tiers],
        columns=["Holder", "Rate (%)"],
    )


def royalty_tiers_from_table(table: pd.DataFrame) -> Optional[List[Dict[str, Any]]]:
    """
    Read royalty tiers back from an edited tier table.

    Rows without a holder name or rate are dropped; order is payment order.

    Returns:
        List of ``{"name", "rate"}`` dicts, or None when the table matches the
        configured defaults
    """
    tiers = []
    for row in table.itertuples(index=False):
        name, rate = row[0], row[1]
        if pd.isna(name) or pd.isna(rate) or not str(name).strip():
            continue
        tiers.append({"name": str(name).strip(), "rate": float(rate) / 100})

    defaults = [{"name": t.name, "rate": t.rate} for t in settings.default_royalty_tiers()]
    if len(tiers) == len(defaults) and all(
        t["name"] == d["name"] and abs(t["rate"] - d["rate"]) < 1e-12 for t, d in zip(tiers, defaults)
    ):
        return None
    return tiers


def _service_fees_from_record(
    fees: Dict[str, Dict[str, float]], to_base: float
) -> ServiceFees:
    defaults = ServiceFees()

    def build(key: str, default: ServiceFee) -> ServiceFee:
        raw = fees.get(key)
        if not raw:
            return default
        return ServiceFee(
            amount=float(raw.get("amount", 0.0)) * to_base,
            year=int(raw.get("year", default.year)),
        )

    return ServiceFees(
        signing=build("signing", defaults.signing),
        approval=build("approval", defaults.approval),
        launch=build("launch", defaults.launch),
    )


class DealAnalyzer:
    """Runs deal records through the engine."""

    def __init__(self, base_currency: Optional[str] = None):
        """
        Initialize the deal analyzer.

        Args:
            base_currency: Currency the engine computes in (defaults to settings)
        """
        self.base_currency = base_currency or settings.fx.base_currency

    def royalty_tiers_for(self, record: DealRecord) -> Tuple[RoyaltyTier, ...]:
        if record.royalty_tiers is None:
            return settings.default_royalty_tiers()
        return tuple(
            RoyaltyTier(name=str(t["name"]), rate=float(t["rate"])) for t in record.royalty_tiers
        )

    def build_parameters(self, record: DealRecord, rates: FXRates = FALLBACK_RATES) -> DealParameters:
        """
        Convert a deal record into base-currency engine parameters.

        Args:
            record: Deal record in its own currency
            rates: Exchange rates

        Returns:
            DealParameters
        """
        to_base = convert_amount(1.0, record.deal_currency, self.base_currency, rates)

        def money(value: Optional[float]) -> Optional[float]:
            return None if value is None else value * to_base

        return DealParameters(
            forecast_sales=record.effective_forecast(),
            royalty_tiers=self.royalty_tiers_for(record),
            mode=DealMode(record.mode),
            overhead_rate=record.overhead_rate,
            cost_override=money(record.cost_override),
            service_fees=_service_fees_from_record(record.service_fees, to_base),
            transfer_price_per_unit=record.transfer_price * to_base,
            royalty_base=RoyaltyBase(record.royalty_base),
            partner_selling_price=money(record.partner_selling_price),
            sla_share_percent=record.sla_share_percent,
        )

    def analyze(self, record: DealRecord, rates: FXRates = FALLBACK_RATES) -> DealAnalysisResult:
        """
        Perform complete deal analysis.

        Args:
            record: Deal record
            rates: Exchange rates used for input and display conversion

        Returns:
            DealAnalysisResult with both deal modes evaluated
        """
        params = self.build_parameters(record, rates)
        comparison = compare_deal_modes(params)

        logger.info(
            "Analyzed deal %s (%s): %s net profit %.2f %s, %s net profit %.2f %s",
            record.id,
            record.company_name,
            comparison.primary.mode.value,
            comparison.primary.total_net_profit,
            self.base_currency,
            comparison.alternate.mode.value,
            comparison.alternate.total_net_profit,
            self.base_currency,
        )

        return DealAnalysisResult(
            record=record,
            parameters=params,
            comparison=comparison,
            display_currency=record.comparison_currency,
            display_factor=convert_amount(1.0, self.base_currency, record.comparison_currency, rates),
            analysis_timestamp=datetime.now().isoformat(),
        )


# Global analyzer instance
_analyzer: Optional[DealAnalyzer] = None


def get_analyzer() -> DealAnalyzer:
    """Get or create the global deal analyzer instance."""
    global _analyzer
    if _analyzer is None:
        _analyzer = DealAnalyzer()
    return _analyzer
