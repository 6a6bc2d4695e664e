"""Exchange rates and currency conversion for deal inputs and display values.

All rates are quoted against the base currency (EUR = 1). The deal engine
always computes in the base currency; conversion happens before and after.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Dict, Optional

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import settings

logger = logging.getLogger(__name__)

# Retry decorator for transient failures
_retry_on_network_error = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((httpx.RequestError, httpx.TimeoutException)),
    reraise=True,
)


class FXRatesError(RuntimeError):
    """Raised when the exchange rate API returns an error response."""


@dataclass(frozen=True)
class FXRates:
    """Value of one base-currency unit in each supported currency."""
    EUR: float = 1.0
    GBP: float = 0.83
    USD: float = 1.08
    last_updated: str = "Fallback"

    def rate(self, currency: str) -> float:
        try:
            return float(getattr(self, currency.upper()))
        except AttributeError:
            raise ValueError(f"Unsupported currency: {currency}") from None

    def as_dict(self) -> Dict[str, float]:
        return {"EUR": self.EUR, "GBP": self.GBP, "USD": self.USD}


# Approximate rates used when the API is unavailable
FALLBACK_RATES = FXRates()


def _format_update_time(value: Optional[str]) -> str:
    if not value:
        return datetime.now().date().isoformat()
    try:
        return parsedate_to_datetime(value).date().isoformat()
    except (TypeError, ValueError):
        return value


def _parse_rates(payload: Dict) -> FXRates:
    rates = payload.get("rates") or {}
    return FXRates(
        EUR=1.0,
        GBP=float(rates.get("GBP") or FALLBACK_RATES.GBP),
        USD=float(rates.get("USD") or FALLBACK_RATES.USD),
        last_updated=_format_update_time(payload.get("time_last_update_utc")),
    )


@_retry_on_network_error
def fetch_fx_rates(client: Optional[httpx.Client] = None) -> FXRates:
    """
    Fetch current rates from the configured exchange rate API.

    Args:
        client: Optional httpx client (a short-lived one is created otherwise)

    Returns:
        FXRates relative to EUR

    Raises:
        FXRatesError: If the API responds with an error status
    """
    if client is None:
        with httpx.Client(timeout=settings.fx.timeout_seconds) as owned:
            response = owned.get(settings.fx.api_url)
    else:
        response = client.get(settings.fx.api_url)

    if response.status_code >= 400:
        raise FXRatesError(f"FX rate request failed ({response.status_code}): {response.text}")

    return _parse_rates(response.json())


def get_fx_rates(client: Optional[httpx.Client] = None) -> FXRates:
    """Fetch current rates, falling back to static rates on any failure."""
    try:
        rates = fetch_fx_rates(client)
        logger.info("Loaded FX rates (updated %s)", rates.last_updated)
        return rates
    except Exception as e:
        logger.error("Error fetching FX rates, using fallbacks: %s", e)
        return FALLBACK_RATES


def convert_amount(amount: float, from_currency: str, to_currency: str, rates: FXRates) -> float:
    """
    Convert an amount between currencies via the base currency.

    Example:
        >>> convert_amount(10, "GBP", "GBP", FALLBACK_RATES)
        10
        >>> round(convert_amount(1, "EUR", "USD", FALLBACK_RATES), 2)
        1.08
    """
    if from_currency == to_currency:
        return amount
    return amount / rates.rate(from_currency) * rates.rate(to_currency)


def format_rate_display(rates: FXRates) -> Dict[str, str]:
    """Human-readable rate strings for the UI."""
    return {
        "eur_to_gbp": f"1 EUR = {rates.GBP:.4f} GBP",
        "eur_to_usd": f"1 EUR = {rates.USD:.4f} USD",
        "gbp_to_usd": f"1 GBP = {rates.USD / rates.GBP:.4f} USD",
    }
