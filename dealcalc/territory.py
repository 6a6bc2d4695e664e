"""
Territory market sizing and per-country volume forecasts.

Two ways of arriving at a deal's yearly unit forecast:
1. Peak sizing for one country: population × prevalence × addressable share
   × market share, times price for peak revenue. Linear, no cascading.
2. A country breakdown: units per country per year, summed per year into the
   five-year ``forecast_sales`` the deal engine takes.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .models import FORECAST_YEARS


@dataclass(frozen=True)
class Country:
    """A market the product can be sold into."""

    name: str
    code: str
    population_millions: float
    region: str


COUNTRIES: List[Country] = [
    # Europe
    Country("Austria", "AT", 9.0, "Europe"),
    Country("Belgium", "BE", 11.6, "Europe"),
    Country("Bulgaria", "BG", 6.9, "Europe"),
    Country("Croatia", "HR", 4.1, "Europe"),
    Country("Cyprus", "CY", 1.2, "Europe"),
    Country("Czech Republic", "CZ", 10.7, "Europe"),
    Country("Denmark", "DK", 5.8, "Europe"),
    Country("Estonia", "EE", 1.3, "Europe"),
    Country("Finland", "FI", 5.5, "Europe"),
    Country("France", "FR", 67.4, "Europe"),
    Country("Germany", "DE", 83.2, "Europe"),
    Country("Greece", "GR", 10.7, "Europe"),
    Country("Hungary", "HU", 9.7, "Europe"),
    Country("Iceland", "IS", 0.4, "Europe"),
    Country("Ireland", "IE", 5.0, "Europe"),
    Country("Italy", "IT", 59.3, "Europe"),
    Country("Latvia", "LV", 1.9, "Europe"),
    Country("Lithuania", "LT", 2.8, "Europe"),
    Country("Luxembourg", "LU", 0.6, "Europe"),
    Country("Malta", "MT", 0.5, "Europe"),
    Country("Netherlands", "NL", 17.4, "Europe"),
    Country("Norway", "NO", 5.4, "Europe"),
    Country("Poland", "PL", 38.0, "Europe"),
    Country("Portugal", "PT", 10.3, "Europe"),
    Country("Romania", "RO", 19.3, "Europe"),
    Country("Slovakia", "SK", 5.5, "Europe"),
    Country("Slovenia", "SI", 2.1, "Europe"),
    Country("Spain", "ES", 47.4, "Europe"),
    Country("Sweden", "SE", 10.4, "Europe"),
    Country("Switzerland", "CH", 8.6, "Europe"),
    Country("United Kingdom", "GB", 67.2, "Europe"),
    # North America
    Country("Canada", "CA", 38.0, "North America"),
    Country("Mexico", "MX", 128.9, "North America"),
    Country("United States", "US", 331.0, "North America"),
    # GCC & MENA
    Country("United Arab Emirates", "AE", 9.9, "GCC"),
    Country("Saudi Arabia", "SA", 34.8, "GCC"),
    Country("Qatar", "QA", 2.9, "GCC"),
    Country("Kuwait", "KW", 4.3, "GCC"),
    Country("Oman", "OM", 5.1, "GCC"),
    Country("Bahrain", "BH", 1.7, "GCC"),
    Country("Egypt", "EG", 102.3, "MENA"),
    Country("Jordan", "JO", 10.2, "MENA"),
    Country("Lebanon", "LB", 6.8, "MENA"),
    Country("Morocco", "MA", 36.9, "MENA"),
    Country("Tunisia", "TN", 11.8, "MENA"),
    Country("Algeria", "DZ", 43.8, "MENA"),
    Country("Iraq", "IQ", 40.2, "MENA"),
    Country("Israel", "IL", 9.2, "MENA"),
    Country("Iran", "IR", 84.0, "MENA"),
    # Asia Pacific
    Country("Australia", "AU", 25.7, "Asia Pacific"),
    Country("China", "CN", 1411.0, "Asia Pacific"),
    Country("Hong Kong", "HK", 7.5, "Asia Pacific"),
    Country("India", "IN", 1380.0, "Asia Pacific"),
    Country("Indonesia", "ID", 273.5, "Asia Pacific"),
    Country("Japan", "JP", 125.8, "Asia Pacific"),
    Country("Malaysia", "MY", 32.4, "Asia Pacific"),
    Country("New Zealand", "NZ", 5.1, "Asia Pacific"),
    Country("Philippines", "PH", 109.6, "Asia Pacific"),
    Country("Singapore", "SG", 5.7, "Asia Pacific"),
    Country("South Korea", "KR", 51.8, "Asia Pacific"),
    Country("Taiwan", "TW", 23.6, "Asia Pacific"),
    Country("Thailand", "TH", 69.8, "Asia Pacific"),
    Country("Vietnam", "VN", 97.3, "Asia Pacific"),
    Country("Pakistan", "PK", 220.9, "Asia Pacific"),
    Country("Bangladesh", "BD", 164.7, "Asia Pacific"),
    # Africa
    Country("South Africa", "ZA", 59.3, "Africa"),
    Country("Nigeria", "NG", 206.1, "Africa"),
    Country("Kenya", "KE", 53.8, "Africa"),
    Country("Ethiopia", "ET", 115.0, "Africa"),
    Country("Ghana", "GH", 31.1, "Africa"),
    Country("Tanzania", "TZ", 59.7, "Africa"),
    Country("Uganda", "UG", 45.7, "Africa"),
    Country("Ivory Coast", "CI", 26.4, "Africa"),
    Country("Senegal", "SN", 16.7, "Africa"),
    # Latin America
    Country("Argentina", "AR", 45.4, "Latin America"),
    Country("Brazil", "BR", 212.6, "Latin America"),
    Country("Chile", "CL", 19.1, "Latin America"),
    Country("Colombia", "CO", 50.9, "Latin America"),
    Country("Peru", "PE", 33.0, "Latin America"),
    Country("Venezuela", "VE", 28.4, "Latin America"),
]

_COUNTRIES_BY_CODE: Dict[str, Country] = {c.code: c for c in COUNTRIES}


def get_country(code: str) -> Optional[Country]:
    """Look up a country by ISO code (case-insensitive)."""
    return _COUNTRIES_BY_CODE.get(code.upper())


@dataclass(frozen=True)
class TerritoryForecast:
    """Peak-year sizing for a single country."""

    country: Country
    market_size: float  # units
    addressable: float  # units
    share_units: float  # units captured
    peak_revenue: float


def calculate_territory_forecast(
    country: Country,
    prevalence_pct: float,
    addressable_pct: float,
    market_share_pct: float,
    price: float,
) -> TerritoryForecast:
    """
    Size the peak-year market for a country.

    Percentages are given as percent values (0.35 means 0.35%, 40 means 40%).

    Args:
        country: Country to size
        prevalence_pct: Share of the population with the condition
        addressable_pct: Share of that market that can be addressed
        market_share_pct: Share of the addressable market captured
        price: Price per unit

    Returns:
        TerritoryForecast
    """
    population = country.population_millions * 1_000_000
    market_size = population * (prevalence_pct / 100)
    addressable = market_size * (addressable_pct / 100)
    share_units = addressable * (market_share_pct / 100)

    return TerritoryForecast(
        country=country,
        market_size=market_size,
        addressable=addressable,
        share_units=share_units,
        peak_revenue=share_units * price,
    )


@dataclass(frozen=True)
class CountryForecast:
    """Units forecast for one country over the five deal years."""

    country_code: str
    years: Tuple[float, ...]

    def __post_init__(self) -> None:
        years = tuple(self.years)
        if len(years) != FORECAST_YEARS:
            raise ValueError(
                f"{self.country_code}: expected {FORECAST_YEARS} yearly values, got {len(years)}"
            )
        object.__setattr__(self, "years", years)

    @property
    def country(self) -> Optional[Country]:
        return get_country(self.country_code)

    def to_dict(self) -> Dict[str, object]:
        return {"country_code": self.country_code, "years": list(self.years)}

    @classmethod
    def from_dict(cls, data: Dict[str, object]) -> "CountryForecast":
        return cls(country_code=str(data["country_code"]), years=tuple(data["years"]))


def forecast_sales_from_breakdown(entries: Sequence[CountryForecast]) -> Tuple[float, ...]:
    """
    Sum a country breakdown into yearly units.

    Args:
        entries: Per-country forecasts

    Returns:
        Five yearly unit totals (all zero for an empty breakdown)
    """
    if not entries:
        return (0.0,) * FORECAST_YEARS

    matrix = np.array([entry.years for entry in entries], dtype=float)
    return tuple(float(v) for v in matrix.sum(axis=0))
