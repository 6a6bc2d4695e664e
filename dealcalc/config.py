"""Configuration management for the deal calculator."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from .models import RoyaltyBase, RoyaltyTier


def _default_royalty_tiers() -> List[Dict[str, object]]:
    return [
        {"name": "Originator", "rate": 0.15},
        {"name": "Co-inventor", "rate": 0.075},
        {"name": "Institution", "rate": 0.15},
        {"name": "Formulation Partner", "rate": 0.10},
        {"name": "Agent", "rate": 0.04},
    ]


@dataclass
class DealDefaults:
    """Starting values for a new deal."""
    royalty_tiers: List[Dict[str, object]] = field(default_factory=_default_royalty_tiers)
    overhead_rate: float = 0.0
    royalty_base: str = RoyaltyBase.ON_PRICE.value
    sla_share_percent: float = 0.5
    deal_currency: str = "EUR"


@dataclass
class FXSettings:
    """Exchange rate API settings."""
    api_url: str = "https://open.er-api.com/v6/latest/EUR"
    base_currency: str = "EUR"
    timeout_seconds: float = 10.0
    supported: List[str] = field(default_factory=lambda: ["EUR", "GBP", "USD"])


@dataclass
class StorageSettings:
    """Local JSON storage settings."""
    data_dir_env_var: str = "DEALCALC_DATA_DIR"
    data_dir: str = "data"
    deals_file: str = "deals.json"
    forecasts_file: str = "forecasts.json"

    @property
    def data_path(self) -> Path:
        override = os.environ.get(self.data_dir_env_var)
        path = Path(override or self.data_dir)
        if not path.is_absolute():
            path = Path(__file__).parent.parent / path
        return path

    @property
    def deals_path(self) -> Path:
        return self.data_path / self.deals_file

    @property
    def forecasts_path(self) -> Path:
        return self.data_path / self.forecasts_file


@dataclass
class Settings:
    """Application settings."""
    deal_defaults: DealDefaults = field(default_factory=DealDefaults)
    fx: FXSettings = field(default_factory=FXSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)

    def default_royalty_tiers(self) -> Tuple[RoyaltyTier, ...]:
        return tuple(
            RoyaltyTier(name=str(t["name"]), rate=float(t["rate"]))
            for t in self.deal_defaults.royalty_tiers
        )


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from YAML configuration file."""
    if config_path is None:
        config_path = Path(__file__).parent.parent / "config" / "settings.yaml"

    if not config_path.exists():
        return Settings()

    with config_path.open() as f:
        data = yaml.safe_load(f) or {}

    deal_data = data.get("deal_defaults", {})
    fx_data = data.get("fx", {})
    storage_data = data.get("storage", {})

    return Settings(
        deal_defaults=DealDefaults(**deal_data),
        fx=FXSettings(**fx_data),
        storage=StorageSettings(**storage_data),
    )


# Global settings instance
settings = load_settings()
