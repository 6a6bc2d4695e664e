"""
Storage for deal records and territory forecasts - persists whole collections to JSON.

Saving replaces the stored collection with the one given; there are no
per-record updates.
"""

import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import settings
from .deal_analysis import DealRecord

logger = logging.getLogger(__name__)


def new_deal_id() -> str:
    """Generate a short unique deal ID."""
    return str(uuid.uuid4())[:8]


def _load_list(path: Path) -> List[Dict[str, Any]]:
    """Load a JSON list from disk."""
    if not path.exists():
        return []
    try:
        with path.open("r") as f:
            data = json.load(f)
    except Exception as e:
        logger.error("Failed to load %s: %s", path.name, e)
        return []
    if not isinstance(data, list):
        logger.error("Unexpected content in %s, expected a list", path.name)
        return []
    return data


def _save_list(path: Path, items: List[Dict[str, Any]]) -> None:
    """Replace the JSON list on disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        json.dump(items, f, indent=2, default=str)


def load_deals(path: Optional[Path] = None) -> List[DealRecord]:
    """
    Load all saved deals.

    Args:
        path: Storage file (defaults to the configured deals file)

    Returns:
        List of deal records, most recently added first
    """
    path = path or settings.storage.deals_path
    deals = []
    for item in _load_list(path):
        if not isinstance(item, dict):
            logger.error("Skipping unreadable deal entry: %r", item)
            continue
        try:
            deals.append(DealRecord.from_dict(item))
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Skipping unreadable deal %s: %s", item.get("id"), e)

    deals.sort(key=lambda d: d.date_added, reverse=True)
    return deals


def save_deals(deals: List[DealRecord], path: Optional[Path] = None) -> int:
    """
    Replace the stored deals with ``deals``.

    Args:
        deals: Complete collection of deals to keep
        path: Storage file (defaults to the configured deals file)

    Returns:
        Number of deals saved
    """
    path = path or settings.storage.deals_path
    _save_list(path, [d.to_dict() for d in deals])
    logger.info("Saved %d deals", len(deals))
    return len(deals)


def load_forecasts(path: Optional[Path] = None) -> List[Dict[str, Any]]:
    """Load all saved territory forecasts."""
    return _load_list(path or settings.storage.forecasts_path)


def save_forecasts(forecasts: List[Dict[str, Any]], path: Optional[Path] = None) -> int:
    """Replace the stored territory forecasts with ``forecasts``."""
    path = path or settings.storage.forecasts_path
    _save_list(path, forecasts)
    logger.info("Saved %d forecasts", len(forecasts))
    return len(forecasts)
