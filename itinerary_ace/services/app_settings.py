"""Runtime settings backed by the metadata table.

Typed accessors for values admins change without a restart. Reads are
resilient: a missing or invalid value falls back to the default.

Metadata keys:
  - exchange_markup_percentage: float >= 0
  - exchange_rate_provider_override: str in {static, external-http}
  - rates_last_fetched_at: ISO timestamp of the last provider refresh
"""

from __future__ import annotations
from datetime import datetime
import logging
from typing import Optional, Protocol

from itinerary_ace.core.config import ALLOWED_RATE_PROVIDERS

logger = logging.getLogger("itinerary_ace.app_settings")

MARKUP_KEY = "exchange_markup_percentage"
PROVIDER_OVERRIDE_KEY = "exchange_rate_provider_override"
RATES_FETCHED_AT_KEY = "rates_last_fetched_at"


class _MetadataStore(Protocol):
    def get_metadata(self, key: str) -> Optional[str]: ...

    def set_metadata(self, key: str, value: str) -> None: ...


# ------------- Markup ----------------------------


def get_markup_percentage(db: _MetadataStore) -> float:
    raw = db.get_metadata(MARKUP_KEY)
    if raw is None:
        return 0.0
    try:
        value = float(raw)
    except ValueError:
        logger.warning("ignoring invalid stored markup %r", raw)
        return 0.0
    return value if value >= 0 else 0.0


def set_markup_percentage(db: _MetadataStore, value: float) -> None:
    if value < 0:
        raise ValueError("markup percentage must be a non-negative number")
    db.set_metadata(MARKUP_KEY, repr(float(value)))


# ------------- Rate provider ---------------------


def get_effective_rate_provider(db: _MetadataStore, default: str) -> str:
    override = db.get_metadata(PROVIDER_OVERRIDE_KEY)
    if override and override in ALLOWED_RATE_PROVIDERS:
        return override
    return default


def set_rate_provider(db: _MetadataStore, provider: str) -> None:
    if provider not in ALLOWED_RATE_PROVIDERS:
        raise ValueError(f"Unsupported provider '{provider}'")
    db.set_metadata(PROVIDER_OVERRIDE_KEY, provider)


def get_rates_fetched_at(db: _MetadataStore) -> Optional[datetime]:
    raw = db.get_metadata(RATES_FETCHED_AT_KEY)
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        return None


def set_rates_fetched_at(db: _MetadataStore, when: datetime) -> None:
    db.set_metadata(RATES_FETCHED_AT_KEY, when.isoformat())
