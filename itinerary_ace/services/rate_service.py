"""Exchange rate service glue.

Builds the in-memory ``RateTable`` from stored pairs, the markup setting and
the currency registry, and refreshes USD based pairs from the configured
provider.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from itinerary_ace.core.config import Settings
from itinerary_ace.db.dal import Database
from itinerary_ace.models.constants import REFERENCE_CURRENCY
from itinerary_ace.services import app_settings
from itinerary_ace.services.currency_registry import CurrencyRegistry
from itinerary_ace.services.rates.conversion import RateTable
from itinerary_ace.services.rates.providers import make_rate_provider

logger = logging.getLogger("itinerary_ace.rates")


@dataclass(frozen=True)
class RefreshResult:
    provider: str
    updated_pairs: int
    fetched_at: Optional[datetime]


def build_rate_table(db: Database) -> RateTable:
    registry = CurrencyRegistry(db)
    return RateTable.from_rows(
        db.list_exchange_rates(),
        markup_percentage=app_settings.get_markup_percentage(db),
        known_currencies=registry.all_codes(),
    )


def refresh_rates(db: Database, settings: Settings) -> RefreshResult:
    """Pull USD based rates and upsert them for every known currency quoted."""
    provider_name = app_settings.get_effective_rate_provider(
        db, settings.exchange_rate_provider
    )
    provider = make_rate_provider(
        provider_name,
        api_key=settings.exchangerate_api_key,
        base_url=str(settings.exchangerate_api_base_url),
        timeout=settings.http_timeout_seconds,
    )
    quoted = provider.fetch_rates()
    known = CurrencyRegistry(db).all_codes()
    rows = [
        (REFERENCE_CURRENCY, code, rate)
        for code, rate in sorted(quoted.items())
        if code in known and code != REFERENCE_CURRENCY
    ]
    updated = db.upsert_exchange_rates(rows)
    fetched_at = provider.last_updated or datetime.now(timezone.utc)
    app_settings.set_rates_fetched_at(db, fetched_at)
    logger.info("refreshed %d rates from provider %s", updated, provider_name)
    return RefreshResult(provider=provider_name, updated_pairs=updated, fetched_at=fetched_at)
