"""Database schema DDL definitions and initialization utilities.

Tables:
  - metadata: key/value store (schema version, markup, rate provider override)
  - custom_currencies: admin-added currency codes (system codes live in code)
  - exchange_rates: directed currency pair rates
  - countries: destination countries with their default currency
  - provinces: locations service prices are scoped to
  - service_prices: price records; nested structures kept as a JSON payload
  - itineraries: saved trip plans (JSON), costs derived on read
  - documents: admin reference documentation
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

CUSTOM_CURRENCIES_DDL = f"""
CREATE TABLE IF NOT EXISTS custom_currencies (
    code TEXT PRIMARY KEY CHECK (length(code) = 3 AND code = upper(code)),
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

EXCHANGE_RATES_DDL = f"""
CREATE TABLE IF NOT EXISTS exchange_rates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    from_currency TEXT NOT NULL,
    to_currency TEXT NOT NULL,
    rate REAL NOT NULL CHECK (rate > 0),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    UNIQUE(from_currency, to_currency),
    CHECK (from_currency != to_currency)
);
"""

COUNTRIES_DDL = f"""
CREATE TABLE IF NOT EXISTS countries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE COLLATE NOCASE,
    default_currency TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

PROVINCES_DDL = f"""
CREATE TABLE IF NOT EXISTS provinces (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE COLLATE NOCASE,
    country TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

SERVICE_PRICES_DDL = f"""
CREATE TABLE IF NOT EXISTS service_prices (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    category TEXT NOT NULL CHECK (category IN ('transfer','activity','hotel','meal','misc')),
    sub_category TEXT,
    province TEXT,
    currency TEXT NOT NULL,
    payload TEXT NOT NULL, -- full ServicePriceIn JSON
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

ITINERARIES_DDL = f"""
CREATE TABLE IF NOT EXISTS itineraries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    trip TEXT NOT NULL, -- TripData JSON
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

DOCUMENTS_DDL = f"""
CREATE TABLE IF NOT EXISTS documents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    body TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

SERVICE_PRICES_LOOKUP_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_service_prices_lookup "
    "ON service_prices(category, province);"
)
SERVICE_PRICES_CURRENCY_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_service_prices_currency ON service_prices(currency);"
)

DDL_ORDER: Sequence[str] = (
    METADATA_DDL,
    CUSTOM_CURRENCIES_DDL,
    EXCHANGE_RATES_DDL,
    COUNTRIES_DDL,
    PROVINCES_DDL,
    SERVICE_PRICES_DDL,
    ITINERARIES_DDL,
    DOCUMENTS_DDL,
)

INDEX_DDL: Sequence[str] = (
    SERVICE_PRICES_LOOKUP_INDEX_DDL,
    SERVICE_PRICES_CURRENCY_INDEX_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        for ddl in INDEX_DDL:
            cur.execute(ddl)
        conn.commit()
    finally:
        conn.close()
