"""Database migration utilities.

Handles schema evolution by applying idempotent migrations keyed by an integer
`schema_version` stored in the metadata table, then (re)applies the reference
data seed which only fills gaps.
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Optional

from itinerary_ace.models.constants import REFERENCE_CURRENCY

from . import schema as schema_def
from .schema import init_db
from .seed import seed_reference_data

CURRENT_SCHEMA_VERSION = 3
SCHEMA_VERSION_KEY = "schema_version"

logger = logging.getLogger("itinerary_ace.db.migrate")


def _get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        cur = conn.cursor()
        cur.execute("SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,))
        row = cur.fetchone()
        if row:
            return int(row[0])
    except sqlite3.OperationalError:
        # metadata table may not exist yet (first run before init_db)
        return None
    return None


def apply_migrations(db_path: Path) -> int:
    """Apply required migrations and return resulting schema version."""
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        version = _get_schema_version(conn) or 1
        if version < 2:
            _migrate_to_v2(conn)
            version = 2
        if version < 3:
            _migrate_to_v3(conn)
            version = 3
        _set_schema_version(conn, version)
        conn.commit()
    finally:
        conn.close()
    seed_reference_data(db_path)
    return version


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
        f"updated_at=({schema_def.BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )


def _column_names(cur: sqlite3.Cursor, table: str) -> set:
    cur.execute(f"PRAGMA table_info({table})")
    return {row[1] for row in cur.fetchall()}


def _migrate_to_v2(conn: sqlite3.Connection) -> None:
    """Upgrade schema to version 2.

    Version 1 stored custom currency codes without normalisation and
    provinces without a country. Normalise codes to upper case (dropping
    duplicates and malformed codes) and add the country column.
    """
    cur = conn.cursor()
    try:
        if "country" not in _column_names(cur, "provinces"):
            cur.execute("ALTER TABLE provinces ADD COLUMN country TEXT")
        cur.execute("SELECT code FROM custom_currencies")
        codes = [row[0] for row in cur.fetchall()]
        normalized = sorted(
            {c.strip().upper() for c in codes if c and len(c.strip()) == 3 and c.strip().isalpha()}
        )
        cur.execute("DELETE FROM custom_currencies")
        cur.executemany(
            "INSERT OR IGNORE INTO custom_currencies (code) VALUES (?)",
            [(c,) for c in normalized],
        )
        dropped = len(codes) - len(normalized)
        if dropped:
            logger.info("dropped %d malformed or duplicate custom currency codes", dropped)
        conn.commit()
    except Exception:
        conn.rollback()
        raise


def _migrate_to_v3(conn: sqlite3.Connection) -> None:
    """Upgrade schema to version 3.

    Countries became their own table. Province country names written before
    that are registered as countries priced in the reference currency.
    """
    cur = conn.cursor()
    try:
        cur.execute(
            "SELECT DISTINCT trim(country) FROM provinces "
            "WHERE country IS NOT NULL AND trim(country) != ''"
        )
        names = [row[0] for row in cur.fetchall()]
        cur.executemany(
            "INSERT OR IGNORE INTO countries (name, default_currency) VALUES (?, ?)",
            [(name, REFERENCE_CURRENCY) for name in names],
        )
        if names:
            logger.info("registered %d countries named by provinces", len(names))
        conn.commit()
    except Exception:
        conn.rollback()
        raise
