"""Data Access Layer utilities.

Responsibilities
----------------
- Provide CRUD helpers for countries, provinces, service prices, currencies,
  exchange rates, itineraries and documents.
- Keep nested price structures (vehicle options, hotel room types, packages)
  as JSON payloads while exposing the columns used for filtering.
- Offer the small reference-count queries the routers need to protect
  referential rules (currency, country or province still in use).
"""

from __future__ import annotations

from pathlib import Path
import sqlite3
from typing import Any, Dict, Iterable, List, Optional

from itinerary_ace.models.pricing import ServicePriceIn

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # ------------------------------------------------------------------
    # Metadata
    def get_metadata(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT value FROM metadata WHERE key = ?", (key,))
            row = cur.fetchone()
            return row[0] if row else None

    def set_metadata(self, key: str, value: str) -> None:
        with self._connect() as conn:
            conn.execute(
                f"""
                INSERT INTO metadata (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = ({UTC_NOW_SQL})
                """,
                (key, value),
            )
            conn.commit()

    # ------------------------------------------------------------------
    # Custom currencies
    def list_custom_currencies(self) -> List[str]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT code FROM custom_currencies ORDER BY code ASC")
            return [r["code"] for r in cur.fetchall()]

    def add_custom_currency(self, code: str) -> bool:
        """Insert a custom code; returns False when it already exists."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT OR IGNORE INTO custom_currencies (code) VALUES (?)", (code,)
            )
            conn.commit()
            return cur.rowcount > 0

    def delete_custom_currency(self, code: str) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM custom_currencies WHERE code = ?", (code,))
            conn.commit()
            return cur.rowcount > 0

    def count_service_prices_using_currency(self, code: str) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT COUNT(*) FROM service_prices WHERE currency = ?", (code,)
            )
            return int(cur.fetchone()[0])

    # ------------------------------------------------------------------
    # Exchange rates
    def list_exchange_rates(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM exchange_rates ORDER BY from_currency ASC, to_currency ASC"
            )
            return [dict(r) for r in cur.fetchall()]

    def get_exchange_rate(self, rate_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM exchange_rates WHERE id = ?", (rate_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def find_exchange_rate(
        self, from_currency: str, to_currency: str
    ) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM exchange_rates WHERE from_currency = ? AND to_currency = ?",
                (from_currency, to_currency),
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def insert_exchange_rate(
        self, from_currency: str, to_currency: str, rate: float
    ) -> int:
        """Insert a new pair; raises sqlite3.IntegrityError when the pair exists."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO exchange_rates (from_currency, to_currency, rate)
                VALUES (?, ?, ?)
                """,
                (from_currency, to_currency, float(rate)),
            )
            conn.commit()
            return int(cur.lastrowid)

    def upsert_exchange_rates(self, rows: Iterable[tuple]) -> int:
        """Insert or update ``(from, to, rate)`` tuples in one transaction."""
        count = 0
        with self._connect() as conn:
            cur = conn.cursor()
            for from_currency, to_currency, rate in rows:
                cur.execute(
                    f"""
                    INSERT INTO exchange_rates (from_currency, to_currency, rate)
                    VALUES (?, ?, ?)
                    ON CONFLICT(from_currency, to_currency) DO UPDATE SET
                        rate = excluded.rate,
                        updated_at = ({UTC_NOW_SQL})
                    """,
                    (from_currency, to_currency, float(rate)),
                )
                count += 1
            conn.commit()
        return count

    def update_exchange_rate(self, rate_id: int, rate: float) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE exchange_rates SET rate = ?, updated_at = ({UTC_NOW_SQL}) WHERE id = ?",
                (float(rate), rate_id),
            )
            conn.commit()
            return cur.rowcount > 0

    def delete_exchange_rate(self, rate_id: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM exchange_rates WHERE id = ?", (rate_id,))
            conn.commit()
            return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Countries
    def list_countries(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM countries ORDER BY name COLLATE NOCASE ASC")
            return [dict(r) for r in cur.fetchall()]

    def get_country(self, country_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM countries WHERE id = ?", (country_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def get_country_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM countries WHERE name = ?", (name,))
            row = cur.fetchone()
            return dict(row) if row else None

    def create_country(self, name: str, default_currency: str) -> int:
        """Insert a country; raises sqlite3.IntegrityError on duplicate name."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO countries (name, default_currency) VALUES (?, ?)",
                (name, default_currency),
            )
            conn.commit()
            return int(cur.lastrowid)

    def update_country(self, country_id: int, name: str, default_currency: str) -> bool:
        """Update a country and carry a new name into its provinces."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT name FROM countries WHERE id = ?", (country_id,))
            row = cur.fetchone()
            if not row:
                return False
            old_name = row["name"]
            cur.execute(
                f"""
                UPDATE countries
                SET name = ?, default_currency = ?, updated_at = ({UTC_NOW_SQL})
                WHERE id = ?
                """,
                (name, default_currency, country_id),
            )
            if old_name != name:
                cur.execute(
                    f"""
                    UPDATE provinces SET country = ?, updated_at = ({UTC_NOW_SQL})
                    WHERE country = ? COLLATE NOCASE
                    """,
                    (name, old_name),
                )
            conn.commit()
            return True

    def delete_country(self, country_id: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM countries WHERE id = ?", (country_id,))
            conn.commit()
            return cur.rowcount > 0

    def count_provinces_in_country(self, name: str) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT COUNT(*) FROM provinces WHERE country = ? COLLATE NOCASE", (name,)
            )
            return int(cur.fetchone()[0])

    def count_countries_using_currency(self, code: str) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT COUNT(*) FROM countries WHERE default_currency = ?", (code,)
            )
            return int(cur.fetchone()[0])

    # ------------------------------------------------------------------
    # Provinces
    def list_provinces(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM provinces ORDER BY name COLLATE NOCASE ASC")
            return [dict(r) for r in cur.fetchall()]

    def get_province(self, province_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM provinces WHERE id = ?", (province_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def get_province_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM provinces WHERE name = ?", (name,))
            row = cur.fetchone()
            return dict(row) if row else None

    def create_province(self, name: str, country: Optional[str] = None) -> int:
        """Insert a province; raises sqlite3.IntegrityError on duplicate name."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO provinces (name, country) VALUES (?, ?)", (name, country)
            )
            conn.commit()
            return int(cur.lastrowid)

    def update_province(
        self, province_id: int, name: str, country: Optional[str] = None
    ) -> bool:
        """Rename/update a province and carry the new name into price records."""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT name FROM provinces WHERE id = ?", (province_id,))
            row = cur.fetchone()
            if not row:
                return False
            old_name = row["name"]
            cur.execute(
                f"""
                UPDATE provinces
                SET name = ?, country = ?, updated_at = ({UTC_NOW_SQL})
                WHERE id = ?
                """,
                (name, country, province_id),
            )
            if old_name != name:
                cur.execute(
                    f"""
                    UPDATE service_prices
                    SET province = ?,
                        payload = json_set(payload, '$.province', ?),
                        updated_at = ({UTC_NOW_SQL})
                    WHERE province = ? COLLATE NOCASE
                    """,
                    (name, name, old_name),
                )
            conn.commit()
            return True

    def delete_province(self, province_id: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM provinces WHERE id = ?", (province_id,))
            conn.commit()
            return cur.rowcount > 0

    def count_service_prices_in_province(self, name: str) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT COUNT(*) FROM service_prices WHERE province = ? COLLATE NOCASE",
                (name,),
            )
            return int(cur.fetchone()[0])

    # ------------------------------------------------------------------
    # Service prices
    def list_service_prices(
        self,
        category: Optional[str] = None,
        sub_category: Optional[str] = None,
        province: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        clauses: List[str] = []
        params: List[Any] = []
        if category:
            clauses.append("category = ?")
            params.append(category)
        if sub_category:
            if category == "transfer" and sub_category == "ticket":
                clauses.append("json_extract(payload, '$.transfer_mode') = 'ticket'")
            elif category == "transfer" and sub_category == "vehicle":
                # anything that is not sold per ticket
                clauses.append("IFNULL(json_extract(payload, '$.transfer_mode'), '') != 'ticket'")
            else:
                clauses.append("sub_category = ?")
                params.append(sub_category)
        if province:
            clauses.append("province = ? COLLATE NOCASE")
            params.append(province)
        where = (" WHERE " + " AND ".join(clauses)) if clauses else ""
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"SELECT * FROM service_prices{where} ORDER BY category ASC, name ASC, id ASC",
                params,
            )
            return [dict(r) for r in cur.fetchall()]

    def get_service_price(self, price_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM service_prices WHERE id = ?", (price_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def get_service_prices_by_ids(self, ids: Iterable[int]) -> List[Dict[str, Any]]:
        id_list = sorted(set(ids))
        if not id_list:
            return []
        placeholders = ",".join("?" for _ in id_list)
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"SELECT * FROM service_prices WHERE id IN ({placeholders})", id_list
            )
            return [dict(r) for r in cur.fetchall()]

    def create_service_price(self, price: ServicePriceIn) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO service_prices
                    (name, category, sub_category, province, currency, payload)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    price.name,
                    price.category,
                    price.sub_category,
                    price.province,
                    price.currency,
                    price.model_dump_json(),
                ),
            )
            conn.commit()
            return int(cur.lastrowid)

    def update_service_price(self, price_id: int, price: ServicePriceIn) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                UPDATE service_prices
                SET name = ?, category = ?, sub_category = ?, province = ?,
                    currency = ?, payload = ?, updated_at = ({UTC_NOW_SQL})
                WHERE id = ?
                """,
                (
                    price.name,
                    price.category,
                    price.sub_category,
                    price.province,
                    price.currency,
                    price.model_dump_json(),
                    price_id,
                ),
            )
            conn.commit()
            return cur.rowcount > 0

    def delete_service_price(self, price_id: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM service_prices WHERE id = ?", (price_id,))
            conn.commit()
            return cur.rowcount > 0

    def count_service_prices(self) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM service_prices")
            return int(cur.fetchone()[0])

    # ------------------------------------------------------------------
    # Itineraries
    def list_itineraries(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM itineraries ORDER BY updated_at DESC, id DESC")
            return [dict(r) for r in cur.fetchall()]

    def get_itinerary(self, itinerary_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM itineraries WHERE id = ?", (itinerary_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def create_itinerary(self, name: str, trip_json: str) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO itineraries (name, trip) VALUES (?, ?)", (name, trip_json)
            )
            conn.commit()
            return int(cur.lastrowid)

    def update_itinerary(self, itinerary_id: int, name: str, trip_json: str) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                UPDATE itineraries
                SET name = ?, trip = ?, updated_at = ({UTC_NOW_SQL})
                WHERE id = ?
                """,
                (name, trip_json, itinerary_id),
            )
            conn.commit()
            return cur.rowcount > 0

    def delete_itinerary(self, itinerary_id: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM itineraries WHERE id = ?", (itinerary_id,))
            conn.commit()
            return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Documents
    def list_documents(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM documents ORDER BY title COLLATE NOCASE ASC, id ASC")
            return [dict(r) for r in cur.fetchall()]

    def get_document(self, document_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM documents WHERE id = ?", (document_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def create_document(self, title: str, body: str) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO documents (title, body) VALUES (?, ?)", (title, body)
            )
            conn.commit()
            return int(cur.lastrowid)

    def update_document(
        self,
        document_id: int,
        title: Optional[str] = None,
        body: Optional[str] = None,
    ) -> bool:
        sets: List[str] = []
        params: List[Any] = []
        if title is not None:
            sets.append("title = ?")
            params.append(title)
        if body is not None:
            sets.append("body = ?")
            params.append(body)
        if not sets:
            return self.get_document(document_id) is not None
        sets.append(f"updated_at = ({UTC_NOW_SQL})")
        params.append(document_id)
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE documents SET {', '.join(sets)} WHERE id = ?", params
            )
            conn.commit()
            return cur.rowcount > 0

    def delete_document(self, document_id: int) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("DELETE FROM documents WHERE id = ?", (document_id,))
            conn.commit()
            return cur.rowcount > 0
