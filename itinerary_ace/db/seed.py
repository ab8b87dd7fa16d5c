"""Seeding helpers for reference data.

``seed_reference_data`` ensures the default countries, provinces and the USD
based exchange rates exist. Default countries go into an empty countries
table only, skipping those whose currency is not registered.
``seed_demo_service_prices`` loads a small demo price list into an empty
pricing table. Existing rows are left untouched so both can be safely re-run.
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Any, Dict, List

from itinerary_ace.models.constants import (
    CURRENCIES,
    DEFAULT_COUNTRIES,
    DEFAULT_PROVINCE_COUNTRY,
    DEFAULT_PROVINCES,
    REFERENCE_CURRENCY,
)
from itinerary_ace.models.pricing import ServicePriceIn
from itinerary_ace.services.rates.providers import STATIC_USD_RATES

from .dal import Database

logger = logging.getLogger("itinerary_ace.db.seed")

DEMO_SERVICE_PRICES: List[Dict[str, Any]] = [
    {
        "name": "Suvarnabhumi Airport (BKK) to Bangkok City Hotel",
        "province": "Bangkok",
        "category": "transfer",
        "transfer_mode": "vehicle",
        "currency": "THB",
        "unit_description": "per vehicle",
        "vehicle_options": [
            {"vehicle_type": "Sedan", "price": 1000, "max_passengers": 3},
            {"vehicle_type": "Van", "price": 1500, "max_passengers": 8},
        ],
        "surcharge_periods": [
            {
                "name": "Songkran",
                "start_date": "2025-04-12",
                "end_date": "2025-04-16",
                "surcharge_amount": 300,
            }
        ],
    },
    {
        "name": "BTS Skytrain Day Pass",
        "province": "Bangkok",
        "category": "transfer",
        "sub_category": "ticket",
        "transfer_mode": "ticket",
        "price1": 150,
        "currency": "THB",
        "unit_description": "per person",
        "notes": "Unlimited rides for 1 day",
    },
    {
        "name": "Grand Palace & Wat Phra Kaew Entrance",
        "province": "Bangkok",
        "category": "activity",
        "sub_category": "Entrance Fee",
        "price1": 500,
        "price2": 250,
        "currency": "THB",
        "unit_description": "per person",
        "notes": "Child price for under 120cm",
    },
    {
        "name": "Floating Markets Tour",
        "province": "Bangkok",
        "category": "activity",
        "sub_category": "Guided Tour",
        "price1": 1500,
        "price2": 1000,
        "currency": "THB",
        "unit_description": "per person (Half Day)",
        "activity_packages": [
            {
                "name": "Morning Departure",
                "price1": 1500,
                "price2": 1000,
                "closed_weekdays": [0],
            }
        ],
    },
    {
        "name": "Riverside Luxury Hotel",
        "province": "Bangkok",
        "category": "hotel",
        "currency": "THB",
        "unit_description": "per night",
        "notes": "5-star, riverside location",
        "hotel_details": {
            "name": "Riverside Luxury Hotel",
            "province": "Bangkok",
            "room_types": [
                {
                    "name": "Deluxe River View",
                    "extra_bed_allowed": True,
                    "seasonal_prices": [
                        {
                            "season_name": "High",
                            "start_date": "2024-11-01",
                            "end_date": "2025-02-28",
                            "rate": 6500,
                            "extra_bed_rate": 1200,
                        },
                        {
                            "season_name": "Low",
                            "start_date": "2025-03-01",
                            "end_date": "2025-10-31",
                            "rate": 4000,
                            "extra_bed_rate": 800,
                        },
                    ],
                }
            ],
        },
    },
    {
        "name": "Hotel Buffet Lunch (International)",
        "province": "Bangkok",
        "category": "meal",
        "sub_category": "Buffet",
        "price1": 900,
        "price2": 450,
        "currency": "THB",
        "unit_description": "per person",
    },
    {
        "name": "Thai Massage (Traditional, 1 hour)",
        "province": "Bangkok",
        "category": "misc",
        "sub_category": "Wellness",
        "price1": 300,
        "currency": "THB",
        "unit_description": "per person",
    },
    {
        "name": "Ferry to Koh Larn (Round Trip)",
        "province": "Pattaya (Chonburi)",
        "category": "transfer",
        "sub_category": "ticket",
        "transfer_mode": "ticket",
        "price1": 60,
        "currency": "THB",
        "unit_description": "per person",
    },
    {
        "name": "Elephant Sanctuary Visit",
        "province": "Chiang Mai",
        "category": "activity",
        "sub_category": "Ethical Tourism",
        "price1": 2500,
        "price2": 1800,
        "currency": "THB",
        "unit_description": "per person (Full Day)",
        "notes": "Incl. lunch, feeding, bathing",
    },
]


def seed_reference_data(db_path: Path) -> None:
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        cur.execute("SELECT code FROM custom_currencies")
        registered = set(CURRENCIES) | {row[0] for row in cur.fetchall()}
        cur.execute("SELECT COUNT(*) FROM countries")
        if cur.fetchone()[0] == 0:
            for name, currency in DEFAULT_COUNTRIES:
                if currency not in registered:
                    logger.debug("skipping default country %s: %s not registered", name, currency)
                    continue
                cur.execute(
                    "INSERT INTO countries (name, default_currency) VALUES (?, ?)",
                    (name, currency),
                )
        for name in DEFAULT_PROVINCES:
            # Linked only while the country exists.
            cur.execute(
                """
                INSERT OR IGNORE INTO provinces (name, country)
                VALUES (?, (SELECT name FROM countries WHERE name = ?))
                """,
                (name, DEFAULT_PROVINCE_COUNTRY),
            )
        for quote, rate in STATIC_USD_RATES.items():
            if quote not in CURRENCIES or quote == REFERENCE_CURRENCY:
                continue
            # Admin edited rates win; only fill missing pairs.
            cur.execute(
                """
                INSERT OR IGNORE INTO exchange_rates (from_currency, to_currency, rate)
                VALUES (?, ?, ?)
                """,
                (REFERENCE_CURRENCY, quote, float(rate)),
            )
        conn.commit()


def seed_demo_service_prices(db: Database) -> int:
    if db.count_service_prices() > 0:
        return 0
    inserted = 0
    for raw in DEMO_SERVICE_PRICES:
        db.create_service_price(ServicePriceIn(**raw))
        inserted += 1
    logger.info("seeded %d demo service prices", inserted)
    return inserted
