"""Domain constants and enumerations for validation.

Kept as plain tuples/sets; pydantic models narrow them with ``Literal`` where
the value set is closed.
"""

import re
from typing import Pattern, Tuple

# System default currencies. Immutable; admins may add custom codes on top.
CURRENCIES: Tuple[str, ...] = ("USD", "EUR", "GBP", "THB", "JPY")
REFERENCE_CURRENCY = "USD"
CURRENCY_CODE_RE: Pattern[str] = re.compile(r"^[A-Z]{3}$")

SERVICE_CATEGORIES: Tuple[str, ...] = ("transfer", "activity", "hotel", "meal", "misc")
TRANSFER_MODES: Tuple[str, ...] = ("ticket", "vehicle")
COST_ASSIGNMENTS: Tuple[str, ...] = ("perPerson", "total")
TRAVELER_TYPES: Tuple[str, ...] = ("adult", "child")

VEHICLE_TYPES: Tuple[str, ...] = (
    "Sedan",
    "MPV",
    "SUV",
    "Van",
    "Minibus",
    "Bus",
    "Ferry",
    "Longtail Boat",
    "Speedboat",
    "Motorbike Taxi",
    "Tuk-tuk",
    "Other",
)

# Seeded on first start; admins may add more.
# (name, default currency); skipped while the currency is not registered.
DEFAULT_COUNTRIES: Tuple[Tuple[str, str], ...] = (
    ("Thailand", "THB"),
    ("Malaysia", "MYR"),
    ("Singapore", "USD"),
    ("Vietnam", "USD"),
)
DEFAULT_PROVINCE_COUNTRY = "Thailand"
DEFAULT_PROVINCES: Tuple[str, ...] = (
    "Bangkok",
    "Chiang Mai",
    "Phuket",
    "Pattaya (Chonburi)",
    "Krabi",
    "Surat Thani (Koh Samui, Koh Phangan)",
    "Ayutthaya",
    "Sukhothai",
    "Chiang Rai",
    "Kanchanaburi",
)

WEEKDAY_NAMES: Tuple[str, ...] = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def normalize_currency_code(code: str) -> str:
    """Trim and upper-case a currency code, raising ValueError if malformed."""
    normalized = (code or "").strip().upper()
    if not CURRENCY_CODE_RE.match(normalized):
        raise ValueError("currency code must be exactly 3 letters")
    return normalized
