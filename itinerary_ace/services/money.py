"""Money / rounding helpers.

Centralized so the cost calculator, conversion and summaries use identical
rounding and display semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_currency(amount: float, currency: str) -> str:
    return f"{currency} {round2(amount):,.2f}"
