from __future__ import annotations

from dataclasses import dataclass
from typing import Container, Dict, Iterable, Mapping, Optional, Protocol, Tuple

from itinerary_ace.models.constants import REFERENCE_CURRENCY
from itinerary_ace.services.money import round2

"""Currency conversion over a static rate table.

Rates are stored as directed pairs. Any pair is resolved through the
reference currency (USD): ``from -> USD`` times ``USD -> to``, where each leg
is either a stored pair or the inverse of the reverse pair. A global markup
percentage is applied to cross-currency conversions.
"""

MIN_RATE = 0.000001


class ConversionError(ValueError):
    pass


class UnknownCurrencyError(ConversionError):
    def __init__(self, code: str):
        super().__init__(f"unknown currency '{code}'")
        self.code = code


class MissingRateError(ConversionError):
    def __init__(self, from_currency: str, to_currency: str):
        super().__init__(
            f"no exchange rate from {from_currency} to {to_currency}; "
            f"define a direct or inverse rate against {REFERENCE_CURRENCY}"
        )
        self.from_currency = from_currency
        self.to_currency = to_currency


@dataclass(frozen=True)
class ConversionRateDetails:
    base_rate: float
    final_rate: float
    markup_applied: float


@dataclass(frozen=True)
class ConversionResult:
    original_amount: float
    from_currency: str
    to_currency: str
    details: ConversionRateDetails
    converted_amount: float


class SupportsConversion(Protocol):
    def get_rate(self, from_currency: str, to_currency: str) -> ConversionRateDetails: ...

    def convert_raw(self, amount: float, from_currency: str, to_currency: str) -> float: ...


class RateTable:
    """In-memory view over the stored pairs plus the markup percentage."""

    def __init__(
        self,
        rates: Iterable[Tuple[str, str, float]] | Mapping[Tuple[str, str], float],
        markup_percentage: float = 0.0,
        known_currencies: Optional[Container[str]] = None,
        reference_currency: str = REFERENCE_CURRENCY,
    ):
        if markup_percentage < 0:
            raise ValueError("markup percentage must be non-negative")
        pairs: Dict[Tuple[str, str], float] = {}
        items = rates.items() if isinstance(rates, Mapping) else (
            ((f, t), r) for f, t, r in rates
        )
        for (from_currency, to_currency), rate in items:
            pairs[(from_currency.upper(), to_currency.upper())] = float(rate)
        self._pairs = pairs
        self._markup = float(markup_percentage)
        self._known = known_currencies
        self._reference = reference_currency

    @classmethod
    def from_rows(cls, rows: Iterable[Mapping], **kwargs) -> "RateTable":
        return cls(
            ((r["from_currency"], r["to_currency"], r["rate"]) for r in rows), **kwargs
        )

    @property
    def markup_percentage(self) -> float:
        return self._markup

    def _check_known(self, code: str) -> str:
        code = code.upper()
        if self._known is not None and code not in self._known:
            raise UnknownCurrencyError(code)
        return code

    def find_base_rate(self, from_currency: str, to_currency: str) -> Optional[float]:
        if from_currency == to_currency:
            return 1.0
        direct = self._pairs.get((from_currency, to_currency))
        if direct is not None:
            return direct
        inverse = self._pairs.get((to_currency, from_currency))
        if inverse:
            return 1 / inverse
        return None

    def get_rate(self, from_currency: str, to_currency: str) -> ConversionRateDetails:
        from_currency = self._check_known(from_currency)
        to_currency = self._check_known(to_currency)
        if from_currency == to_currency:
            return ConversionRateDetails(base_rate=1.0, final_rate=1.0, markup_applied=0.0)

        ref = self._reference
        to_ref = 1.0 if from_currency == ref else self.find_base_rate(from_currency, ref)
        if to_ref is None:
            raise MissingRateError(from_currency, ref)
        from_ref = 1.0 if to_currency == ref else self.find_base_rate(ref, to_currency)
        if from_ref is None:
            raise MissingRateError(ref, to_currency)

        base = max(MIN_RATE, to_ref * from_ref)
        final = base
        markup = 0.0
        if self._markup > 0:
            final = base * (1 + self._markup / 100)
            markup = self._markup
        return ConversionRateDetails(
            base_rate=base, final_rate=max(MIN_RATE, final), markup_applied=markup
        )

    def convert_raw(self, amount: float, from_currency: str, to_currency: str) -> float:
        """Unrounded conversion; callers accumulating totals round once at the end."""
        return amount * self.get_rate(from_currency, to_currency).final_rate

    def convert(self, amount: float, from_currency: str, to_currency: str) -> ConversionResult:
        details = self.get_rate(from_currency, to_currency)
        return ConversionResult(
            original_amount=amount,
            from_currency=from_currency.upper(),
            to_currency=to_currency.upper(),
            details=details,
            converted_amount=round2(amount * details.final_rate),
        )
