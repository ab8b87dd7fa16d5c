"""Currency registry: system defaults plus admin-added custom codes.

System codes are immutable. Custom codes can be added and removed, except
while a service price quotes in them or a country uses them as its default.
"""

from __future__ import annotations

import logging
from typing import List, Protocol, Set

from itinerary_ace.models.constants import CURRENCIES, normalize_currency_code
from itinerary_ace.models.currency import ManagedCurrency

logger = logging.getLogger("itinerary_ace.currencies")


class CurrencyError(ValueError):
    pass


class CurrencyExistsError(CurrencyError):
    pass


class CurrencyNotFoundError(CurrencyError):
    pass


class SystemCurrencyError(CurrencyError):
    pass


class CurrencyInUseError(CurrencyError):
    pass


class _CurrencyStore(Protocol):
    def list_custom_currencies(self) -> List[str]: ...

    def add_custom_currency(self, code: str) -> bool: ...

    def delete_custom_currency(self, code: str) -> bool: ...

    def count_service_prices_using_currency(self, code: str) -> int: ...

    def count_countries_using_currency(self, code: str) -> int: ...


class CurrencyRegistry:
    def __init__(self, store: _CurrencyStore):
        self._store = store

    @property
    def system_codes(self) -> List[str]:
        return sorted(CURRENCIES)

    def custom_codes(self) -> List[str]:
        return sorted(self._store.list_custom_currencies())

    def list_managed(self) -> List[ManagedCurrency]:
        managed = {code: ManagedCurrency(code=code, is_custom=False) for code in CURRENCIES}
        for code in self.custom_codes():
            # System entry wins if a code somehow exists in both.
            managed.setdefault(code, ManagedCurrency(code=code, is_custom=True))
        return [managed[code] for code in sorted(managed)]

    def all_codes(self) -> Set[str]:
        return set(CURRENCIES) | set(self.custom_codes())

    def is_known(self, code: str) -> bool:
        return (code or "").strip().upper() in self.all_codes()

    def add_custom(self, code: str) -> ManagedCurrency:
        normalized = normalize_currency_code(code)
        if normalized in CURRENCIES or not self._store.add_custom_currency(normalized):
            raise CurrencyExistsError(f'currency code "{normalized}" already exists')
        logger.info("custom currency %s added", normalized)
        return ManagedCurrency(code=normalized, is_custom=True)

    def delete_custom(self, code: str) -> None:
        normalized = (code or "").strip().upper()
        if normalized in CURRENCIES:
            raise SystemCurrencyError(
                f'"{normalized}" is a system currency and cannot be deleted'
            )
        if normalized not in self.custom_codes():
            raise CurrencyNotFoundError(f'custom currency "{normalized}" not found')
        in_use = self._store.count_service_prices_using_currency(normalized)
        if in_use:
            raise CurrencyInUseError(
                f'currency "{normalized}" is used by {in_use} service price(s)'
            )
        countries = self._store.count_countries_using_currency(normalized)
        if countries:
            raise CurrencyInUseError(
                f'currency "{normalized}" is the default of {countries} country(ies)'
            )
        self._store.delete_custom_currency(normalized)
        logger.info("custom currency %s deleted", normalized)
