from __future__ import annotations

"""Concrete rate providers and factory.

'static' serves a built-in USD based table; 'external-http' asks
ExchangeRate-API (v6, key required) and degrades to the static table when the
key is missing or the call fails.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

from .base import RateProvider
from itinerary_ace.services.http_client import get_json, HttpError

logger = logging.getLogger("itinerary_ace.rates")

STATIC_USD_RATES: Dict[str, float] = {
    "THB": 36.50,
    "MYR": 4.70,
    "SGD": 1.35,
    "VND": 25000.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 157.00,
}


class StaticRateProvider(RateProvider):
    name = "static"

    def fetch_rates(self) -> Dict[str, float]:  # type: ignore[override]
        return dict(STATIC_USD_RATES)


class ExternalHTTPRateProvider(RateProvider):
    name = "external-http"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://v6.exchangerate-api.com/v6",
        timeout: float = 10.0,
    ):
        self._api_key = (api_key or "").strip()
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._last_updated: Optional[datetime] = None

    @property
    def last_updated(self) -> Optional[datetime]:
        return self._last_updated

    def fetch_rates(self) -> Dict[str, float]:  # type: ignore[override]
        if not self._api_key:
            logger.warning("ExchangeRate-API key is not configured; using static rates")
            return dict(STATIC_USD_RATES)
        url = f"{self._base_url}/{self._api_key}/latest/{self.base_currency}"
        try:
            data = get_json(url, timeout=self._timeout, retries=2)
        except HttpError as e:
            # On failure we degrade gracefully to static
            logger.warning("rate fetch failed (%s); using static rates", e)
            return dict(STATIC_USD_RATES)
        if not isinstance(data, dict):
            logger.warning("rate API returned a non-object body; using static rates")
            return dict(STATIC_USD_RATES)
        if data.get("result") != "success" or not isinstance(
            data.get("conversion_rates"), dict
        ):
            logger.warning(
                "unexpected rate API response (%s); using static rates",
                data.get("error-type", "invalid structure"),
            )
            return dict(STATIC_USD_RATES)
        ts = data.get("time_last_update_unix")
        if isinstance(ts, (int, float)):
            self._last_updated = datetime.fromtimestamp(ts, tz=timezone.utc)
        rates: Dict[str, float] = {}
        for code, value in data["conversion_rates"].items():
            if code == self.base_currency:
                continue
            if isinstance(value, (int, float)) and value > 0:
                rates[str(code).upper()] = float(value)
        return rates


def make_rate_provider(
    kind: str,
    api_key: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: float = 10.0,
) -> RateProvider:
    if kind == "static":
        return StaticRateProvider()
    if kind == "external-http":
        if base_url:
            return ExternalHTTPRateProvider(api_key, base_url=base_url, timeout=timeout)
        return ExternalHTTPRateProvider(api_key, timeout=timeout)
    raise ValueError(f"Unknown rate provider kind '{kind}'")
