"""Pydantic domain models for the itinerary planning and pricing admin service."""

from .constants import (
    CURRENCIES,
    REFERENCE_CURRENCY,
    SERVICE_CATEGORIES,
    VEHICLE_TYPES,
)  # re-export
from .currency import ManagedCurrency, ExchangeRateIn, ExchangeRateOut
from .country import CountryIn, CountryOut
from .province import ProvinceIn, ProvinceOut
from .pricing import ServicePriceIn, ServicePriceOut
from .itinerary import TripData, ItineraryIn, ItineraryOut, CostSummary
from .document import DocumentIn, DocumentOut

__all__ = [
    "CURRENCIES",
    "REFERENCE_CURRENCY",
    "SERVICE_CATEGORIES",
    "VEHICLE_TYPES",
    "ManagedCurrency",
    "ExchangeRateIn",
    "ExchangeRateOut",
    "CountryIn",
    "CountryOut",
    "ProvinceIn",
    "ProvinceOut",
    "ServicePriceIn",
    "ServicePriceOut",
    "TripData",
    "ItineraryIn",
    "ItineraryOut",
    "CostSummary",
    "DocumentIn",
    "DocumentOut",
]
