from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import normalize_currency_code


class ManagedCurrency(BaseModel):
    code: str
    is_custom: bool


class CustomCurrencyIn(BaseModel):
    code: str = Field(..., description="Three letter currency code, e.g. VND")

    @field_validator("code")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return normalize_currency_code(v)


class ExchangeRateIn(BaseModel):
    from_currency: str
    to_currency: str
    rate: float = Field(..., gt=0)

    @field_validator("from_currency", "to_currency")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return normalize_currency_code(v)

    @model_validator(mode="after")
    def not_same(self) -> "ExchangeRateIn":
        if self.from_currency == self.to_currency:
            raise ValueError("cannot set an exchange rate from a currency to itself")
        return self


class ExchangeRateUpdateIn(BaseModel):
    rate: float = Field(..., gt=0)


class ExchangeRateOut(ExchangeRateIn):
    id: int
    updated_at: datetime


class MarkupIn(BaseModel):
    markup_percentage: float = Field(..., ge=0, description="Conversion markup in percent")


class ConversionRequest(BaseModel):
    amount: float = Field(..., ge=0)
    from_currency: str
    to_currency: str

    @field_validator("from_currency", "to_currency")
    @classmethod
    def valid_code(cls, v: str) -> str:
        return normalize_currency_code(v)


class ConversionOut(BaseModel):
    original_amount: float
    from_currency: str
    to_currency: str
    base_rate: float
    final_rate: float
    markup_applied: float
    converted_amount: float


class RateRefreshOut(BaseModel):
    provider: str
    updated_pairs: int
    fetched_at: Optional[datetime] = None


class RateProviderIn(BaseModel):
    provider: str = Field(..., description="'static' or 'external-http'")


class RateProviderOut(BaseModel):
    provider: str
    configured_default: str
    rates_fetched_at: Optional[datetime] = None
