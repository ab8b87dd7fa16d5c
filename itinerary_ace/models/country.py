from __future__ import annotations

from pydantic import BaseModel, field_validator

from .constants import normalize_currency_code


class CountryIn(BaseModel):
    name: str
    default_currency: str

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be empty")
        return value.strip()

    @field_validator("default_currency")
    @classmethod
    def _valid_currency(cls, value: str) -> str:
        return normalize_currency_code(value)


class CountryOut(CountryIn):
    id: int
