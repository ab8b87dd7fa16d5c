from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, field_validator


class ProvinceIn(BaseModel):
    name: str
    country: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be empty")
        return value.strip()

    @field_validator("country")
    @classmethod
    def _country_strip(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class ProvinceOut(ProvinceIn):
    id: int
