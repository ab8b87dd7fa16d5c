"""Request/response shapes for the hosted-LLM helper endpoints."""

from __future__ import annotations
import re
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .pricing import Category, TransferMode, VehicleType

DATA_URI_RE = re.compile(r"^data:[\w.+-]+/[\w.+-]+;base64,[A-Za-z0-9+/=\s]+$")


class DescribeImageIn(BaseModel):
    image_data_uri: str = Field(
        ...,
        description="Image as a data URI: 'data:<mimetype>;base64,<encoded_data>'",
    )

    @field_validator("image_data_uri")
    @classmethod
    def _valid_data_uri(cls, value: str) -> str:
        if not DATA_URI_RE.match(value):
            raise ValueError("image must be a base64 data URI with a MIME type")
        return value


class DescribeImageOut(BaseModel):
    description: str


class ExtractContractDataIn(BaseModel):
    contract_text: str = Field(..., min_length=50, description="Full contract text")


class ContractDataOut(BaseModel):
    name: Optional[str] = None
    province: Optional[str] = None
    category: Optional[Category] = None
    sub_category: Optional[str] = None
    price1: Optional[float] = None
    price2: Optional[float] = None
    currency: Optional[str] = None
    unit_description: Optional[str] = None
    notes: Optional[str] = None
    max_passengers: Optional[int] = Field(None, ge=1)
    transfer_mode_attempt: Optional[TransferMode] = None
    vehicle_type_attempt: Optional[VehicleType] = None

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().upper() if value else value


class ParseActivityTextIn(BaseModel):
    activity_text: str = Field(
        ..., min_length=10, description="Activity description, possibly listing several packages"
    )


class ParsedActivityPackage(BaseModel):
    package_name: Optional[str] = None
    adult_price: Optional[float] = Field(None, ge=0)
    child_price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().upper() if value else value


class ParseActivityTextOut(BaseModel):
    activity_name: Optional[str] = None
    province: Optional[str] = None
    parsed_packages: List[ParsedActivityPackage] = Field(default_factory=list)

    @field_validator("parsed_packages", mode="before")
    @classmethod
    def _null_packages(cls, value):
        return [] if value is None else value
