"""Service pricing models.

A service price record describes what one service costs in one province and
currency. Hotels carry room types with seasonal nightly rates, activities may
offer dated packages, and transfers may be priced per ticket or per vehicle
with optional surcharge periods.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import WEEKDAY_NAMES, normalize_currency_code

Category = Literal["transfer", "activity", "hotel", "meal", "misc"]
TransferMode = Literal["ticket", "vehicle"]
VehicleType = Literal[
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
]


def _new_id() -> str:
    return uuid.uuid4().hex


class _DateRange(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _end_not_before_start(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date cannot be before start_date")
        return self

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class VehicleOption(BaseModel):
    id: str = Field(default_factory=_new_id)
    vehicle_type: VehicleType
    price: float = Field(..., ge=0)
    max_passengers: int = Field(..., ge=1)
    notes: Optional[str] = None


class SurchargePeriod(_DateRange):
    id: str = Field(default_factory=_new_id)
    name: str
    surcharge_amount: float = Field(..., ge=0, description="Added per vehicle")


class ActivityPackage(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    price1: float = Field(..., ge=0, description="Adult price")
    price2: Optional[float] = Field(None, ge=0, description="Child price")
    notes: Optional[str] = None
    validity_start_date: Optional[date] = None
    validity_end_date: Optional[date] = None
    closed_weekdays: List[int] = Field(default_factory=list, description="0=Sunday .. 6=Saturday")
    specific_closed_dates: List[date] = Field(default_factory=list)

    @field_validator("closed_weekdays")
    @classmethod
    def _valid_weekdays(cls, days: List[int]) -> List[int]:
        if any(d < 0 or d > 6 for d in days):
            raise ValueError("closed_weekdays must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(days))

    @model_validator(mode="after")
    def _validity_order(self):
        start, end = self.validity_start_date, self.validity_end_date
        if start and end and end < start:
            raise ValueError("validity_end_date cannot be before validity_start_date")
        return self

    def unavailable_reason(self, day: date) -> Optional[str]:
        """Return why the package cannot run on ``day``, or None if it can."""
        if self.validity_start_date and day < self.validity_start_date:
            return "before validity start"
        if self.validity_end_date and day > self.validity_end_date:
            return "after validity end"
        # date.weekday() is Monday=0; packages count from Sunday=0
        weekday = (day.weekday() + 1) % 7
        if weekday in self.closed_weekdays:
            return f"closed on {WEEKDAY_NAMES[weekday]}"
        if day in self.specific_closed_dates:
            return "closed on this date"
        return None

    def is_operational(self, day: date) -> bool:
        return self.unavailable_reason(day) is None


class RoomTypeSeasonalPrice(_DateRange):
    id: str = Field(default_factory=_new_id)
    season_name: Optional[str] = None
    rate: float = Field(..., ge=0, description="Price per night")
    extra_bed_rate: Optional[float] = Field(None, ge=0)


class HotelCharacteristic(BaseModel):
    id: str = Field(default_factory=_new_id)
    key: str
    value: str


class HotelRoomType(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    extra_bed_allowed: bool = False
    notes: Optional[str] = None
    seasonal_prices: List[RoomTypeSeasonalPrice] = Field(default_factory=list)
    characteristics: List[HotelCharacteristic] = Field(default_factory=list)

    def season_for(self, day: date) -> Optional[RoomTypeSeasonalPrice]:
        for season in self.seasonal_prices:
            if season.covers(day):
                return season
        return None

    def describe_characteristics(self) -> str:
        return ", ".join(f"{c.key}: {c.value}" for c in self.characteristics)


class HotelDefinition(BaseModel):
    id: str = Field(default_factory=_new_id)
    name: str
    province: Optional[str] = None
    room_types: List[HotelRoomType] = Field(..., min_length=1)

    def room_type(self, room_type_id: str) -> Optional[HotelRoomType]:
        for room_type in self.room_types:
            if room_type.id == room_type_id:
                return room_type
        return None


class ServicePriceIn(BaseModel):
    name: str
    province: Optional[str] = None
    category: Category
    sub_category: Optional[str] = None
    price1: Optional[float] = Field(None, ge=0)
    price2: Optional[float] = Field(None, ge=0)
    transfer_mode: Optional[TransferMode] = None
    vehicle_options: List[VehicleOption] = Field(default_factory=list)
    max_passengers: Optional[int] = Field(None, ge=1)
    currency: str
    unit_description: str = ""
    notes: Optional[str] = None
    hotel_details: Optional[HotelDefinition] = None
    activity_packages: List[ActivityPackage] = Field(default_factory=list)
    surcharge_periods: List[SurchargePeriod] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be empty")
        return value.strip()

    @field_validator("currency")
    @classmethod
    def _valid_currency(cls, value: str) -> str:
        return normalize_currency_code(value)

    @model_validator(mode="after")
    def _category_rules(self):
        if self.category == "hotel" and self.hotel_details is None:
            raise ValueError("hotel prices require hotel_details with room types")
        if self.category != "hotel" and self.hotel_details is not None:
            raise ValueError("hotel_details apply to hotels only")
        if self.category != "transfer" and (self.vehicle_options or self.surcharge_periods):
            raise ValueError("vehicle options and surcharges apply to transfers only")
        if self.category != "transfer" and self.transfer_mode is not None:
            raise ValueError("transfer_mode applies to transfers only")
        if self.category != "activity" and self.activity_packages:
            raise ValueError("activity packages apply to activities only")
        if self.category == "hotel":
            return self
        if self.category == "transfer" and self.transfer_mode is None:
            # Legacy records mark ticket transfers through the sub-category.
            self.transfer_mode = "ticket" if self.sub_category == "ticket" else "vehicle"
        vehicle_priced = self.transfer_mode == "vehicle" and bool(self.vehicle_options)
        if self.price1 is None and not vehicle_priced:
            raise ValueError("price1 is required for this service")
        return self

    def vehicle_option(self, option_id: str) -> Optional[VehicleOption]:
        for option in self.vehicle_options:
            if option.id == option_id:
                return option
        return None

    def activity_package(self, package_id: str) -> Optional[ActivityPackage]:
        for package in self.activity_packages:
            if package.id == package_id:
                return package
        return None

    def surcharge_on(self, day: date) -> float:
        return sum(p.surcharge_amount for p in self.surcharge_periods if p.covers(day))


class ServicePriceOut(ServicePriceIn):
    id: int
    created_at: datetime
    updated_at: datetime
