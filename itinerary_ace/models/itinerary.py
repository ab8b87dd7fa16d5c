from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import normalize_currency_code


class Traveler(BaseModel):
    id: str  # e.g. "A1", "C1"
    label: str  # e.g. "Adult 1", "Child 1"
    type: Literal["adult", "child"]


class PaxDetails(BaseModel):
    adults: int = Field(1, ge=0)
    children: int = Field(0, ge=0)
    currency: str

    @field_validator("currency")
    @classmethod
    def _valid_currency(cls, value: str) -> str:
        return normalize_currency_code(value)


class TripSettings(BaseModel):
    num_days: int = Field(..., ge=1)
    start_date: date
    budget: Optional[float] = Field(None, ge=0)

    def date_of_day(self, day: int) -> date:
        return self.start_date + timedelta(days=day - 1)


class BaseItem(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    day: int = Field(..., ge=1)
    name: str
    note: Optional[str] = None
    excluded_traveler_ids: List[str] = Field(default_factory=list)
    selected_service_price_id: Optional[int] = None
    province: Optional[str] = None
    ai_suggested: bool = False


class TransferItem(BaseItem):
    type: Literal["transfer"] = "transfer"
    mode: Literal["ticket", "vehicle"] = "ticket"
    adult_ticket_price: Optional[float] = Field(None, ge=0)
    child_ticket_price: Optional[float] = Field(None, ge=0)
    vehicle_type: Optional[str] = None
    cost_per_vehicle: Optional[float] = Field(None, ge=0)
    vehicles: int = Field(1, ge=1)
    selected_vehicle_option_id: Optional[str] = None


class ActivityItem(BaseItem):
    type: Literal["activity"] = "activity"
    adult_price: float = Field(0, ge=0)
    child_price: Optional[float] = Field(None, ge=0)
    end_day: Optional[int] = Field(None, ge=1)
    selected_package_id: Optional[str] = None


class SelectedHotelRoom(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    room_type_definition_id: Optional[str] = None
    room_type_name: str = ""
    num_rooms: int = Field(1, ge=0)
    extra_beds: int = Field(0, ge=0)
    assigned_traveler_ids: List[str] = Field(default_factory=list)
    # Used when the hotel has no matching seasonal price (or none is linked).
    room_rate: Optional[float] = Field(None, ge=0)
    extra_bed_rate: Optional[float] = Field(None, ge=0)


class HotelItem(BaseItem):
    type: Literal["hotel"] = "hotel"
    checkout_day: int = Field(..., ge=1)
    children_sharing_bed: bool = True
    selected_rooms: List[SelectedHotelRoom] = Field(default_factory=list)


class MealItem(BaseItem):
    type: Literal["meal"] = "meal"
    adult_meal_price: float = Field(0, ge=0)
    child_meal_price: Optional[float] = Field(None, ge=0)
    total_meals: int = Field(1, ge=0)


class MiscItem(BaseItem):
    type: Literal["misc"] = "misc"
    unit_cost: float = Field(0, ge=0)
    quantity: int = Field(1, ge=1)
    cost_assignment: Literal["perPerson", "total"] = "total"


ItineraryItem = Annotated[
    Union[TransferItem, ActivityItem, HotelItem, MealItem, MiscItem],
    Field(discriminator="type"),
]


class DayItinerary(BaseModel):
    items: List[ItineraryItem] = Field(default_factory=list)


def build_travelers(pax: PaxDetails) -> List[Traveler]:
    travelers = [
        Traveler(id=f"A{i}", label=f"Adult {i}", type="adult")
        for i in range(1, pax.adults + 1)
    ]
    travelers.extend(
        Traveler(id=f"C{i}", label=f"Child {i}", type="child")
        for i in range(1, pax.children + 1)
    )
    return travelers


class TripData(BaseModel):
    settings: TripSettings
    pax: PaxDetails
    travelers: List[Traveler] = Field(default_factory=list)
    days: Dict[int, DayItinerary] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _consistency(self) -> "TripData":
        if not self.travelers:
            self.travelers = build_travelers(self.pax)
        ids = [t.id for t in self.travelers]
        if len(ids) != len(set(ids)):
            raise ValueError("traveler ids must be unique")
        for day_number in self.days:
            if day_number < 1 or day_number > self.settings.num_days:
                raise ValueError(
                    f"day {day_number} is outside the trip (1..{self.settings.num_days})"
                )
            for item in self.days[day_number].items:
                if item.day != day_number:
                    raise ValueError(
                        f"item '{item.name}' is listed under day {day_number} but has day {item.day}"
                    )
        return self

    def iter_items(self):
        for day_number in sorted(self.days):
            for item in self.days[day_number].items:
                yield item

    def traveler(self, traveler_id: str) -> Optional[Traveler]:
        for t in self.travelers:
            if t.id == traveler_id:
                return t
        return None


class ItineraryIn(BaseModel):
    name: str
    trip: TripData

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be empty")
        return value.strip()


class ItineraryOut(ItineraryIn):
    id: int
    created_at: datetime
    updated_at: datetime


class ItinerarySummaryOut(BaseModel):
    id: int
    name: str
    num_days: int
    start_date: date
    currency: str
    updated_at: datetime


class HotelOccupancyDetail(BaseModel):
    room_type_name: str
    num_rooms: int
    nights: int
    extra_beds: int = 0
    characteristics: Optional[str] = None
    assigned_traveler_labels: str
    total_room_block_cost: float


class DetailedSummaryItem(BaseModel):
    id: str
    type: str
    day: Optional[int] = None
    name: str
    note: Optional[str] = None
    province: Optional[str] = None
    configuration_details: str
    excluded_travelers: str
    adult_cost: float
    child_cost: float
    total_cost: float
    occupancy_details: Optional[List[HotelOccupancyDetail]] = None


class CostSummary(BaseModel):
    currency: str
    grand_total: float
    per_person_totals: Dict[str, float]
    detailed_items: List[DetailedSummaryItem]
    budget: Optional[float] = None
    budget_remaining: Optional[float] = None
