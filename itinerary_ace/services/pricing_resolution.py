"""Resolve the unit prices an itinerary item should be charged.

An item that references a service price record is priced from that record,
converted from the record currency into the itinerary currency. An item
without a reference carries its own prices, already in the itinerary
currency.
"""

from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Tuple

from itinerary_ace.models.itinerary import (
    ActivityItem,
    BaseItem,
    HotelItem,
    MealItem,
    MiscItem,
    SelectedHotelRoom,
    TransferItem,
)
from itinerary_ace.models.pricing import HotelRoomType, ServicePriceIn
from itinerary_ace.services.rates.conversion import ConversionError, SupportsConversion


class CalculationError(ValueError):
    def __init__(self, message: str, item_id: Optional[str] = None):
        super().__init__(message)
        self.item_id = item_id


class PriceResolver:
    def __init__(
        self,
        service_prices: Mapping[int, ServicePriceIn],
        rates: SupportsConversion,
        currency: str,
    ):
        self._prices = service_prices
        self._rates = rates
        self.currency = currency

    # Internal --------------------------------------------------
    def record_for(self, item: BaseItem, category: str) -> Optional[ServicePriceIn]:
        price_id = item.selected_service_price_id
        if price_id is None:
            return None
        record = self._prices.get(price_id)
        if record is None:
            raise CalculationError(
                f"service price {price_id} used by '{item.name}' not found", item.id
            )
        if record.category != category:
            raise CalculationError(
                f"service price {price_id} is a {record.category} price, "
                f"but '{item.name}' is a {category}",
                item.id,
            )
        return record

    def _convert(self, amount: float, record: ServicePriceIn, item: BaseItem) -> float:
        try:
            return self._rates.convert_raw(amount, record.currency, self.currency)
        except ConversionError as e:
            raise CalculationError(f"cannot price '{item.name}': {e}", item.id) from e

    def _pair(
        self, adult: Optional[float], child: Optional[float], record: ServicePriceIn, item: BaseItem
    ) -> Tuple[float, float]:
        if adult is None:
            raise CalculationError(
                f"service price for '{item.name}' has no primary price", item.id
            )
        adult_price = self._convert(adult, record, item)
        child_price = adult_price if child is None else self._convert(child, record, item)
        return adult_price, child_price

    def _transfer_record(self, item: TransferItem) -> Optional[ServicePriceIn]:
        record = self.record_for(item, "transfer")
        if record is not None and record.transfer_mode and record.transfer_mode != item.mode:
            raise CalculationError(
                f"'{item.name}' is a {item.mode} transfer but service price "
                f"{item.selected_service_price_id} is sold per {record.transfer_mode}",
                item.id,
            )
        return record

    # Public API -----------------------------------------------
    def check_currency(self) -> None:
        """Fail unless the itinerary currency is known to the rate table."""
        try:
            self._rates.get_rate(self.currency, self.currency)
        except ConversionError as e:
            raise CalculationError(
                f"itinerary currency '{self.currency}' is not registered"
            ) from e

    def transfer_ticket_prices(self, item: TransferItem) -> Tuple[float, float]:
        record = self._transfer_record(item)
        if record is not None:
            return self._pair(record.price1, record.price2, record, item)
        adult = item.adult_ticket_price or 0.0
        child = item.child_ticket_price if item.child_ticket_price is not None else adult
        return adult, child

    def transfer_vehicle_cost(
        self, item: TransferItem, on: date
    ) -> Tuple[Optional[str], float]:
        """Return (vehicle type, cost per vehicle including date surcharges)."""
        record = self._transfer_record(item)
        if record is None:
            return item.vehicle_type, item.cost_per_vehicle or 0.0
        if item.selected_vehicle_option_id:
            option = record.vehicle_option(item.selected_vehicle_option_id)
            if option is None:
                raise CalculationError(
                    f"vehicle option {item.selected_vehicle_option_id} not offered for '{item.name}'",
                    item.id,
                )
        else:
            option = record.vehicle_options[0] if record.vehicle_options else None
        if option is not None:
            vehicle_type: Optional[str] = option.vehicle_type
            base = option.price
        else:
            vehicle_type = item.vehicle_type or record.sub_category
            if record.price1 is None:
                raise CalculationError(
                    f"service price for '{item.name}' has no vehicle price", item.id
                )
            base = record.price1
        return vehicle_type, self._convert(base + record.surcharge_on(on), record, item)

    def activity_prices(
        self, item: ActivityItem, on: date
    ) -> Tuple[float, float, Optional[str]]:
        """Return (adult, child, package name)."""
        record = self.record_for(item, "activity")
        if record is None:
            adult = item.adult_price or 0.0
            child = item.child_price if item.child_price is not None else adult
            return adult, child, None
        if item.selected_package_id:
            package = record.activity_package(item.selected_package_id)
            if package is None:
                raise CalculationError(
                    f"package {item.selected_package_id} not offered for '{item.name}'",
                    item.id,
                )
            reason = package.unavailable_reason(on)
            if reason:
                raise CalculationError(
                    f"package '{package.name}' of '{item.name}' is not available on "
                    f"{on.isoformat()}: {reason}",
                    item.id,
                )
            adult, child = self._pair(package.price1, package.price2, record, item)
            return adult, child, package.name
        adult, child = self._pair(record.price1, record.price2, record, item)
        return adult, child, None

    def meal_prices(self, item: MealItem) -> Tuple[float, float]:
        record = self.record_for(item, "meal")
        if record is not None:
            return self._pair(record.price1, record.price2, record, item)
        adult = item.adult_meal_price or 0.0
        child = item.child_meal_price if item.child_meal_price is not None else adult
        return adult, child

    def misc_unit_cost(self, item: MiscItem) -> float:
        record = self.record_for(item, "misc")
        if record is None:
            return item.unit_cost or 0.0
        if record.price1 is None:
            raise CalculationError(
                f"service price for '{item.name}' has no unit cost", item.id
            )
        return self._convert(record.price1, record, item)

    def hotel_room_type(
        self, item: HotelItem, room: SelectedHotelRoom
    ) -> Optional[HotelRoomType]:
        record = self.record_for(item, "hotel")
        if record is None or record.hotel_details is None:
            return None
        if not room.room_type_definition_id:
            if room.room_rate is None:
                raise CalculationError(
                    f"room '{room.room_type_name or room.id}' of '{item.name}' has no room type or rate",
                    item.id,
                )
            return None
        room_type = record.hotel_details.room_type(room.room_type_definition_id)
        if room_type is None:
            raise CalculationError(
                f"room type {room.room_type_definition_id} not offered by '{record.name}'",
                item.id,
            )
        if room.extra_beds and not room_type.extra_bed_allowed:
            raise CalculationError(
                f"room type '{room_type.name}' does not allow extra beds", item.id
            )
        return room_type

    def hotel_night_rates(
        self,
        item: HotelItem,
        room: SelectedHotelRoom,
        room_type: Optional[HotelRoomType],
        night: date,
    ) -> Tuple[float, float]:
        """Return (room rate, extra bed rate) for one night in the itinerary currency."""
        if room_type is not None:
            record = self.record_for(item, "hotel")
            season = room_type.season_for(night)
            if record is not None and season is not None:
                room_rate = self._convert(season.rate, record, item)
                extra = self._convert(season.extra_bed_rate or 0.0, record, item)
                return room_rate, extra
        if room.room_rate is None:
            name = room_type.name if room_type is not None else (room.room_type_name or room.id)
            raise CalculationError(
                f"no rate for room '{name}' of '{item.name}' on {night.isoformat()}",
                item.id,
            )
        return room.room_rate, room.extra_bed_rate or 0.0
