"""Itinerary cost calculation.

Single deterministic pass over the itinerary: every item is priced (see
``pricing_resolution``), its cost split between the participating travelers,
and accumulated into the grand total and per-person totals. Amounts are kept
unrounded while accumulating and rounded once when the summary is built.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional

from itinerary_ace.models.itinerary import (
    ActivityItem,
    BaseItem,
    CostSummary,
    DetailedSummaryItem,
    HotelItem,
    HotelOccupancyDetail,
    MealItem,
    MiscItem,
    TransferItem,
    Traveler,
    TripData,
)
from itinerary_ace.models.pricing import ServicePriceIn
from itinerary_ace.services.money import format_currency, round2
from itinerary_ace.services.pricing_resolution import CalculationError, PriceResolver
from itinerary_ace.services.rates.conversion import SupportsConversion

logger = logging.getLogger("itinerary_ace.calculation")

TYPE_LABELS = {
    "transfer": "Transfers",
    "activity": "Activities",
    "hotel": "Hotels",
    "meal": "Meals",
    "misc": "Miscellaneous",
}


@dataclass
class _Participants:
    adults: List[Traveler]
    children: List[Traveler]
    excluded_labels: List[str]

    @property
    def everyone(self) -> List[Traveler]:
        return self.adults + self.children


@dataclass
class _ItemCost:
    adult_cost: float = 0.0
    child_cost: float = 0.0
    total_cost: float = 0.0
    details: str = ""
    contributions: Dict[str, float] = field(default_factory=dict)
    occupancy: Optional[List[HotelOccupancyDetail]] = None


def _participants(item: BaseItem, travelers: Iterable[Traveler]) -> _Participants:
    excluded = set(item.excluded_traveler_ids)
    adults: List[Traveler] = []
    children: List[Traveler] = []
    excluded_labels: List[str] = []
    for t in travelers:
        if t.id in excluded:
            excluded_labels.append(t.label)
        elif t.type == "adult":
            adults.append(t)
        else:
            children.append(t)
    return _Participants(adults, children, excluded_labels)


def _with_province(item: BaseItem, details: str) -> str:
    return f"Prov: {item.province}; {details}" if item.province else details


def _per_person(p: _Participants, adult_price: float, child_price: float) -> _ItemCost:
    cost = _ItemCost(
        adult_cost=len(p.adults) * adult_price,
        child_cost=len(p.children) * child_price,
    )
    cost.total_cost = cost.adult_cost + cost.child_cost
    for t in p.adults:
        cost.contributions[t.id] = adult_price
    for t in p.children:
        cost.contributions[t.id] = child_price
    return cost


def _shared(p: _Participants, total: float) -> _ItemCost:
    cost = _ItemCost(total_cost=total)
    heads = len(p.everyone)
    if heads:
        share = total / heads
        cost.adult_cost = share * len(p.adults)
        cost.child_cost = share * len(p.children)
        for t in p.everyone:
            cost.contributions[t.id] = share
    return cost


class CostCalculator:
    def __init__(
        self,
        trip: TripData,
        service_prices: Mapping[int, ServicePriceIn],
        rates: SupportsConversion,
    ):
        self.trip = trip
        self.currency = trip.pax.currency
        self.resolver = PriceResolver(service_prices, rates, self.currency)

    def _fmt(self, amount: float) -> str:
        return format_currency(amount, self.currency)

    # Per type --------------------------------------------------
    def _transfer(self, item: TransferItem, p: _Participants) -> _ItemCost:
        if item.mode == "ticket":
            adult, child = self.resolver.transfer_ticket_prices(item)
            cost = _per_person(p, adult, child)
            cost.details = f"Mode: ticket; Ad: {self._fmt(adult)}, Ch: {self._fmt(child)}"
            return cost
        on = self.trip.settings.date_of_day(item.day)
        vehicle_type, per_vehicle = self.resolver.transfer_vehicle_cost(item, on)
        vehicle_total = per_vehicle * item.vehicles
        cost = _shared(p, vehicle_total)
        cost.details = (
            f"Mode: vehicle; Type: {vehicle_type or 'N/A'}; #Veh: {item.vehicles}; "
            f"Cost/V: {self._fmt(per_vehicle)}; Total: {self._fmt(vehicle_total)}"
        )
        return cost

    def _activity(self, item: ActivityItem, p: _Participants) -> _ItemCost:
        on = self.trip.settings.date_of_day(item.day)
        adult, child, package = self.resolver.activity_prices(item, on)
        cost = _per_person(p, adult, child)
        end_day = item.end_day or item.day
        duration = max(1, end_day - item.day + 1)
        span = f"Day {item.day}" + (f"-{end_day}" if duration > 1 else "")
        cost.details = (
            f"{span} (Dur: {duration}d). "
            + (f"Pkg: {package}. " if package else "")
            + f"Ad: {self._fmt(adult)}, Ch: {self._fmt(child)}. Fixed Price."
        )
        return cost

    def _meal(self, item: MealItem, p: _Participants) -> _ItemCost:
        adult, child = self.resolver.meal_prices(item)
        meals = item.total_meals
        cost = _per_person(p, adult * meals, child * meals)
        cost.details = f"# Meals: {meals}, Ad: {self._fmt(adult)}, Ch: {self._fmt(child)}"
        return cost

    def _misc(self, item: MiscItem, p: _Participants) -> _ItemCost:
        unit = self.resolver.misc_unit_cost(item)
        line_total = unit * item.quantity
        base = f"Assign: {item.cost_assignment}, Cost: {self._fmt(unit)}, Qty: {item.quantity}"
        if item.cost_assignment == "perPerson":
            cost = _per_person(p, line_total, line_total)
            cost.details = f"{base}; Total: {self._fmt(cost.total_cost)} (Per Pers)"
        else:
            cost = _shared(p, line_total)
            cost.details = f"{base}; Total Shared: {self._fmt(line_total)}"
        return cost

    def _hotel(self, item: HotelItem, p: _Participants) -> _ItemCost:
        nights = max(0, item.checkout_day - item.day)
        details = (
            f"In: Day {item.day}, Out: Day {item.checkout_day} ({nights}n). "
            f"Child Share: {'Yes' if item.children_sharing_bed else 'No'}"
        )
        if nights <= 0:
            return _ItemCost(details=f"{details}. Invalid nights: {nights}. No cost.", occupancy=[])

        by_id = {t.id: t for t in self.trip.travelers}
        cost = _ItemCost(details=details, occupancy=[])
        assigned_in_hotel: set = set()
        unassigned_pool = 0.0

        for room in item.selected_rooms:
            room_type = self.resolver.hotel_room_type(item, room)
            block_cost = 0.0
            for offset in range(nights):
                night = self.trip.settings.date_of_day(item.day + offset)
                rate, extra_rate = self.resolver.hotel_night_rates(item, room, room_type, night)
                block_cost += (rate + room.extra_beds * extra_rate) * room.num_rooms
            cost.total_cost += block_cost

            name = room_type.name if room_type is not None else (room.room_type_name or "N/A")
            cost.occupancy.append(
                HotelOccupancyDetail(
                    room_type_name=name,
                    num_rooms=room.num_rooms,
                    nights=nights,
                    extra_beds=room.extra_beds,
                    characteristics=(room_type.describe_characteristics() or None)
                    if room_type is not None
                    else None,
                    assigned_traveler_labels=", ".join(
                        by_id[tid].label if tid in by_id else tid
                        for tid in room.assigned_traveler_ids
                    )
                    or "None",
                    total_room_block_cost=block_cost,
                )
            )

            assigned_adults = [
                tid
                for tid in room.assigned_traveler_ids
                if tid in by_id and by_id[tid].type == "adult"
            ]
            if assigned_adults and block_cost > 0:
                share = block_cost / len(assigned_adults)
                for tid in assigned_adults:
                    cost.contributions[tid] = cost.contributions.get(tid, 0.0) + share
                    assigned_in_hotel.add(tid)
                cost.adult_cost += block_cost
            elif block_cost > 0:
                unassigned_pool += block_cost

        if unassigned_pool > 0:
            self._split_pool(item, p, cost, unassigned_pool, assigned_in_hotel)
        return cost

    def _split_pool(
        self,
        item: HotelItem,
        p: _Participants,
        cost: _ItemCost,
        pool: float,
        assigned_in_hotel: set,
    ) -> None:
        """Charge room blocks nobody was assigned to."""
        adult_payers = [t.id for t in p.adults if t.id not in assigned_in_hotel]
        child_payers = [t.id for t in p.children if t.id not in assigned_in_hotel]
        payers = list(adult_payers)
        children_pay = (not item.children_sharing_bed or not adult_payers) and bool(child_payers)
        if children_pay:
            payers.extend(child_payers)

        if payers:
            share = pool / len(payers)
            for tid in payers:
                cost.contributions[tid] = cost.contributions.get(tid, 0.0) + share
            cost.adult_cost += share * len(adult_payers)
            if children_pay:
                cost.child_cost += share * len(child_payers)
            return

        # Everyone is already assigned elsewhere; fall back to all participants.
        if p.adults:
            share = pool / len(p.adults)
            for t in p.adults:
                cost.contributions[t.id] = cost.contributions.get(t.id, 0.0) + share
            cost.adult_cost += pool
        elif p.children and not item.children_sharing_bed:
            share = pool / len(p.children)
            for t in p.children:
                cost.contributions[t.id] = cost.contributions.get(t.id, 0.0) + share
            cost.child_cost += pool

    # Driver ----------------------------------------------------
    def _item_cost(self, item: BaseItem, p: _Participants) -> _ItemCost:
        if isinstance(item, TransferItem):
            return self._transfer(item, p)
        if isinstance(item, ActivityItem):
            return self._activity(item, p)
        if isinstance(item, HotelItem):
            return self._hotel(item, p)
        if isinstance(item, MealItem):
            return self._meal(item, p)
        if isinstance(item, MiscItem):
            return self._misc(item, p)
        raise CalculationError(f"unsupported item type for '{item.name}'", item.id)

    def calculate(self) -> CostSummary:
        self.resolver.check_currency()
        settings = self.trip.settings
        grand_total = 0.0
        per_person: Dict[str, float] = {t.id: 0.0 for t in self.trip.travelers}
        detailed: List[DetailedSummaryItem] = []

        for item in self.trip.iter_items():
            p = _participants(item, self.trip.travelers)
            cost = self._item_cost(item, p)
            grand_total += cost.total_cost
            for tid, amount in cost.contributions.items():
                if tid in per_person:
                    per_person[tid] += amount
            occupancy = None
            if cost.occupancy is not None:
                occupancy = [
                    od.model_copy(
                        update={"total_room_block_cost": round2(od.total_room_block_cost)}
                    )
                    for od in cost.occupancy
                ]
            detailed.append(
                DetailedSummaryItem(
                    id=item.id,
                    type=TYPE_LABELS.get(item.type, item.type),
                    day=item.day if settings.num_days > 1 else None,
                    name=item.name,
                    note=item.note,
                    province=item.province,
                    configuration_details=_with_province(item, cost.details),
                    excluded_travelers=", ".join(p.excluded_labels) or "None",
                    adult_cost=round2(cost.adult_cost),
                    child_cost=round2(cost.child_cost),
                    total_cost=round2(cost.total_cost),
                    occupancy_details=occupancy,
                )
            )

        total = round2(grand_total)
        logger.debug(
            "calculated %d items, total %s", len(detailed), format_currency(total, self.currency)
        )
        return CostSummary(
            currency=self.currency,
            grand_total=total,
            per_person_totals={tid: round2(v) for tid, v in per_person.items()},
            detailed_items=detailed,
            budget=settings.budget,
            budget_remaining=round2(settings.budget - total)
            if settings.budget is not None
            else None,
        )


def calculate_all_costs(
    trip: TripData,
    service_prices: Mapping[int, ServicePriceIn],
    rates: SupportsConversion,
) -> CostSummary:
    """Compute the cost summary of ``trip`` in its pax currency."""
    return CostCalculator(trip, service_prices, rates).calculate()
