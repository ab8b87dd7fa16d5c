import pytest

from itinerary_ace.models.itinerary import TripData
from itinerary_ace.models.pricing import ServicePriceIn
from itinerary_ace.services.calculation import calculate_all_costs
from itinerary_ace.services.pricing_resolution import CalculationError

from conftest import make_trip


def _calc(days, rate_table, prices=None, **trip_kwargs):
    trip = TripData.model_validate(make_trip(days, **trip_kwargs))
    return calculate_all_costs(trip, prices or {}, rate_table)


def _hotel_record():
    return ServicePriceIn(
        name="Riverside",
        province="Bangkok",
        category="hotel",
        currency="THB",
        hotel_details={
            "name": "Riverside",
            "room_types": [
                {
                    "id": "rt1",
                    "name": "Deluxe",
                    "extra_bed_allowed": True,
                    "characteristics": [{"key": "View", "value": "River"}],
                    "seasonal_prices": [
                        {"start_date": "2025-04-01", "end_date": "2025-04-14", "rate": 1000, "extra_bed_rate": 200},
                        {"start_date": "2025-04-15", "end_date": "2025-04-30", "rate": 1200, "extra_bed_rate": 300},
                    ],
                },
                {
                    "id": "rt2",
                    "name": "Standard",
                    "seasonal_prices": [
                        {"start_date": "2025-04-14", "end_date": "2025-04-14", "rate": 800}
                    ],
                },
            ],
        },
    )


def _transfer_record():
    return ServicePriceIn(
        name="Airport Transfer",
        category="transfer",
        transfer_mode="vehicle",
        currency="THB",
        vehicle_options=[
            {"id": "sedan", "vehicle_type": "Sedan", "price": 1000, "max_passengers": 3},
            {"id": "van", "vehicle_type": "Van", "price": 1500, "max_passengers": 8},
        ],
        surcharge_periods=[
            {"name": "Songkran", "start_date": "2025-04-12", "end_date": "2025-04-16", "surcharge_amount": 300}
        ],
    )


class TestPerPersonItems:
    def test_ticket_transfer(self, rate_table):
        summary = _calc(
            {1: [{"type": "transfer", "day": 1, "name": "BTS", "mode": "ticket",
                  "adult_ticket_price": 100, "child_ticket_price": 50}]},
            rate_table,
        )
        item = summary.detailed_items[0]
        assert item.type == "Transfers"
        assert item.day == 1
        assert (item.adult_cost, item.child_cost, item.total_cost) == (200, 50, 250)
        assert summary.grand_total == 250
        assert summary.per_person_totals == {"A1": 100, "A2": 100, "C1": 50}
        assert item.excluded_travelers == "None"

    def test_child_price_defaults_to_adult(self, rate_table):
        summary = _calc(
            {1: [{"type": "activity", "day": 1, "name": "Temple", "adult_price": 300}]},
            rate_table,
        )
        assert summary.grand_total == 900
        assert summary.detailed_items[0].type == "Activities"

    def test_meal_with_excluded_traveler(self, rate_table):
        summary = _calc(
            {1: [{"type": "meal", "day": 1, "name": "Dinner", "adult_meal_price": 200,
                  "child_meal_price": 100, "total_meals": 2, "excluded_traveler_ids": ["A2"]}]},
            rate_table,
        )
        item = summary.detailed_items[0]
        assert (item.adult_cost, item.child_cost, item.total_cost) == (400, 200, 600)
        assert item.excluded_travelers == "Adult 2"
        assert summary.per_person_totals["A2"] == 0

    def test_misc_per_person_and_total(self, rate_table):
        summary = _calc(
            {1: [
                {"type": "misc", "day": 1, "name": "Massage", "unit_cost": 50, "quantity": 2,
                 "cost_assignment": "perPerson"},
                {"type": "misc", "day": 1, "name": "Tips", "unit_cost": 90},
            ]},
            rate_table,
        )
        per_person, shared = summary.detailed_items
        assert per_person.total_cost == 300
        assert shared.total_cost == 90
        assert summary.per_person_totals == {"A1": 130, "A2": 130, "C1": 130}


class TestTransfers:
    def test_inline_vehicle_cost_shared(self, rate_table):
        summary = _calc(
            {1: [{"type": "transfer", "day": 1, "name": "Van", "mode": "vehicle",
                  "cost_per_vehicle": 1500, "vehicles": 2}]},
            rate_table,
        )
        item = summary.detailed_items[0]
        assert item.total_cost == 3000
        assert (item.adult_cost, item.child_cost) == (2000, 1000)
        assert summary.per_person_totals["C1"] == 1000

    def test_selected_option_plus_surcharge(self, rate_table):
        summary = _calc(
            {1: [{"type": "transfer", "day": 1, "name": "Airport", "mode": "vehicle",
                  "selected_service_price_id": 5, "selected_vehicle_option_id": "van"}]},
            rate_table,
            prices={5: _transfer_record()},
        )
        item = summary.detailed_items[0]
        assert item.total_cost == 1800
        assert "Type: Van" in item.configuration_details

    def test_first_option_used_when_none_selected(self, rate_table):
        summary = _calc(
            {3: [{"type": "transfer", "day": 3, "name": "Airport", "mode": "vehicle",
                  "selected_service_price_id": 5}]},
            rate_table,
            prices={5: _transfer_record()},
        )
        # day 3 is 2025-04-16, still inside the surcharge period
        assert summary.grand_total == 1300

    def test_unknown_option_is_an_error(self, rate_table):
        with pytest.raises(CalculationError):
            _calc(
                {1: [{"type": "transfer", "day": 1, "name": "Airport", "mode": "vehicle",
                      "selected_service_price_id": 5, "selected_vehicle_option_id": "bus"}]},
                rate_table,
                prices={5: _transfer_record()},
            )

    def test_mode_must_match_record(self, rate_table):
        ferry = ServicePriceIn(
            name="Ferry", category="transfer", transfer_mode="ticket", price1=60, currency="THB"
        )
        with pytest.raises(CalculationError) as info:
            _calc(
                {1: [{"id": "t1", "type": "transfer", "day": 1, "name": "Ferry", "mode": "vehicle",
                      "selected_service_price_id": 2}]},
                rate_table,
                prices={2: ferry},
            )
        assert info.value.item_id == "t1"
        with pytest.raises(CalculationError):
            _calc(
                {1: [{"type": "transfer", "day": 1, "name": "Airport", "mode": "ticket",
                      "selected_service_price_id": 5}]},
                rate_table,
                prices={5: _transfer_record()},
            )


class TestLinkedRecords:
    def test_unregistered_trip_currency(self, rate_table):
        with pytest.raises(CalculationError) as info:
            _calc(
                {1: [{"type": "misc", "day": 1, "name": "Tips", "unit_cost": 90}]},
                rate_table,
                currency="XYZ",
            )
        assert "XYZ" in str(info.value)


    def test_record_prices_converted_into_trip_currency(self, rate_table):
        record = ServicePriceIn(
            name="Museum", category="activity", price1=10, price2=5, currency="EUR"
        )
        summary = _calc(
            {1: [{"type": "activity", "day": 1, "name": "Museum",
                  "selected_service_price_id": 7, "adult_price": 1}]},
            rate_table,
            prices={7: record},
        )
        item = summary.detailed_items[0]
        assert item.adult_cost == 793.48
        assert item.child_cost == 198.37
        assert summary.grand_total == 991.85

    def test_missing_record(self, rate_table):
        with pytest.raises(CalculationError) as info:
            _calc(
                {1: [{"id": "x1", "type": "meal", "day": 1, "name": "Lunch",
                      "selected_service_price_id": 99}]},
                rate_table,
            )
        assert info.value.item_id == "x1"

    def test_category_mismatch(self, rate_table):
        record = ServicePriceIn(name="Lunch", category="meal", price1=10, currency="THB")
        with pytest.raises(CalculationError):
            _calc(
                {1: [{"type": "activity", "day": 1, "name": "Tour", "selected_service_price_id": 1}]},
                rate_table,
                prices={1: record},
            )

    def test_unknown_record_currency(self, rate_table):
        record = ServicePriceIn(name="Pho", category="meal", price1=10, currency="VND")
        with pytest.raises(CalculationError):
            _calc(
                {1: [{"type": "meal", "day": 1, "name": "Pho", "selected_service_price_id": 1}]},
                rate_table,
                prices={1: record},
            )

    def test_closed_package_is_an_error(self, rate_table):
        record = ServicePriceIn(
            name="Market Tour",
            category="activity",
            price1=1500,
            currency="THB",
            activity_packages=[
                {"id": "am", "name": "Morning", "price1": 1200, "price2": 800, "closed_weekdays": [1]}
            ],
        )
        day_one = {"type": "activity", "day": 1, "name": "Market",
                   "selected_service_price_id": 1, "selected_package_id": "am"}
        with pytest.raises(CalculationError):
            _calc({1: [day_one]}, rate_table, prices={1: record})

        day_two = dict(day_one, day=2)
        summary = _calc({2: [day_two]}, rate_table, prices={1: record})
        assert summary.grand_total == 3200
        assert "Pkg: Morning" in summary.detailed_items[0].configuration_details


class TestHotels:
    def test_nightly_seasonal_rates_split_among_assigned_adults(self, rate_table):
        summary = _calc(
            {1: [{"type": "hotel", "day": 1, "name": "Riverside", "checkout_day": 3,
                  "selected_service_price_id": 3, "province": "Bangkok",
                  "selected_rooms": [{"room_type_definition_id": "rt1", "extra_beds": 1,
                                      "assigned_traveler_ids": ["A1", "A2"]}]}]},
            rate_table,
            prices={3: _hotel_record()},
        )
        item = summary.detailed_items[0]
        assert item.total_cost == 2700
        assert (item.adult_cost, item.child_cost) == (2700, 0)
        assert summary.per_person_totals == {"A1": 1350, "A2": 1350, "C1": 0}
        assert item.configuration_details.startswith("Prov: Bangkok; ")
        occupancy = item.occupancy_details[0]
        assert occupancy.room_type_name == "Deluxe"
        assert occupancy.nights == 2
        assert occupancy.characteristics == "View: River"
        assert occupancy.assigned_traveler_labels == "Adult 1, Adult 2"
        assert occupancy.total_room_block_cost == 2700

    def test_unassigned_pool_with_children_sharing(self, rate_table):
        summary = _calc(
            {1: [{"type": "hotel", "day": 1, "name": "Guesthouse", "checkout_day": 3,
                  "selected_rooms": [{"room_type_name": "Twin", "room_rate": 1000}]}]},
            rate_table,
        )
        assert summary.grand_total == 2000
        assert summary.per_person_totals == {"A1": 1000, "A2": 1000, "C1": 0}

    def test_unassigned_pool_children_in_own_bed(self, rate_table):
        summary = _calc(
            {1: [{"type": "hotel", "day": 1, "name": "Guesthouse", "checkout_day": 3,
                  "children_sharing_bed": False,
                  "selected_rooms": [{"room_type_name": "Twin", "room_rate": 1000}]}]},
            rate_table,
        )
        item = summary.detailed_items[0]
        assert item.total_cost == 2000
        assert item.adult_cost == 1333.33
        assert item.child_cost == 666.67
        assert summary.per_person_totals["C1"] == 666.67

    def test_zero_nights_cost_nothing(self, rate_table):
        summary = _calc(
            {2: [{"type": "hotel", "day": 2, "name": "Day use", "checkout_day": 2,
                  "selected_rooms": [{"room_rate": 1000}]}]},
            rate_table,
        )
        assert summary.grand_total == 0
        assert "Invalid nights" in summary.detailed_items[0].configuration_details

    def test_extra_beds_must_be_allowed(self, rate_table):
        with pytest.raises(CalculationError):
            _calc(
                {1: [{"type": "hotel", "day": 1, "name": "Riverside", "checkout_day": 2,
                      "selected_service_price_id": 3,
                      "selected_rooms": [{"room_type_definition_id": "rt2", "extra_beds": 1}]}]},
                rate_table,
                prices={3: _hotel_record()},
            )

    def test_night_without_season_falls_back_to_room_rate(self, rate_table):
        summary = _calc(
            {1: [{"type": "hotel", "day": 1, "name": "Riverside", "checkout_day": 3,
                  "selected_service_price_id": 3,
                  "selected_rooms": [{"room_type_definition_id": "rt2", "room_rate": 900}]}]},
            rate_table,
            prices={3: _hotel_record()},
        )
        # 2025-04-14 seasonal 800, 2025-04-15 falls back to 900
        assert summary.grand_total == 1700

    def test_night_without_any_rate_is_an_error(self, rate_table):
        with pytest.raises(CalculationError):
            _calc(
                {1: [{"type": "hotel", "day": 1, "name": "Riverside", "checkout_day": 3,
                      "selected_service_price_id": 3,
                      "selected_rooms": [{"room_type_definition_id": "rt2"}]}]},
                rate_table,
                prices={3: _hotel_record()},
            )


def test_budget_and_single_day(rate_table):
    summary = _calc(
        {1: [{"type": "meal", "day": 1, "name": "Lunch", "adult_meal_price": 100}]},
        rate_table,
        num_days=1,
        budget=1000,
    )
    assert summary.grand_total == 300
    assert summary.budget == 1000
    assert summary.budget_remaining == 700
    assert summary.detailed_items[0].day is None
    assert summary.currency == "THB"


def test_empty_itinerary(rate_table):
    summary = _calc({}, rate_table)
    assert summary.grand_total == 0
    assert summary.detailed_items == []
    assert summary.budget_remaining is None
