from datetime import date

import pytest
from pydantic import ValidationError

from itinerary_ace.models.ai import DescribeImageIn, ExtractContractDataIn
from itinerary_ace.models.document import DocumentUpdateIn
from itinerary_ace.models.itinerary import HotelItem, TripData
from itinerary_ace.models.pricing import ActivityPackage, ServicePriceIn

from conftest import make_trip


class TestServicePriceIn:
    def test_currency_normalized(self):
        price = ServicePriceIn(name=" Lunch ", category="meal", price1=200, currency=" thb ")
        assert price.currency == "THB"
        assert price.name == "Lunch"

    def test_malformed_currency_rejected(self):
        with pytest.raises(ValidationError):
            ServicePriceIn(name="Lunch", category="meal", price1=200, currency="TH")

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            ServicePriceIn(name="Lunch", category="meal", price1=-1, currency="THB")

    def test_price1_required_for_non_vehicle_records(self):
        with pytest.raises(ValidationError):
            ServicePriceIn(name="Lunch", category="meal", currency="THB")

    def test_transfer_mode_inferred_from_sub_category(self):
        ticket = ServicePriceIn(
            name="Ferry", category="transfer", sub_category="ticket", price1=60, currency="THB"
        )
        vehicle = ServicePriceIn(
            name="Airport", category="transfer", sub_category="Van", price1=1500, currency="THB"
        )
        assert ticket.transfer_mode == "ticket"
        assert vehicle.transfer_mode == "vehicle"

    def test_vehicle_options_replace_price1(self):
        price = ServicePriceIn(
            name="Airport",
            category="transfer",
            transfer_mode="vehicle",
            currency="THB",
            vehicle_options=[{"vehicle_type": "Sedan", "price": 1000, "max_passengers": 3}],
        )
        assert price.price1 is None
        assert price.vehicle_options[0].id

    def test_hotel_requires_details(self):
        with pytest.raises(ValidationError):
            ServicePriceIn(name="Hotel", category="hotel", currency="THB")
        with pytest.raises(ValidationError):
            ServicePriceIn(
                name="Hotel",
                category="hotel",
                currency="THB",
                hotel_details={"name": "Hotel", "room_types": []},
            )

    def test_packages_only_on_activities(self):
        with pytest.raises(ValidationError):
            ServicePriceIn(
                name="Lunch",
                category="meal",
                price1=100,
                currency="THB",
                activity_packages=[{"name": "Pkg", "price1": 10}],
            )

    def test_hotel_rejects_other_category_structures(self):
        hotel = {
            "name": "Riverside",
            "category": "hotel",
            "currency": "THB",
            "hotel_details": {"name": "Riverside", "room_types": [{"name": "Deluxe"}]},
        }
        assert ServicePriceIn(**hotel).transfer_mode is None
        extras = [
            {"vehicle_options": [{"vehicle_type": "Van", "price": 1500, "max_passengers": 8}]},
            {"activity_packages": [{"name": "Pkg", "price1": 10}]},
            {"surcharge_periods": [{"name": "Songkran", "start_date": "2025-04-12",
                                    "end_date": "2025-04-16", "surcharge_amount": 300}]},
            {"transfer_mode": "vehicle"},
        ]
        for extra in extras:
            with pytest.raises(ValidationError):
                ServicePriceIn(**hotel, **extra)

    def test_hotel_details_only_on_hotels(self):
        with pytest.raises(ValidationError):
            ServicePriceIn(
                name="Lunch",
                category="meal",
                price1=100,
                currency="THB",
                hotel_details={"name": "Riverside", "room_types": [{"name": "Deluxe"}]},
            )

    def test_surcharges_summed_on_covered_dates(self):
        price = ServicePriceIn(
            name="Airport",
            category="transfer",
            transfer_mode="vehicle",
            price1=1000,
            currency="THB",
            surcharge_periods=[
                {"name": "Songkran", "start_date": "2025-04-12", "end_date": "2025-04-16", "surcharge_amount": 300},
                {"name": "Weekend", "start_date": "2025-04-12", "end_date": "2025-04-13", "surcharge_amount": 100},
            ],
        )
        assert price.surcharge_on(date(2025, 4, 12)) == 400
        assert price.surcharge_on(date(2025, 4, 15)) == 300
        assert price.surcharge_on(date(2025, 4, 17)) == 0

    def test_surcharge_range_must_be_ordered(self):
        with pytest.raises(ValidationError):
            ServicePriceIn(
                name="Airport",
                category="transfer",
                price1=1000,
                currency="THB",
                surcharge_periods=[
                    {"name": "x", "start_date": "2025-04-16", "end_date": "2025-04-12", "surcharge_amount": 1}
                ],
            )


class TestActivityPackage:
    def test_closed_weekday(self):
        package = ActivityPackage(name="Morning", price1=100, closed_weekdays=[0, 0])
        assert package.closed_weekdays == [0]
        # 2025-04-13 is a Sunday
        assert package.unavailable_reason(date(2025, 4, 13)) == "closed on Sun"
        assert package.is_operational(date(2025, 4, 14))

    def test_validity_window_and_closed_dates(self):
        package = ActivityPackage(
            name="Season",
            price1=100,
            validity_start_date="2025-05-01",
            validity_end_date="2025-05-31",
            specific_closed_dates=["2025-05-10"],
        )
        assert package.unavailable_reason(date(2025, 4, 30)) == "before validity start"
        assert package.unavailable_reason(date(2025, 6, 1)) == "after validity end"
        assert package.unavailable_reason(date(2025, 5, 10)) == "closed on this date"
        assert package.is_operational(date(2025, 5, 11))

    def test_weekday_out_of_range(self):
        with pytest.raises(ValidationError):
            ActivityPackage(name="Bad", price1=1, closed_weekdays=[7])


class TestTripData:
    def test_travelers_generated_from_pax(self):
        trip = TripData.model_validate(make_trip({}))
        assert [t.id for t in trip.travelers] == ["A1", "A2", "C1"]
        assert trip.travelers[2].label == "Child 1"
        assert trip.pax.currency == "THB"

    def test_items_parsed_by_type(self):
        trip = TripData.model_validate(
            make_trip(
                {
                    2: [{"type": "hotel", "day": 2, "name": "Stay", "checkout_day": 3}],
                    1: [{"type": "meal", "day": 1, "name": "Lunch", "adult_meal_price": 10}],
                }
            )
        )
        items = list(trip.iter_items())
        assert [i.type for i in items] == ["meal", "hotel"]
        assert isinstance(items[1], HotelItem)
        assert trip.settings.date_of_day(2) == date(2025, 4, 15)

    def test_day_outside_trip_rejected(self):
        with pytest.raises(ValidationError):
            TripData.model_validate(
                make_trip({4: [{"type": "meal", "day": 4, "name": "Late"}]})
            )

    def test_item_day_must_match_its_day(self):
        with pytest.raises(ValidationError):
            TripData.model_validate(
                make_trip({1: [{"type": "meal", "day": 2, "name": "Lunch"}]})
            )

    def test_duplicate_traveler_ids_rejected(self):
        payload = make_trip({})
        payload["travelers"] = [
            {"id": "A1", "label": "Adult 1", "type": "adult"},
            {"id": "A1", "label": "Adult 2", "type": "adult"},
        ]
        with pytest.raises(ValidationError):
            TripData.model_validate(payload)

    def test_round_trips_through_json(self):
        trip = TripData.model_validate(
            make_trip({1: [{"type": "misc", "day": 1, "name": "Tips", "unit_cost": 5}]})
        )
        again = TripData.model_validate_json(trip.model_dump_json())
        assert again == trip


def test_document_update_needs_a_field():
    with pytest.raises(ValidationError):
        DocumentUpdateIn()
    assert DocumentUpdateIn(body="x").title is None


def test_ai_inputs_validated():
    with pytest.raises(ValidationError):
        DescribeImageIn(image_data_uri="https://example.com/cat.png")
    assert DescribeImageIn(image_data_uri="data:image/png;base64,iVBORw0KGgo=")
    with pytest.raises(ValidationError):
        ExtractContractDataIn(contract_text="too short")
