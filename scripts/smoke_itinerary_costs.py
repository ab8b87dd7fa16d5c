import json
import os
import tempfile

from fastapi.testclient import TestClient

from itinerary_ace.core.config import Settings
from itinerary_ace.main import create_app

"""Smoke test for the itinerary cost calculation.

Boots the API over a throwaway database with the demo price list, prices a
two-day Bangkok trip in THB and again in USD, and prints both summaries.
"""


def _trip(currency: str, prices: dict) -> dict:
    transfer = prices["Suvarnabhumi Airport (BKK) to Bangkok City Hotel"]
    hotel = prices["Riverside Luxury Hotel"]
    palace = prices["Grand Palace & Wat Phra Kaew Entrance"]
    room_type = hotel["hotel_details"]["room_types"][0]
    return {
        "settings": {"num_days": 2, "start_date": "2025-04-14"},
        "pax": {"adults": 2, "children": 1, "currency": currency},
        "days": {
            "1": {
                "items": [
                    {
                        "type": "transfer",
                        "day": 1,
                        "name": "Airport pickup",
                        "mode": "vehicle",
                        "selected_service_price_id": transfer["id"],
                        "selected_vehicle_option_id": transfer["vehicle_options"][1]["id"],
                    },
                    {
                        "type": "hotel",
                        "day": 1,
                        "name": hotel["name"],
                        "checkout_day": 2,
                        "selected_service_price_id": hotel["id"],
                        "selected_rooms": [
                            {
                                "room_type_definition_id": room_type["id"],
                                "extra_beds": 1,
                                "assigned_traveler_ids": ["A1", "A2"],
                            }
                        ],
                    },
                ]
            },
            "2": {
                "items": [
                    {
                        "type": "activity",
                        "day": 2,
                        "name": palace["name"],
                        "selected_service_price_id": palace["id"],
                    }
                ]
            },
        },
    }


def run():
    with tempfile.TemporaryDirectory() as d:
        settings = Settings(db_path=os.path.join(d, "smoke.db"), seed_demo_data=True)
        client = TestClient(create_app(settings_override=settings))
        prices = {p["name"]: p for p in client.get("/service-prices/").json()}

        thb = client.post("/itineraries/calculate", json=_trip("THB", prices))
        usd = client.post("/itineraries/calculate", json=_trip("USD", prices))
        print(
            json.dumps(
                {"thb_summary": thb.json(), "usd_summary": usd.json()},
                indent=2,
            )
        )
        assert thb.status_code == 200, thb.text
        assert usd.status_code == 200, usd.text


if __name__ == "__main__":
    run()
