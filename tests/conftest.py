from datetime import date

import pytest
from fastapi.testclient import TestClient

from itinerary_ace.core.config import Settings
from itinerary_ace.db.dal import Database
from itinerary_ace.main import create_app
from itinerary_ace.services.rates.conversion import RateTable


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        data_dir=tmp_path,
        db_filename="test.sqlite3",
        seed_demo_data=False,
        debug=False,
        exchange_rate_provider="static",
        exchangerate_api_key=None,
        openrouter_api_key=None,
        openrouter_http_referer=None,
        openrouter_x_title=None,
    )
    values.update(overrides)
    settings = Settings(**values)
    settings.init_post_load()
    return settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings_override=settings)) as c:
        yield c


@pytest.fixture
def db(client, settings) -> Database:
    return Database(settings.db_path)


@pytest.fixture
def rate_table() -> RateTable:
    return RateTable(
        [("USD", "THB", 36.5), ("USD", "EUR", 0.92), ("USD", "JPY", 157.0)],
        known_currencies={"USD", "EUR", "GBP", "THB", "JPY"},
    )


def make_trip(days, num_days=3, adults=2, children=1, currency="THB", **settings):
    """Build a TripData payload dict; ``days`` maps day number to item dicts."""
    trip_settings = {"num_days": num_days, "start_date": date(2025, 4, 14).isoformat()}
    trip_settings.update(settings)
    return {
        "settings": trip_settings,
        "pax": {"adults": adults, "children": children, "currency": currency},
        "days": {str(day): {"items": items} for day, items in days.items()},
    }
