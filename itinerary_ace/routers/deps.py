"""Request-scoped dependencies shared by the routers.

Settings come from ``app.state`` so an app built with a settings override
(tests, scripts) never touches the process-wide cached settings.
"""

from fastapi import Depends, Request

from itinerary_ace.core.config import Settings, get_settings
from itinerary_ace.db.dal import Database
from itinerary_ace.services.currency_registry import CurrencyRegistry
from itinerary_ace.services.rate_service import build_rate_table
from itinerary_ace.services.rates.conversion import RateTable


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings or get_settings()


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return Database(settings.db_path)


def get_registry(db: Database = Depends(get_db)) -> CurrencyRegistry:
    return CurrencyRegistry(db)


def get_rate_table(db: Database = Depends(get_db)) -> RateTable:
    return build_rate_table(db)
