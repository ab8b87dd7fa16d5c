import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import errors
from .core.config import Settings, get_settings
from .core.logging import init_logging, request_context_middleware
from .db.dal import Database
from .db.migrate import apply_migrations
from .db.seed import seed_demo_service_prices
from .routers import (
    ai,
    countries,
    currencies,
    documents,
    health,
    itineraries,
    pricing,
    provinces,
    rates,
)


def create_app(settings_override: Optional[Settings] = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    """
    settings = settings_override or get_settings()
    if settings_override is not None and settings.db_path is None:
        settings.init_post_load()
    init_logging(debug=settings.debug)

    # Ensure database schema (idempotent) so test-injected fresh DBs have tables
    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
        if settings.seed_demo_data:
            seed_demo_service_prices(Database(settings.db_path))  # type: ignore[arg-type]
    except Exception:
        logging.getLogger("itinerary_ace").exception(
            "failed to prepare database on startup"
        )
        raise

    app = FastAPI(title=settings.app_name, debug=settings.debug, version=settings.version)
    app.state.settings = settings

    app.middleware("http")(request_context_middleware)

    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    app.include_router(health.router)
    app.include_router(currencies.router)
    app.include_router(rates.router)
    app.include_router(countries.router)
    app.include_router(provinces.router)
    app.include_router(pricing.router)
    app.include_router(itineraries.router)
    app.include_router(documents.router)
    app.include_router(ai.router)

    @app.get("/")
    async def root():
        return {"message": "Itinerary Ace pricing admin API", "version": settings.version}

    return app


app = create_app()
