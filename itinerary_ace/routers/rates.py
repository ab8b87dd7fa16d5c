from __future__ import annotations

import logging
import sqlite3
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from itinerary_ace.core.config import Settings
from itinerary_ace.db.dal import Database
from itinerary_ace.models.currency import (
    ConversionOut,
    ConversionRequest,
    ExchangeRateIn,
    ExchangeRateOut,
    ExchangeRateUpdateIn,
    MarkupIn,
    RateProviderIn,
    RateProviderOut,
    RateRefreshOut,
)
from itinerary_ace.services import app_settings
from itinerary_ace.services.currency_registry import CurrencyRegistry
from itinerary_ace.services.rate_service import refresh_rates
from itinerary_ace.services.rates.conversion import (
    MissingRateError,
    RateTable,
    UnknownCurrencyError,
)

from .deps import get_app_settings, get_db, get_rate_table, get_registry

"""Exchange rate endpoints.

    - CRUD on stored currency pairs (both codes must be known)
    - global conversion markup and rate provider override (metadata table)
    - ad hoc conversion through the current rate table
    - refresh of USD based pairs from the configured provider

Fixed paths are declared before ``/{rate_id}`` so they are not captured by it.
"""

logger = logging.getLogger("itinerary_ace.rates")

router = APIRouter(prefix="/exchange-rates", tags=["exchange-rates"])


def _require_known(registry: CurrencyRegistry, *codes: str) -> None:
    unknown = [c for c in codes if not registry.is_known(c)]
    if unknown:
        raise HTTPException(
            status_code=400, detail=f"unknown currency: {', '.join(unknown)}"
        )


@router.get("/", response_model=List[ExchangeRateOut], summary="List exchange rates")
async def list_rates(db: Database = Depends(get_db)):
    return [ExchangeRateOut(**r) for r in db.list_exchange_rates()]


@router.post(
    "/",
    response_model=ExchangeRateOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add an exchange rate pair",
)
async def add_rate(
    payload: ExchangeRateIn,
    db: Database = Depends(get_db),
    registry: CurrencyRegistry = Depends(get_registry),
):
    _require_known(registry, payload.from_currency, payload.to_currency)
    try:
        rate_id = db.insert_exchange_rate(
            payload.from_currency, payload.to_currency, payload.rate
        )
    except sqlite3.IntegrityError as exc:
        raise HTTPException(
            status_code=409,
            detail=f"rate {payload.from_currency}->{payload.to_currency} already exists",
        ) from exc
    row = db.get_exchange_rate(rate_id)
    if not row:
        raise HTTPException(status_code=500, detail="rate not found after creation")
    return ExchangeRateOut(**row)


@router.get("/markup", response_model=MarkupIn, summary="Get conversion markup")
async def get_markup(db: Database = Depends(get_db)):
    return MarkupIn(markup_percentage=app_settings.get_markup_percentage(db))


@router.put("/markup", response_model=MarkupIn, summary="Set conversion markup")
async def set_markup(payload: MarkupIn, db: Database = Depends(get_db)):
    app_settings.set_markup_percentage(db, payload.markup_percentage)
    logger.info("conversion markup set to %s%%", payload.markup_percentage)
    return MarkupIn(markup_percentage=app_settings.get_markup_percentage(db))


@router.get("/provider", response_model=RateProviderOut, summary="Get rate provider")
async def get_provider(
    db: Database = Depends(get_db), settings: Settings = Depends(get_app_settings)
):
    return RateProviderOut(
        provider=app_settings.get_effective_rate_provider(
            db, settings.exchange_rate_provider
        ),
        configured_default=settings.exchange_rate_provider,
        rates_fetched_at=app_settings.get_rates_fetched_at(db),
    )


@router.put("/provider", response_model=RateProviderOut, summary="Override rate provider")
async def set_provider(
    payload: RateProviderIn,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        app_settings.set_rate_provider(db, payload.provider)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return RateProviderOut(
        provider=payload.provider,
        configured_default=settings.exchange_rate_provider,
        rates_fetched_at=app_settings.get_rates_fetched_at(db),
    )


@router.post("/convert", response_model=ConversionOut, summary="Convert an amount")
async def convert(payload: ConversionRequest, table: RateTable = Depends(get_rate_table)):
    try:
        result = table.convert(payload.amount, payload.from_currency, payload.to_currency)
    except UnknownCurrencyError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except MissingRateError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ConversionOut(
        original_amount=result.original_amount,
        from_currency=result.from_currency,
        to_currency=result.to_currency,
        base_rate=result.details.base_rate,
        final_rate=result.details.final_rate,
        markup_applied=result.details.markup_applied,
        converted_amount=result.converted_amount,
    )


@router.post("/refresh", response_model=RateRefreshOut, summary="Refresh rates from provider")
def refresh(db: Database = Depends(get_db), settings: Settings = Depends(get_app_settings)):
    result = refresh_rates(db, settings)
    return RateRefreshOut(
        provider=result.provider,
        updated_pairs=result.updated_pairs,
        fetched_at=result.fetched_at,
    )


@router.put("/{rate_id}", response_model=ExchangeRateOut, summary="Update a rate")
async def update_rate(
    rate_id: int, payload: ExchangeRateUpdateIn, db: Database = Depends(get_db)
):
    if not db.update_exchange_rate(rate_id, payload.rate):
        raise HTTPException(status_code=404, detail="exchange rate not found")
    row = db.get_exchange_rate(rate_id)
    if not row:
        raise HTTPException(status_code=404, detail="exchange rate not found")
    return ExchangeRateOut(**row)


@router.delete("/{rate_id}", summary="Delete a rate")
async def delete_rate(rate_id: int, db: Database = Depends(get_db)):
    if not db.delete_exchange_rate(rate_id):
        raise HTTPException(status_code=404, detail="exchange rate not found")
    return {"status": "deleted", "id": rate_id}
