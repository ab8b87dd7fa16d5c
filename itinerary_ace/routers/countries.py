from __future__ import annotations

import sqlite3
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from itinerary_ace.db.dal import Database
from itinerary_ace.models.country import CountryIn, CountryOut
from itinerary_ace.services.currency_registry import CurrencyRegistry

from .deps import get_db, get_registry

"""Country endpoints.

A country's default currency must be registered; a country still named by a
province cannot be deleted.
"""

router = APIRouter(prefix="/countries", tags=["countries"])


def _row_to_country(row: dict) -> CountryOut:
    return CountryOut(
        id=int(row["id"]), name=row["name"], default_currency=row["default_currency"]
    )


def _check_currency(payload: CountryIn, registry: CurrencyRegistry) -> None:
    if not registry.is_known(payload.default_currency):
        raise HTTPException(
            status_code=400,
            detail=f'currency "{payload.default_currency}" is not registered',
        )


@router.get("/", response_model=List[CountryOut], summary="List countries")
async def list_countries(db: Database = Depends(get_db)):
    return [_row_to_country(r) for r in db.list_countries()]


@router.get("/{country_id}", response_model=CountryOut, summary="Get country")
async def get_country(country_id: int, db: Database = Depends(get_db)):
    row = db.get_country(country_id)
    if not row:
        raise HTTPException(status_code=404, detail="country not found")
    return _row_to_country(row)


@router.post(
    "/",
    response_model=CountryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create country",
)
async def create_country(
    payload: CountryIn,
    db: Database = Depends(get_db),
    registry: CurrencyRegistry = Depends(get_registry),
):
    _check_currency(payload, registry)
    try:
        country_id = db.create_country(payload.name, payload.default_currency)
    except sqlite3.IntegrityError as exc:
        raise HTTPException(
            status_code=409, detail=f'country "{payload.name}" already exists'
        ) from exc
    row = db.get_country(country_id)
    if not row:
        raise HTTPException(status_code=500, detail="country not found after creation")
    return _row_to_country(row)


@router.put("/{country_id}", response_model=CountryOut, summary="Update country")
async def update_country(
    country_id: int,
    payload: CountryIn,
    db: Database = Depends(get_db),
    registry: CurrencyRegistry = Depends(get_registry),
):
    _check_currency(payload, registry)
    try:
        updated = db.update_country(country_id, payload.name, payload.default_currency)
    except sqlite3.IntegrityError as exc:
        raise HTTPException(
            status_code=409, detail=f'country "{payload.name}" already exists'
        ) from exc
    if not updated:
        raise HTTPException(status_code=404, detail="country not found")
    row = db.get_country(country_id)
    if not row:
        raise HTTPException(status_code=404, detail="country not found")
    return _row_to_country(row)


@router.delete("/{country_id}", summary="Delete country")
async def delete_country(country_id: int, db: Database = Depends(get_db)):
    row = db.get_country(country_id)
    if not row:
        raise HTTPException(status_code=404, detail="country not found")
    in_use = db.count_provinces_in_country(row["name"])
    if in_use:
        raise HTTPException(
            status_code=409,
            detail=f'country "{row["name"]}" is used by {in_use} province(s)',
        )
    db.delete_country(country_id)
    return {"status": "deleted", "id": country_id}
