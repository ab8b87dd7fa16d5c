from __future__ import annotations

import json
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from itinerary_ace.db.dal import Database
from itinerary_ace.models.itinerary import (
    CostSummary,
    ItineraryIn,
    ItineraryOut,
    ItinerarySummaryOut,
    TripData,
)
from itinerary_ace.models.pricing import ServicePriceIn
from itinerary_ace.services.calculation import calculate_all_costs
from itinerary_ace.services.currency_registry import CurrencyRegistry
from itinerary_ace.services.pricing_resolution import CalculationError
from itinerary_ace.services.rate_service import build_rate_table

from .deps import get_db, get_registry
from .pricing import row_to_service_price

router = APIRouter(prefix="/itineraries", tags=["itineraries"])


def _row_to_itinerary(row: dict) -> ItineraryOut:
    return ItineraryOut(
        id=int(row["id"]),
        name=row["name"],
        trip=TripData.model_validate_json(row["trip"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_summary(row: dict) -> ItinerarySummaryOut:
    trip = json.loads(row["trip"])
    return ItinerarySummaryOut(
        id=int(row["id"]),
        name=row["name"],
        num_days=trip["settings"]["num_days"],
        start_date=trip["settings"]["start_date"],
        currency=trip["pax"]["currency"],
        updated_at=row["updated_at"],
    )


def _check_currency(trip: TripData, registry: CurrencyRegistry) -> None:
    if not registry.is_known(trip.pax.currency):
        raise HTTPException(
            status_code=400, detail=f'currency "{trip.pax.currency}" is not registered'
        )


def summarize_trip(db: Database, trip: TripData) -> CostSummary:
    """Load referenced price records and the rate table, then price the trip."""
    ids = {
        item.selected_service_price_id
        for item in trip.iter_items()
        if item.selected_service_price_id is not None
    }
    prices: Dict[int, ServicePriceIn] = {}
    for row in db.get_service_prices_by_ids(ids):
        record = row_to_service_price(row)
        prices[record.id] = record
    try:
        return calculate_all_costs(trip, prices, build_rate_table(db))
    except CalculationError as exc:
        raise HTTPException(
            status_code=422, detail={"message": str(exc), "item_id": exc.item_id}
        ) from exc


@router.get("/", response_model=List[ItinerarySummaryOut], summary="List itineraries")
async def list_itineraries(db: Database = Depends(get_db)):
    return [_row_to_summary(r) for r in db.list_itineraries()]


@router.post(
    "/",
    response_model=ItineraryOut,
    status_code=status.HTTP_201_CREATED,
    summary="Save itinerary",
)
async def create_itinerary(
    payload: ItineraryIn,
    db: Database = Depends(get_db),
    registry: CurrencyRegistry = Depends(get_registry),
):
    _check_currency(payload.trip, registry)
    itinerary_id = db.create_itinerary(payload.name, payload.trip.model_dump_json())
    row = db.get_itinerary(itinerary_id)
    if not row:
        raise HTTPException(status_code=500, detail="itinerary not found after creation")
    return _row_to_itinerary(row)


@router.post(
    "/calculate",
    response_model=CostSummary,
    summary="Price an itinerary without saving it",
)
async def calculate_itinerary(trip: TripData, db: Database = Depends(get_db)):
    return summarize_trip(db, trip)


@router.get("/{itinerary_id}", response_model=ItineraryOut, summary="Get itinerary")
async def get_itinerary(itinerary_id: int, db: Database = Depends(get_db)):
    row = db.get_itinerary(itinerary_id)
    if not row:
        raise HTTPException(status_code=404, detail="itinerary not found")
    return _row_to_itinerary(row)


@router.put("/{itinerary_id}", response_model=ItineraryOut, summary="Update itinerary")
async def update_itinerary(
    itinerary_id: int,
    payload: ItineraryIn,
    db: Database = Depends(get_db),
    registry: CurrencyRegistry = Depends(get_registry),
):
    _check_currency(payload.trip, registry)
    if not db.update_itinerary(itinerary_id, payload.name, payload.trip.model_dump_json()):
        raise HTTPException(status_code=404, detail="itinerary not found")
    row = db.get_itinerary(itinerary_id)
    if not row:
        raise HTTPException(status_code=404, detail="itinerary not found")
    return _row_to_itinerary(row)


@router.delete("/{itinerary_id}", summary="Delete itinerary")
async def delete_itinerary(itinerary_id: int, db: Database = Depends(get_db)):
    if not db.delete_itinerary(itinerary_id):
        raise HTTPException(status_code=404, detail="itinerary not found")
    return {"status": "deleted", "id": itinerary_id}


@router.get(
    "/{itinerary_id}/costs",
    response_model=CostSummary,
    summary="Cost summary of a saved itinerary",
)
async def itinerary_costs(itinerary_id: int, db: Database = Depends(get_db)):
    row = db.get_itinerary(itinerary_id)
    if not row:
        raise HTTPException(status_code=404, detail="itinerary not found")
    return summarize_trip(db, TripData.model_validate_json(row["trip"]))
