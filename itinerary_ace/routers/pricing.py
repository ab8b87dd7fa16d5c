from __future__ import annotations

import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from itinerary_ace.db.dal import Database
from itinerary_ace.models.pricing import Category, ServicePriceIn, ServicePriceOut
from itinerary_ace.services.currency_registry import CurrencyRegistry

from .deps import get_db, get_registry

"""Service price endpoints.

Records keep their nested structures (vehicle options, room types, packages)
in a JSON payload; the currency must be registered and the province, when
given, must exist at the time a record is written.
"""

logger = logging.getLogger("itinerary_ace.pricing")

router = APIRouter(prefix="/service-prices", tags=["service-prices"])


def row_to_service_price(row: dict) -> ServicePriceOut:
    payload = json.loads(row["payload"])
    payload.update(
        id=int(row["id"]), created_at=row["created_at"], updated_at=row["updated_at"]
    )
    return ServicePriceOut.model_validate(payload)


def _check_references(
    payload: ServicePriceIn, db: Database, registry: CurrencyRegistry
) -> ServicePriceIn:
    if not registry.is_known(payload.currency):
        raise HTTPException(
            status_code=400, detail=f'currency "{payload.currency}" is not registered'
        )
    if payload.province:
        row = db.get_province_by_name(payload.province)
        if not row:
            raise HTTPException(
                status_code=400, detail=f'province "{payload.province}" does not exist'
            )
        # Store the canonical spelling so filters and renames stay consistent.
        payload = payload.model_copy(update={"province": row["name"]})
    return payload


@router.get("/", response_model=List[ServicePriceOut], summary="List service prices")
async def list_service_prices(
    category: Optional[Category] = Query(None, description="Service category"),
    sub_category: Optional[str] = Query(
        None,
        description="Sub-category; for transfers 'ticket' or 'vehicle' filter on the mode",
    ),
    province: Optional[str] = Query(None, description="Province name"),
    db: Database = Depends(get_db),
):
    rows = db.list_service_prices(
        category=category, sub_category=sub_category, province=province
    )
    return [row_to_service_price(r) for r in rows]


@router.get("/{price_id}", response_model=ServicePriceOut, summary="Get service price")
async def get_service_price(price_id: int, db: Database = Depends(get_db)):
    row = db.get_service_price(price_id)
    if not row:
        raise HTTPException(status_code=404, detail="service price not found")
    return row_to_service_price(row)


@router.post(
    "/",
    response_model=ServicePriceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create service price",
)
async def create_service_price(
    payload: ServicePriceIn,
    db: Database = Depends(get_db),
    registry: CurrencyRegistry = Depends(get_registry),
):
    payload = _check_references(payload, db, registry)
    price_id = db.create_service_price(payload)
    row = db.get_service_price(price_id)
    if not row:
        raise HTTPException(status_code=500, detail="service price not found after creation")
    logger.info("service price %s created (%s)", price_id, payload.category)
    return row_to_service_price(row)


@router.put("/{price_id}", response_model=ServicePriceOut, summary="Update service price")
async def update_service_price(
    price_id: int,
    payload: ServicePriceIn,
    db: Database = Depends(get_db),
    registry: CurrencyRegistry = Depends(get_registry),
):
    if not db.get_service_price(price_id):
        raise HTTPException(status_code=404, detail="service price not found")
    payload = _check_references(payload, db, registry)
    db.update_service_price(price_id, payload)
    row = db.get_service_price(price_id)
    if not row:
        raise HTTPException(status_code=404, detail="service price not found")
    return row_to_service_price(row)


@router.delete("/{price_id}", summary="Delete service price")
async def delete_service_price(price_id: int, db: Database = Depends(get_db)):
    if not db.delete_service_price(price_id):
        raise HTTPException(status_code=404, detail="service price not found")
    return {"status": "deleted", "id": price_id}
