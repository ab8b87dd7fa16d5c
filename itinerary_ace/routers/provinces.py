from __future__ import annotations

import sqlite3
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from itinerary_ace.db.dal import Database
from itinerary_ace.models.province import ProvinceIn, ProvinceOut

from .deps import get_db

router = APIRouter(prefix="/provinces", tags=["provinces"])


def _row_to_province(row: dict) -> ProvinceOut:
    return ProvinceOut(id=int(row["id"]), name=row["name"], country=row.get("country"))


def _check_country(payload: ProvinceIn, db: Database) -> ProvinceIn:
    if not payload.country:
        return payload
    row = db.get_country_by_name(payload.country)
    if not row:
        raise HTTPException(
            status_code=400, detail=f'country "{payload.country}" does not exist'
        )
    return payload.model_copy(update={"country": row["name"]})


@router.get("/", response_model=List[ProvinceOut], summary="List provinces")
async def list_provinces(db: Database = Depends(get_db)):
    return [_row_to_province(r) for r in db.list_provinces()]


@router.get("/{province_id}", response_model=ProvinceOut, summary="Get province")
async def get_province(province_id: int, db: Database = Depends(get_db)):
    row = db.get_province(province_id)
    if not row:
        raise HTTPException(status_code=404, detail="province not found")
    return _row_to_province(row)


@router.post(
    "/",
    response_model=ProvinceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create province",
)
async def create_province(payload: ProvinceIn, db: Database = Depends(get_db)):
    payload = _check_country(payload, db)
    try:
        province_id = db.create_province(payload.name, payload.country)
    except sqlite3.IntegrityError as exc:
        raise HTTPException(
            status_code=409, detail=f'province "{payload.name}" already exists'
        ) from exc
    row = db.get_province(province_id)
    if not row:
        raise HTTPException(status_code=500, detail="province not found after creation")
    return _row_to_province(row)


@router.put("/{province_id}", response_model=ProvinceOut, summary="Update province")
async def update_province(
    province_id: int, payload: ProvinceIn, db: Database = Depends(get_db)
):
    payload = _check_country(payload, db)
    try:
        updated = db.update_province(province_id, payload.name, payload.country)
    except sqlite3.IntegrityError as exc:
        raise HTTPException(
            status_code=409, detail=f'province "{payload.name}" already exists'
        ) from exc
    if not updated:
        raise HTTPException(status_code=404, detail="province not found")
    row = db.get_province(province_id)
    if not row:
        raise HTTPException(status_code=404, detail="province not found")
    return _row_to_province(row)


@router.delete("/{province_id}", summary="Delete province")
async def delete_province(province_id: int, db: Database = Depends(get_db)):
    row = db.get_province(province_id)
    if not row:
        raise HTTPException(status_code=404, detail="province not found")
    in_use = db.count_service_prices_in_province(row["name"])
    if in_use:
        raise HTTPException(
            status_code=409,
            detail=f'province "{row["name"]}" is used by {in_use} service price(s)',
        )
    db.delete_province(province_id)
    return {"status": "deleted", "id": province_id}
