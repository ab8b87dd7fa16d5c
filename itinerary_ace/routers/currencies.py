from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from itinerary_ace.models.currency import CustomCurrencyIn, ManagedCurrency
from itinerary_ace.services.currency_registry import (
    CurrencyExistsError,
    CurrencyInUseError,
    CurrencyNotFoundError,
    CurrencyRegistry,
    SystemCurrencyError,
)

from .deps import get_registry

"""Currency registry endpoints.

System currencies are fixed; custom codes can be added and removed while no
service price quotes in them.
"""

router = APIRouter(prefix="/currencies", tags=["currencies"])


@router.get("/", response_model=List[ManagedCurrency], summary="List managed currencies")
async def list_currencies(registry: CurrencyRegistry = Depends(get_registry)):
    return registry.list_managed()


@router.post(
    "/",
    response_model=ManagedCurrency,
    status_code=status.HTTP_201_CREATED,
    summary="Add a custom currency",
)
async def add_currency(
    payload: CustomCurrencyIn, registry: CurrencyRegistry = Depends(get_registry)
):
    try:
        return registry.add_custom(payload.code)
    except CurrencyExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/{code}", summary="Delete a custom currency")
async def delete_currency(code: str, registry: CurrencyRegistry = Depends(get_registry)):
    try:
        registry.delete_custom(code)
    except SystemCurrencyError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except CurrencyNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except CurrencyInUseError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return {"status": "deleted", "code": code.strip().upper()}
