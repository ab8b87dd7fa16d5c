from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from itinerary_ace.core.config import Settings
from itinerary_ace.models.ai import (
    ContractDataOut,
    DescribeImageIn,
    DescribeImageOut,
    ExtractContractDataIn,
    ParseActivityTextIn,
    ParseActivityTextOut,
)
from itinerary_ace.services.ai.activity_parsing import parse_activity_text
from itinerary_ace.services.ai.contract_extraction import extract_contract_data
from itinerary_ace.services.ai.describe_image import describe_image
from itinerary_ace.services.ai.openrouter import AIConfigError, AIResponseError

from .deps import get_app_settings

"""Hosted-LLM helper endpoints.

Handlers are plain functions so the blocking upstream call runs in the
threadpool instead of the event loop.
"""

router = APIRouter(prefix="/ai", tags=["ai"])


def _translate(exc: Exception) -> HTTPException:
    if isinstance(exc, AIConfigError):
        return HTTPException(status_code=503, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))


@router.post("/describe-image", response_model=DescribeImageOut, summary="Describe an image")
def describe_image_endpoint(
    payload: DescribeImageIn, settings: Settings = Depends(get_app_settings)
):
    try:
        return describe_image(settings, payload.image_data_uri)
    except (AIConfigError, AIResponseError) as exc:
        raise _translate(exc) from exc


@router.post(
    "/extract-contract-data",
    response_model=ContractDataOut,
    summary="Draft a service price from contract text",
)
def extract_contract_data_endpoint(
    payload: ExtractContractDataIn, settings: Settings = Depends(get_app_settings)
):
    try:
        return extract_contract_data(settings, payload.contract_text)
    except (AIConfigError, AIResponseError) as exc:
        raise _translate(exc) from exc


@router.post(
    "/parse-activity-text",
    response_model=ParseActivityTextOut,
    summary="Draft activity packages from a description",
)
def parse_activity_text_endpoint(
    payload: ParseActivityTextIn, settings: Settings = Depends(get_app_settings)
):
    try:
        return parse_activity_text(settings, payload.activity_text)
    except (AIConfigError, AIResponseError) as exc:
        raise _translate(exc) from exc
