from fastapi import APIRouter, Depends

from itinerary_ace.core.config import Settings
from itinerary_ace.db.dal import Database
from itinerary_ace.db.migrate import SCHEMA_VERSION_KEY

from .deps import get_app_settings, get_db

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness and schema check")
async def health(
    settings: Settings = Depends(get_app_settings), db: Database = Depends(get_db)
):
    version = db.get_metadata(SCHEMA_VERSION_KEY)
    return {
        "status": "ok",
        "version": settings.version,
        "schema_version": int(version) if version else None,
    }
