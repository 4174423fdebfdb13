"""
Snapshot endpoints.

Export the data of every registered store, or import a previously
exported snapshot back into the stores that share its names.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from app.dependencies import get_registry
from src.state_store import SnapshotData, SnapshotVersionError, StoreRegistry, snapshot

logger = logging.getLogger(__name__)

router = APIRouter()


class ImportResponse(BaseModel):
    """Result of a snapshot import."""

    imported: list[str] = Field(description="Stores whose data was replaced")


@router.get("", response_model=SnapshotData)
async def export_snapshot(
    registry: StoreRegistry = Depends(get_registry)
) -> SnapshotData:
    """Export the data of every registered store."""
    return snapshot.export_all(registry)


@router.post("", response_model=ImportResponse)
async def import_snapshot(
    data: SnapshotData,
    registry: StoreRegistry = Depends(get_registry)
) -> ImportResponse:
    """Import a snapshot; unknown store names are skipped."""
    try:
        imported = snapshot.import_all(registry, data)
    except SnapshotVersionError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )

    logger.info("Imported snapshot into %d stores", len(imported))
    return ImportResponse(imported=imported)
