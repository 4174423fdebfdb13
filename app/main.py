"""FastAPI application entry point."""

import logging

from fastapi import FastAPI

from app import __version__
from app.api import health, snapshots, stores
from app.config import settings
from src.state_store import StoreRegistry

logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(
    title="State Branch",
    description="Undo/redo, branching and action logging for in-memory state stores",
    version=__version__,
    debug=settings.debug,
)

app.state.registry = StoreRegistry(unique_names=True)

app.include_router(health.router, tags=["health"])
app.include_router(stores.router, prefix="/stores", tags=["stores"])
app.include_router(snapshots.router, prefix="/snapshot", tags=["snapshot"])
