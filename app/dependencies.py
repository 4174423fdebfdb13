"""Shared FastAPI dependencies."""

from fastapi import Depends, HTTPException, Request, status

from src.state_store import Store, StoreRegistry


def get_registry(request: Request) -> StoreRegistry:
    """The registry owned by the running application."""
    return request.app.state.registry


def get_store(name: str, registry: StoreRegistry = Depends(get_registry)) -> Store:
    """Resolve a store by name or fail with 404."""
    entry = registry.get_by_name(name)
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f'Store "{name}" not found'
        )
    return entry.store
