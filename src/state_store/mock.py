"""
Mock data injection for previews and tests.

All writes go through ``set_state(..., replace=True)`` and are therefore
recorded by the timeline and the inspector.
"""

from typing import Any

from .registry import StoreRegistry
from .store import Store


def inject(store: Store, data: dict[str, Any]) -> None:
    """Merge mock data over the store's current data."""
    store.set_state({**store.get_data_state(), **data}, replace=True)


def replace(store: Store, data: dict[str, Any]) -> None:
    """Replace the store's data with mock data."""
    store.set_state(data, replace=True)


def inject_all(registry: StoreRegistry, data: dict[str, dict[str, Any]]) -> list[str]:
    """
    Inject mock data into several stores by name.

    Returns:
        Names of the stores that were updated (unknown names are skipped)
    """
    updated: list[str] = []
    for name, store_data in data.items():
        entry = registry.get_by_name(name)
        if entry is not None:
            inject(entry.store, store_data)
            updated.append(name)
    return updated


def reset(store: Store) -> None:
    """Return the store to the oldest retained state of its timeline."""
    store.temporal.reset()
