"""
Snapshot export/import.

Captures the data state of stores as plain dicts (or JSON text) and writes
it back through ``set_state(..., replace=True)``, so imports are versioned
and logged like any other mutation. Durable storage of snapshots is left
to the caller.
"""

import logging
from typing import Any, Optional

from .exceptions import SnapshotVersionError
from .models import SNAPSHOT_VERSION, SnapshotData
from .registry import StoreRegistry
from .store import Store

logger = logging.getLogger(__name__)


def export_store(store: Store) -> dict[str, Any]:
    """Deep copy of a store's data state."""
    return store.get_data_state()


def export_all(registry: StoreRegistry) -> SnapshotData:
    """Data state of every registered store, keyed by store name."""
    return SnapshotData(
        version=SNAPSHOT_VERSION,
        stores={entry.name: entry.store.get_data_state() for entry in registry.get_all()},
    )


def import_store(store: Store, data: dict[str, Any]) -> None:
    """Replace a store's data state."""
    store.set_state(data, replace=True)


def import_all(registry: StoreRegistry, data: SnapshotData) -> list[str]:
    """
    Import a snapshot into the registered stores.

    Stores named in the snapshot but not registered are skipped.

    Returns:
        Names of the stores that were updated

    Raises:
        SnapshotVersionError: If the snapshot version is not supported
    """
    if data.version != SNAPSHOT_VERSION:
        raise SnapshotVersionError(data.version)

    imported: list[str] = []
    for name, store_data in data.stores.items():
        entry = registry.get_by_name(name)
        if entry is None:
            logger.warning("Snapshot references unknown store %s, skipping", name)
            continue
        import_store(entry.store, store_data)
        imported.append(name)
    return imported


def stringify(
    registry: Optional[StoreRegistry] = None,
    data: Optional[SnapshotData] = None
) -> str:
    """Serialize a snapshot (or a fresh export of ``registry``) to JSON."""
    if data is None:
        if registry is None:
            raise ValueError("Either registry or data is required")
        data = export_all(registry)
    return data.model_dump_json(indent=2)


def parse(text: str) -> SnapshotData:
    """Parse snapshot JSON."""
    return SnapshotData.model_validate_json(text)
