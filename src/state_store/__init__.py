"""
State Store

Host store wiring the timeline, branch manager and action inspector
around a plain mutable-state container, plus registry, event bridge,
snapshot and mock helpers.
"""

__version__ = "0.1.0"

from .models import (
    StoreConfig,
    BridgeEvent,
    BridgeEventType,
    SnapshotData,
    SNAPSHOT_VERSION,
)
from .exceptions import StoreError, StoreExistsError, SnapshotVersionError
from .bridge import EventBridge
from .store import Store, TemporalApi, create_store, separate_state_and_actions
from .registry import StoreRegistry, StoreRegistryEntry
from . import mock, snapshot

__all__ = [
    "__version__",
    "StoreConfig",
    "BridgeEvent",
    "BridgeEventType",
    "SnapshotData",
    "SNAPSHOT_VERSION",
    "StoreError",
    "StoreExistsError",
    "SnapshotVersionError",
    "EventBridge",
    "Store",
    "TemporalApi",
    "create_store",
    "separate_state_and_actions",
    "StoreRegistry",
    "StoreRegistryEntry",
    "mock",
    "snapshot",
]
