"""
Store registry.

An explicit registry owned by whichever composition root creates stores
(the HTTP app, a test, a script). Stores are looked up by id or by name.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from .bridge import EventBridge
from .exceptions import StoreExistsError
from .models import BridgeEventType
from .store import Store

logger = logging.getLogger(__name__)

RegistryEvent = Literal["register", "unregister"]


class StoreRegistryEntry(BaseModel):
    """A registered store."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    name: str
    store: Store
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


RegistryListener = Callable[[RegistryEvent, StoreRegistryEntry], None]


class StoreRegistry:
    """Live stores keyed by id."""

    def __init__(self, bridge: Optional[EventBridge] = None, unique_names: bool = False):
        self.bridge = bridge or EventBridge()
        self.unique_names = unique_names
        self._stores: dict[str, StoreRegistryEntry] = {}
        self._listeners: list[RegistryListener] = []

    def register(self, store: Store) -> StoreRegistryEntry:
        """
        Register a store.

        Raises:
            StoreExistsError: If ``unique_names`` is set and the name is taken
        """
        if self.unique_names and self.get_by_name(store.name) is not None:
            raise StoreExistsError(store.name)

        entry = StoreRegistryEntry(id=store.id, name=store.name, store=store)
        self._stores[store.id] = entry
        logger.info("Registered store %s (%s)", store.name, store.id)
        self._notify("register", entry)
        self.bridge.emit(BridgeEventType.STORE_REGISTER, store.id, {"name": store.name})
        return entry

    def unregister(self, store_id: str) -> None:
        entry = self._stores.pop(store_id, None)
        if entry is None:
            return
        logger.info("Unregistered store %s (%s)", entry.name, entry.id)
        self._notify("unregister", entry)
        self.bridge.emit(BridgeEventType.STORE_UNREGISTER, entry.id, {"name": entry.name})

    def get(self, store_id: str) -> Optional[StoreRegistryEntry]:
        return self._stores.get(store_id)

    def get_by_name(self, name: str) -> Optional[StoreRegistryEntry]:
        for entry in self._stores.values():
            if entry.name == name:
                return entry
        return None

    def get_all(self) -> list[StoreRegistryEntry]:
        return list(self._stores.values())

    def subscribe(self, listener: RegistryListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def clear(self) -> None:
        self._stores.clear()

    @property
    def size(self) -> int:
        return len(self._stores)

    def _notify(self, event: RegistryEvent, entry: StoreRegistryEntry) -> None:
        for listener in list(self._listeners):
            listener(event, entry)
