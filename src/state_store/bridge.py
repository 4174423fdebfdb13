"""
Event bridge between stores and inspection tooling.

An explicit object handed to stores and registries; there is no
process-wide instance.
"""

from collections import defaultdict
from typing import Any, Callable, Optional

from .models import BridgeEvent, BridgeEventType

BridgeListener = Callable[[BridgeEvent], None]


class EventBridge:
    """Typed publish/subscribe hub."""

    def __init__(self):
        self._listeners: dict[BridgeEventType, list[BridgeListener]] = defaultdict(list)
        self._global_listeners: list[BridgeListener] = []

    def emit(
        self,
        event_type: BridgeEventType,
        store_id: Optional[str] = None,
        payload: Any = None
    ) -> None:
        event = BridgeEvent(type=event_type, store_id=store_id, payload=payload)
        for listener in list(self._listeners.get(event_type, ())):
            listener(event)
        for listener in list(self._global_listeners):
            listener(event)

    def on(self, event_type: BridgeEventType, listener: BridgeListener) -> Callable[[], None]:
        """Listen to one event type. Returns an unsubscribe function."""
        self._listeners[event_type].append(listener)
        return lambda: self.off(event_type, listener)

    def on_any(self, listener: BridgeListener) -> Callable[[], None]:
        """Listen to every event. Returns an unsubscribe function."""
        self._global_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._global_listeners:
                self._global_listeners.remove(listener)

        return unsubscribe

    def off(self, event_type: BridgeEventType, listener: BridgeListener) -> None:
        listeners = self._listeners.get(event_type)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def remove_all(self) -> None:
        self._listeners.clear()
        self._global_listeners.clear()
