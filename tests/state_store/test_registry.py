"""Tests for the store registry and event bridge."""

import pytest
from src.state_store import (
    BridgeEventType,
    EventBridge,
    StoreExistsError,
    StoreRegistry,
    create_store,
)


@pytest.fixture
def registry():
    return StoreRegistry()


class TestStoreRegistry:
    """Tests for registering and finding stores."""

    def test_create_store_registers(self, registry):
        store = create_store({"count": 0}, {"name": "counter"}, registry=registry)
        assert registry.size == 1
        assert registry.get(store.id).store is store
        assert registry.get_by_name("counter").id == store.id

    def test_store_uses_registry_bridge(self, registry):
        store = create_store({"count": 0}, registry=registry)
        assert store.bridge is registry.bridge

    def test_unknown_lookups(self, registry):
        assert registry.get("nope") is None
        assert registry.get_by_name("nope") is None

    def test_unregister(self, registry):
        store = create_store({"count": 0}, registry=registry)
        registry.unregister(store.id)
        registry.unregister(store.id)
        assert registry.get_all() == []

    def test_unique_names(self):
        registry = StoreRegistry(unique_names=True)
        create_store({}, {"name": "dup"}, registry=registry)
        with pytest.raises(StoreExistsError):
            create_store({}, {"name": "dup"}, registry=registry)
        assert registry.size == 1

    def test_duplicate_names_allowed_by_default(self, registry):
        create_store({}, {"name": "dup"}, registry=registry)
        create_store({}, {"name": "dup"}, registry=registry)
        assert registry.size == 2

    def test_subscribe(self, registry):
        events = []
        registry.subscribe(lambda event, entry: events.append((event, entry.name)))
        store = create_store({}, {"name": "s"}, registry=registry)
        registry.unregister(store.id)
        assert events == [("register", "s"), ("unregister", "s")]

    def test_clear(self, registry):
        create_store({}, registry=registry)
        registry.clear()
        assert registry.size == 0


class TestEventBridge:
    """Tests for the typed publish/subscribe hub."""

    def test_typed_and_global_listeners(self):
        bridge = EventBridge()
        typed, everything = [], []
        bridge.on(BridgeEventType.STATE_UPDATE, typed.append)
        bridge.on_any(everything.append)

        bridge.emit(BridgeEventType.STATE_UPDATE, "s1", {"a": 1})
        bridge.emit(BridgeEventType.ACTION_LOG, "s1", {})
        assert [e.type for e in typed] == [BridgeEventType.STATE_UPDATE]
        assert len(everything) == 2

    def test_off(self):
        bridge = EventBridge()
        seen = []
        unsubscribe = bridge.on(BridgeEventType.STATE_UPDATE, seen.append)
        unsubscribe()
        bridge.emit(BridgeEventType.STATE_UPDATE)
        assert seen == []

    def test_remove_all(self):
        bridge = EventBridge()
        seen = []
        bridge.on(BridgeEventType.STATE_UPDATE, seen.append)
        bridge.on_any(seen.append)
        bridge.remove_all()
        bridge.emit(BridgeEventType.STATE_UPDATE)
        assert seen == []

    def test_registry_events(self):
        registry = StoreRegistry()
        events = []
        registry.bridge.on(BridgeEventType.STORE_REGISTER, events.append)
        store = create_store({}, {"name": "x"}, registry=registry)
        assert events[0].store_id == store.id
        assert events[0].payload == {"name": "x"}
