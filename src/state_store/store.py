"""
Enhanced state store.

Composition root wiring the engines around a plain mutable-state store:
    1. the initializer's result is split into data fields and actions
    2. a timeline is built over the data fields
    3. the branch manager captures ``main`` from that timeline
    4. the inspector observes every ``set_state`` call

Only data fields are versioned; actions (callables) live beside them and
are merged back into ``get_state()``.
"""

import logging
import uuid
from copy import deepcopy
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional, Union

from src.action_inspector import ActionInspector
from src.branch_manager import BranchManager, NoopBranchManager
from src.patch_engine import PatchPair, compute_patches
from src.timeline_engine import (
    NoopTimeline,
    Timeline,
    TimelinePatches,
    apply_mutation,
    create_timeline,
    resolve_mutation,
)

from .bridge import EventBridge
from .models import BridgeEventType, StoreConfig

if TYPE_CHECKING:
    from .registry import StoreRegistry

logger = logging.getLogger(__name__)

StateListener = Callable[[dict[str, Any], dict[str, Any]], None]
Initializer = Union[
    dict[str, Any],
    Callable[[Callable[..., None], Callable[[], dict[str, Any]]], dict[str, Any]],
]


def separate_state_and_actions(
    obj: dict[str, Any]
) -> tuple[dict[str, Any], dict[str, Callable[..., Any]]]:
    """
    Split a state dict into data fields and action fields.

    Returns:
        Tuple of (data fields, callable fields)
    """
    state: dict[str, Any] = {}
    actions: dict[str, Callable[..., Any]] = {}
    for key, value in obj.items():
        if callable(value):
            actions[key] = value
        else:
            state[key] = value
    return state, actions


class TemporalApi:
    """
    Undo/redo surface of a store.

    Always delegates to the store's current timeline, which is replaced
    whenever the active branch changes, so listeners registered here
    survive branch switches.
    """

    def __init__(self, store: "Store"):
        self._store = store
        self._listeners: list[Callable[[], None]] = []

    @property
    def _timeline(self) -> Union[Timeline, NoopTimeline]:
        return self._store.timeline

    @property
    def enabled(self) -> bool:
        return self._timeline.enabled

    def back(self, steps: int = 1) -> None:
        self._timeline.back(steps)

    def forward(self, steps: int = 1) -> None:
        self._timeline.forward(steps)

    def go(self, position: int) -> None:
        self._timeline.go(position)

    def reset(self) -> None:
        self._timeline.reset()

    def archive(self) -> None:
        self._timeline.archive()

    def can_back(self) -> bool:
        return self._timeline.can_back()

    def can_forward(self) -> bool:
        return self._timeline.can_forward()

    def can_archive(self) -> bool:
        return self._timeline.can_archive()

    @property
    def position(self) -> int:
        return self._timeline.position

    @property
    def length(self) -> int:
        return self._timeline.length

    @property
    def log(self) -> list[PatchPair]:
        return self._timeline.log

    @property
    def patches(self) -> TimelinePatches:
        return self._timeline.patches

    def get_history(self) -> Iterator[dict[str, Any]]:
        return self._timeline.get_history()

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Call ``listener()`` whenever the timeline position or data changes."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()


class Store:
    """
    A store with ``temporal``, ``branch`` and ``inspector`` capabilities.

    Example:
        >>> store = Store(lambda set_state, get_state: {
        ...     "count": 0,
        ...     "increment": lambda: set_state(increment),
        ... })
        >>> store.get_state()["increment"]()
        >>> store.temporal.back()
    """

    def __init__(
        self,
        initializer: Initializer,
        config: Optional[StoreConfig] = None,
        bridge: Optional[EventBridge] = None,
    ):
        self.config = config or StoreConfig()
        self.id = uuid.uuid4().hex
        self.name = self.config.name or f"store-{self.id[:6]}"
        self.bridge = bridge or EventBridge()
        self._listeners: list[StateListener] = []

        self._initializing = True
        self._data: dict[str, Any] = {}
        self._actions: dict[str, Callable[..., Any]] = {}
        initial = initializer(self.set_state, self.get_state) if callable(initializer) else initializer
        state, actions = separate_state_and_actions(initial)
        self._data = deepcopy(state)
        self._actions.update(actions)
        self._initializing = False

        self.temporal = TemporalApi(self)
        self.inspector = ActionInspector(self.config.inspector_max_entries)
        self.inspector.subscribe(
            lambda entry: self.bridge.emit(
                BridgeEventType.ACTION_LOG, self.id, entry.model_dump(mode="json")
            )
        )

        # Timeline first, then capture main from it
        self._timeline: Union[Timeline, NoopTimeline] = NoopTimeline()
        self._unsubscribe_timeline: Callable[[], None] = lambda: None
        self._install_timeline(create_timeline(self._data, self.config.timeline))

        branching = self.config.branching
        self.branch: Union[BranchManager, NoopBranchManager] = (
            BranchManager(self, branching) if branching.enabled else NoopBranchManager(branching)
        )
        self.branch.initialize()
        self.branch.subscribe(self._emit_branch_update)

        logger.debug(
            "Created store %s (timeline=%s, branching=%s)",
            self.name, self.config.timeline.enabled, branching.enabled
        )

    # --- Read/write surface ---

    def get_state(self) -> dict[str, Any]:
        """Data fields (deep copy) merged with the actions."""
        return {**deepcopy(self._data), **self._actions}

    def get_data_state(self) -> dict[str, Any]:
        """Deep copy of the versioned data fields only."""
        return deepcopy(self._data)

    def set_state(self, update: Any, replace: bool = False) -> None:
        """
        Mutate the store.

        Args:
            update: A partial dict (merged), a full dict with ``replace=True``,
                or a mutator called with a clone of the data
            replace: Replace the data instead of merging into it
        """
        if isinstance(update, dict):
            update, actions = separate_state_and_actions(update)
            self._actions.update(actions)

        if self._initializing:
            self._data = apply_mutation(self._data, resolve_mutation(update, replace))
            return

        mutation = resolve_mutation(update, replace)
        previous = self._data

        if self._timeline.enabled:
            # The timeline publishes the post-state back through _on_timeline_change
            self._timeline.mutate(mutation)
        else:
            self._set_data(apply_mutation(previous, mutation))

        self.inspector.record(mutation, previous, self._data)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener(state, previous_state)`` after every data change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Branch host contract ---

    @property
    def timeline(self) -> Union[Timeline, NoopTimeline]:
        return self._timeline

    def replace_timeline(
        self,
        state: dict[str, Any],
        log: list[PatchPair],
        position: int
    ) -> None:
        self._install_timeline(create_timeline(state, self.config.timeline, log, position))
        self.temporal._notify()

    def replace_data_state(self, state: dict[str, Any]) -> None:
        self._set_data(deepcopy(state))

    # --- Internals ---

    def _install_timeline(self, timeline: Union[Timeline, NoopTimeline]) -> None:
        self._unsubscribe_timeline()
        self._timeline = timeline
        self._unsubscribe_timeline = timeline.subscribe(self._on_timeline_change)

    def _on_timeline_change(self, state: dict[str, Any]) -> None:
        self._set_data(state)
        self.temporal._notify()
        self.bridge.emit(
            BridgeEventType.TIMELINE_UPDATE, self.id, {"position": self._timeline.position}
        )

    def _set_data(self, state: dict[str, Any]) -> None:
        previous = self._data
        self._data = state
        if compute_patches(previous, state).is_empty:
            return
        self.bridge.emit(BridgeEventType.STATE_UPDATE, self.id, deepcopy(state))
        for listener in list(self._listeners):
            listener(self.get_state(), {**deepcopy(previous), **self._actions})

    def _emit_branch_update(self) -> None:
        branches = self.branch.list_branches()
        self.bridge.emit(
            BridgeEventType.BRANCH_UPDATE,
            self.id,
            {
                "branches": [b.model_dump(mode="json") for b in branches],
                "active_branch_id": self.branch.active_branch_id,
            },
        )


def create_store(
    initializer: Initializer,
    config: Union[StoreConfig, dict[str, Any], None] = None,
    registry: Optional["StoreRegistry"] = None,
    bridge: Optional[EventBridge] = None,
) -> Store:
    """
    Create a store and optionally register it.

    Args:
        initializer: Initial state dict, or ``(set_state, get_state) -> dict``
        config: StoreConfig or a dict of its fields
        registry: Registry to register the store in
        bridge: Event bridge (defaults to the registry's bridge)

    Returns:
        The new Store

    Example:
        >>> def increment(state):
        ...     state["count"] += 1
        >>> store = create_store(
        ...     lambda set_state, get_state: {
        ...         "count": 0,
        ...         "increment": lambda: set_state(increment),
        ...     },
        ...     config={"name": "counter"},
        ... )
    """
    if isinstance(config, dict):
        config = StoreConfig.model_validate(config)
    if bridge is None and registry is not None:
        bridge = registry.bridge

    store = Store(initializer, config, bridge)
    if registry is not None:
        registry.register(store)
    return store

