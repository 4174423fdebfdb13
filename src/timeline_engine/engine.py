"""
Timeline engine.

Keeps one patch log per lineage and moves a position cursor over it:
    - position 0 is the oldest retained state
    - position N is the state after N recorded mutations
    - undo applies inverse patches, redo applies forward patches

Listeners are called synchronously after the live state changes. The
listener list is copied before each notification, so a listener that
mutates the timeline runs that mutation to completion before the
remaining listeners are called.
"""

import logging
from copy import deepcopy
from typing import Any, Callable, Iterator, Optional

from src.patch_engine import PatchPair, apply_patches, compute_patches

from .models import Mutation, TimelineConfig, TimelinePatches, apply_mutation

logger = logging.getLogger(__name__)

TimelineListener = Callable[[dict[str, Any]], None]


class Timeline:
    """
    Patch-based undo/redo over a single state lineage.

    The state passed in is the state *at* ``initial_position``; any
    ``initial_log`` entries before that position are reachable by undo
    and entries after it by redo.

    Example:
        >>> timeline = Timeline({"count": 0})
        >>> _ = timeline.mutate(Merge(partial={"count": 1}))
        >>> timeline.back()
        >>> timeline.state
        {'count': 0}
    """

    enabled = True

    def __init__(
        self,
        initial_state: dict[str, Any],
        config: Optional[TimelineConfig] = None,
        initial_log: Optional[list[PatchPair]] = None,
        initial_position: int = 0,
    ):
        self._config = config or TimelineConfig()
        self._state = deepcopy(initial_state)
        self._log: list[PatchPair] = [p.model_copy(deep=True) for p in initial_log or []]
        self._position = max(0, min(initial_position, len(self._log)))
        self._pending: Optional[PatchPair] = None
        self._listeners: list[TimelineListener] = []
        self._enforce_max_history()

    # --- Read-only views ---

    @property
    def config(self) -> TimelineConfig:
        return self._config

    @property
    def position(self) -> int:
        return self._position

    @property
    def length(self) -> int:
        return len(self._log)

    @property
    def state(self) -> dict[str, Any]:
        return deepcopy(self._state)

    @property
    def log(self) -> list[PatchPair]:
        return [p.model_copy(deep=True) for p in self._log]

    @property
    def patches(self) -> TimelinePatches:
        return TimelinePatches(
            patches=[deepcopy(p.forward) for p in self._log],
            inverse_patches=[deepcopy(p.inverse) for p in self._log],
        )

    def can_back(self) -> bool:
        return self._position > 0 or self._pending is not None

    def can_forward(self) -> bool:
        return self._position < len(self._log)

    def can_archive(self) -> bool:
        return self._pending is not None

    # --- Mutation ---

    def mutate(self, mutation: Mutation) -> Optional[PatchPair]:
        """
        Apply a mutation and record it.

        Nothing is recorded when the mutation leaves the state unchanged.
        With ``auto_archive`` off the change is folded into a pending entry
        that :meth:`archive` commits.

        Args:
            mutation: Replace, Merge or Mutate

        Returns:
            The recorded PatchPair, or None when nothing changed
        """
        previous = self._state
        next_state = apply_mutation(previous, mutation)
        pair = compute_patches(previous, next_state)
        if pair.is_empty:
            return None

        self._state = next_state
        if self._config.auto_archive:
            self._record(pair)
        elif self._pending is None:
            self._pending = pair
        else:
            self._pending = PatchPair(
                forward=self._pending.forward + pair.forward,
                inverse=pair.inverse + self._pending.inverse,
            )

        self._notify()
        return pair

    def archive(self) -> None:
        """Commit pending (unarchived) changes as a single history entry."""
        if self._commit_pending():
            self._notify()

    def _commit_pending(self) -> bool:
        if self._pending is None:
            return False
        pending, self._pending = self._pending, None
        self._record(pending)
        return True

    def _record(self, pair: PatchPair) -> None:
        if self._position < len(self._log):
            logger.debug("Discarding %d redo entries", len(self._log) - self._position)
            del self._log[self._position:]
        self._log.append(pair)
        self._position += 1
        self._enforce_max_history()

    def _enforce_max_history(self) -> None:
        limit = self._config.max_history
        # Entries behind the cursor can be dropped without touching the live state
        while len(self._log) > limit and self._position > 0:
            self._log.pop(0)
            self._position -= 1
            logger.debug("History limit %d reached, evicted oldest entry", limit)
        if len(self._log) > limit:
            del self._log[limit:]

    # --- Navigation ---
    #
    # Pending changes are committed before the cursor moves; listeners are
    # notified once per navigation call.

    def back(self, steps: int = 1) -> None:
        """Undo up to ``steps`` entries."""
        archived = self._commit_pending()
        self._move(self._position - max(steps, 0), archived)

    def forward(self, steps: int = 1) -> None:
        """Redo up to ``steps`` entries."""
        archived = self._commit_pending()
        self._move(self._position + max(steps, 0), archived)

    def go(self, position: int) -> None:
        """
        Jump to an absolute position, clamped to ``[0, length]``.

        Only the patches between the current and the target position are
        applied, so the cost is proportional to the distance travelled.
        """
        archived = self._commit_pending()
        self._move(position, archived)

    def _move(self, position: int, archived: bool) -> None:
        target = max(0, min(position, len(self._log)))
        if target == self._position:
            if archived:
                self._notify()
            return

        if target < self._position:
            patches = [
                patch
                for pair in reversed(self._log[target:self._position])
                for patch in pair.inverse
            ]
        else:
            patches = [
                patch
                for pair in self._log[self._position:target]
                for patch in pair.forward
            ]

        logger.debug("Timeline moving %d -> %d", self._position, target)
        self._state = apply_patches(self._state, patches)
        self._position = target
        self._notify()

    def reset(self) -> None:
        """Return to the oldest retained state."""
        self.go(0)

    # --- Diagnostics ---

    def _committed_state(self) -> dict[str, Any]:
        if self._pending is None:
            return self._state
        return apply_patches(self._state, self._pending.inverse)

    def get_history(self) -> Iterator[dict[str, Any]]:
        """
        Yield every state from position 0 through the end of the log.

        States are rebuilt lazily from the oldest retained state by
        applying forward patches. Pending changes are not part of history.
        """
        log = list(self._log)
        state = self._committed_state()
        for pair in reversed(log[:self._position]):
            state = apply_patches(state, pair.inverse)

        yield deepcopy(state)
        for pair in log:
            state = apply_patches(state, pair.forward)
            yield deepcopy(state)

    # --- Subscription ---

    def subscribe(self, listener: TimelineListener) -> Callable[[], None]:
        """
        Register a listener called with the live state after every change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)


class NoopTimeline:
    """
    Timeline used when time travel is disabled.

    Every operation is a no-op and nothing can be undone or redone.
    """

    enabled = False

    def __init__(self, config: Optional[TimelineConfig] = None):
        self._config = config or TimelineConfig(enabled=False)

    @property
    def config(self) -> TimelineConfig:
        return self._config

    position = 0
    length = 0

    @property
    def log(self) -> list[PatchPair]:
        return []

    @property
    def patches(self) -> TimelinePatches:
        return TimelinePatches()

    def can_back(self) -> bool:
        return False

    def can_forward(self) -> bool:
        return False

    def can_archive(self) -> bool:
        return False

    def mutate(self, mutation: Mutation) -> Optional[PatchPair]:
        return None

    def archive(self) -> None:
        pass

    def back(self, steps: int = 1) -> None:
        pass

    def forward(self, steps: int = 1) -> None:
        pass

    def go(self, position: int) -> None:
        pass

    def reset(self) -> None:
        pass

    def get_history(self) -> Iterator[dict[str, Any]]:
        return iter(())

    def subscribe(self, listener: TimelineListener) -> Callable[[], None]:
        return lambda: None


def create_timeline(
    initial_state: dict[str, Any],
    config: Optional[TimelineConfig] = None,
    initial_log: Optional[list[PatchPair]] = None,
    initial_position: int = 0,
) -> "Timeline | NoopTimeline":
    """Build a Timeline, or a NoopTimeline when the config disables it."""
    config = config or TimelineConfig()
    if not config.enabled:
        return NoopTimeline(config)
    return Timeline(initial_state, config, initial_log, initial_position)
