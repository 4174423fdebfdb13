"""
Action inspector service.

Append-only audit trail of mutations. It runs beside the timeline and is
unaffected by undo/redo position or branch switches. Patch computation
failures are logged and recorded as an empty patch list; they never abort
the mutation being observed.
"""

import logging
import uuid
from collections import deque
from typing import Any, Callable

from src.patch_engine import compute_forward_patches, Patch
from src.timeline_engine import Merge, Mutate, Mutation

from .models import ActionLogEntry, MAX_LOG_ENTRIES

logger = logging.getLogger(__name__)

ActionListener = Callable[[ActionLogEntry], None]


def extract_action_name(mutation: Mutation) -> str:
    """
    Derive a human-readable action name.

    Examples:
        >>> extract_action_name(Mutate(fn=increment, name="increment"))
        'increment'
        >>> extract_action_name(Merge(partial={"count": 1, "label": "x"}))
        'set(count, label)'
        >>> extract_action_name(Replace(state={"count": 0}))
        'set()'
    """
    if isinstance(mutation, Mutate):
        return mutation.name or "anonymous"
    if isinstance(mutation, Merge) and mutation.partial:
        return f"set({', '.join(str(k) for k in mutation.partial)})"
    return "set()"


class ActionInspector:
    """Bounded FIFO log of every observed mutation."""

    def __init__(self, max_entries: int = MAX_LOG_ENTRIES):
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._log: deque[ActionLogEntry] = deque(maxlen=max_entries)
        self._listeners: list[ActionListener] = []

    @property
    def max_entries(self) -> int:
        return self._log.maxlen

    def record(
        self,
        mutation: Mutation,
        previous: dict[str, Any],
        current: dict[str, Any]
    ) -> ActionLogEntry:
        """
        Append an entry for a mutation that moved ``previous`` to ``current``.

        Once the log is full the oldest entry is evicted.

        Returns:
            The new entry
        """
        action_name = extract_action_name(mutation)

        patches: list[Patch] = []
        try:
            patches = compute_forward_patches(previous, current)
        except Exception:
            logger.warning("Could not compute patches for action %s", action_name, exc_info=True)

        entry = ActionLogEntry(
            id=uuid.uuid4().hex,
            action_name=action_name,
            patches=patches,
        )
        self._log.append(entry)

        for listener in list(self._listeners):
            listener(entry.model_copy(deep=True))
        return entry

    def get_action_log(self) -> list[ActionLogEntry]:
        """Defensive copy of the log, oldest first."""
        return [e.model_copy(deep=True) for e in self._log]

    def clear(self) -> None:
        self._log.clear()

    def subscribe(self, listener: ActionListener) -> Callable[[], None]:
        """Call ``listener(entry)`` for each new entry."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
