"""
State branching service.

Git-like branching for store data:
    - fork: create a new branch from the active branch's current data
    - switch: persist the active branch and restore another one
    - diff: compare the current data of two branches
    - delete/rename: manage branches

The manager never intercepts individual mutations. It only captures the
host's live timeline (log, cursor, data) into branch records and rebuilds
a fresh timeline from a record on switch.
"""

import logging
import uuid
from copy import deepcopy
from typing import Any, Callable, Optional, Protocol

from src.patch_engine import DiffResult, PatchPair, deep_diff

from .exceptions import (
    MAIN_BRANCH_ID,
    ActiveBranchProtectedError,
    NotInitializedError,
    ProtectedBranchError,
    UnknownBranchError,
)
from .models import Branch, BranchingConfig

logger = logging.getLogger(__name__)

BranchListener = Callable[[], None]


class BranchHost(Protocol):
    """What the branch manager needs from the store it is attached to."""

    @property
    def timeline(self) -> Any:
        """The live timeline (exposes ``log``, ``position`` and ``archive()``)."""
        ...

    def get_data_state(self) -> dict[str, Any]:
        """Deep copy of the live data (no callables)."""
        ...

    def replace_timeline(
        self,
        state: dict[str, Any],
        log: list[PatchPair],
        position: int
    ) -> None:
        """Swap in a fresh timeline seeded with ``state`` at ``position``."""
        ...

    def replace_data_state(self, state: dict[str, Any]) -> None:
        """Overwrite the live data and notify store subscribers."""
        ...


def generate_branch_id() -> str:
    return uuid.uuid4().hex


class BranchManager:
    """
    Forest of branch records sharing the host's single live timeline.

    Construction is two-phase: the host builds its timeline first, then
    calls :meth:`initialize` to capture the ``main`` branch from it. Every
    other operation raises NotInitializedError until that has happened.

    Example:
        >>> manager = BranchManager(store)
        >>> manager.initialize()
        >>> experiment = manager.fork("experiment")
        >>> manager.switch(experiment.id)
    """

    enabled = True

    def __init__(self, host: BranchHost, config: Optional[BranchingConfig] = None):
        self._host = host
        self._config = config or BranchingConfig()
        self._branches: dict[str, Branch] = {}
        self._active_id = MAIN_BRANCH_ID
        self._ready = False
        self._listeners: list[BranchListener] = []

    @property
    def is_ready(self) -> bool:
        return self._ready

    @property
    def active_branch_id(self) -> str:
        self._require_ready("active_branch_id")
        return self._active_id

    def initialize(self) -> None:
        """
        Capture the host's current timeline into the ``main`` branch.

        The capture reflects the timeline at the moment this is called,
        which is not necessarily position 0. Calling it again is a no-op.
        """
        if self._ready:
            return

        timeline = self._host.timeline
        timeline.archive()
        data = self._host.get_data_state()
        self._branches[MAIN_BRANCH_ID] = Branch(
            id=MAIN_BRANCH_ID,
            name=MAIN_BRANCH_ID,
            parent_branch_id=None,
            fork_point=0,
            snapshot=deepcopy(data),
            current_state=deepcopy(data),
            timeline_log=timeline.log,
            current_position=timeline.position,
        )
        self._active_id = MAIN_BRANCH_ID
        self._ready = True
        logger.debug("Branch manager initialized at position %d", timeline.position)

    # --- Internal helpers ---

    def _require_ready(self, operation: str) -> None:
        if not self._ready:
            raise NotInitializedError(operation)

    def _get(self, branch_id: str) -> Branch:
        branch = self._branches.get(branch_id)
        if branch is None:
            raise UnknownBranchError(branch_id)
        return branch

    def _save_active(self) -> None:
        """
        Persist the live timeline and data into the active branch record.

        Pending (unarchived) changes are committed first so the saved data
        always matches the saved log and cursor.
        """
        branch = self._branches.get(self._active_id)
        if branch is None:
            return
        timeline = self._host.timeline
        timeline.archive()
        branch.timeline_log = timeline.log
        branch.current_position = timeline.position
        branch.current_state = self._host.get_data_state()

    def _branch_state(self, branch_id: str) -> dict[str, Any]:
        if branch_id == self._active_id:
            return self._host.get_data_state()
        return deepcopy(self._get(branch_id).current_state)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # --- Public API ---

    def fork(self, name: Optional[str] = None) -> Branch:
        """
        Create a branch from the active branch's current data.

        The new branch inherits the data but starts with an empty log at
        position 0. It is not switched to.

        Args:
            name: Branch name; defaults to ``branch-<shortid>``

        Returns:
            Deep copy of the new branch record
        """
        self._require_ready("fork")
        self._save_active()

        branch_id = generate_branch_id()
        current = self._branch_state(self._active_id)
        branch = Branch(
            id=branch_id,
            name=name or f"branch-{branch_id[:6]}",
            parent_branch_id=self._active_id,
            fork_point=self._host.timeline.position,
            snapshot=deepcopy(current),
            current_state=deepcopy(current),
            timeline_log=[],
            current_position=0,
        )
        self._branches[branch_id] = branch

        logger.info(
            "Forked branch %s (%s) from %s at position %d",
            branch.name, branch_id, branch.parent_branch_id, branch.fork_point
        )
        self._notify()
        return branch.model_copy(deep=True)

    def switch(self, branch_id: str) -> None:
        """
        Make another branch active.

        The active branch is persisted first. The host then gets a fresh
        timeline whose baseline is the target's saved current data with its
        saved log and cursor, and the live data becomes that saved data.

        Raises:
            UnknownBranchError: If the branch does not exist
        """
        self._require_ready("switch")
        if branch_id == self._active_id:
            return
        target = self._get(branch_id)

        self._save_active()
        previous_id = self._active_id
        self._active_id = branch_id

        self._host.replace_timeline(
            deepcopy(target.current_state),
            [p.model_copy(deep=True) for p in target.timeline_log],
            target.current_position,
        )
        self._host.replace_data_state(deepcopy(target.current_state))

        logger.info("Switched branch %s -> %s", previous_id, branch_id)
        self._notify()

    def list_branches(self) -> list[Branch]:
        """Deep copies of every branch, active branch persisted first."""
        self._require_ready("list_branches")
        self._save_active()
        return [b.model_copy(deep=True) for b in self._branches.values()]

    def active(self) -> Branch:
        """Deep copy of the active branch, persisted first."""
        self._require_ready("active")
        self._save_active()
        return self._get(self._active_id).model_copy(deep=True)

    def diff(self, branch_id_a: str, branch_id_b: str) -> DiffResult:
        """
        Structural diff between the current data of two branches.

        Raises:
            UnknownBranchError: If either branch does not exist
        """
        self._require_ready("diff")
        self._save_active()
        state_a = self._branch_state(branch_id_a)
        state_b = self._branch_state(branch_id_b)
        return deep_diff(state_a, state_b)

    def delete(self, branch_id: str) -> None:
        """
        Remove a branch permanently.

        Children keep the deleted id as their ``parent_branch_id``.

        Raises:
            ProtectedBranchError: For the main branch
            ActiveBranchProtectedError: For the active branch
            UnknownBranchError: If the branch does not exist
        """
        self._require_ready("delete")
        if branch_id == MAIN_BRANCH_ID:
            raise ProtectedBranchError(branch_id)
        if branch_id == self._active_id:
            raise ActiveBranchProtectedError(branch_id)
        self._get(branch_id)

        del self._branches[branch_id]
        logger.info("Deleted branch %s", branch_id)
        self._notify()

    def rename(self, branch_id: str, new_name: str) -> None:
        """
        Rename a branch; its id is unchanged.

        Raises:
            UnknownBranchError: If the branch does not exist
        """
        self._require_ready("rename")
        branch = self._get(branch_id)
        old_name, branch.name = branch.name, new_name
        logger.info("Renamed branch %s: %s -> %s", branch_id, old_name, new_name)
        self._notify()

    def subscribe(self, listener: BranchListener) -> Callable[[], None]:
        """Call ``listener`` after every fork/switch/delete/rename."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe


class NoopBranchManager:
    """Branch manager used when branching is disabled: a lone synthetic main."""

    enabled = False
    is_ready = True
    active_branch_id = MAIN_BRANCH_ID

    def __init__(self, config: Optional[BranchingConfig] = None):
        self._config = config or BranchingConfig(enabled=False)
        self._main = Branch(id=MAIN_BRANCH_ID, name=MAIN_BRANCH_ID)

    def initialize(self) -> None:
        pass

    def fork(self, name: Optional[str] = None) -> Branch:
        return self._main.model_copy(deep=True)

    def switch(self, branch_id: str) -> None:
        pass

    def list_branches(self) -> list[Branch]:
        return [self._main.model_copy(deep=True)]

    def active(self) -> Branch:
        return self._main.model_copy(deep=True)

    def diff(self, branch_id_a: str, branch_id_b: str) -> DiffResult:
        return DiffResult()

    def delete(self, branch_id: str) -> None:
        pass

    def rename(self, branch_id: str, new_name: str) -> None:
        pass

    def subscribe(self, listener: BranchListener) -> Callable[[], None]:
        return lambda: None
