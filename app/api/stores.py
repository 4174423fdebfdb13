"""
Store endpoints.

Inspection and control of live stores: data state, timeline navigation,
branches and the action log. Nothing here is persisted; stores live for
as long as the application process.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field, ConfigDict

from app.config import settings
from app.dependencies import get_registry, get_store
from src.action_inspector import ActionLogEntry
from src.branch_manager import (
    ActiveBranchProtectedError,
    Branch,
    BranchError,
    NotInitializedError,
    ProtectedBranchError,
    UnknownBranchError,
)
from src.patch_engine import DiffResult
from src.state_store import (
    Store,
    StoreConfig,
    StoreExistsError,
    StoreRegistry,
    create_store,
)
from src.timeline_engine import TimelineConfig

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Request/Response Models ---

class CreateStoreRequest(BaseModel):
    """Request body for creating a store from initial data."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "counter",
                "initial_state": {"count": 0},
                "timeline": {"max_history": 50},
                "branching": True
            }
        }
    )

    name: str = Field(
        ...,
        min_length=1,
        description="Unique store name"
    )
    initial_state: dict[str, Any] = Field(
        default_factory=dict,
        description="Initial data state"
    )
    timeline: Optional[TimelineConfig | bool] = Field(
        default=None,
        description="Timeline config or on/off toggle"
    )
    branching: Optional[dict[str, Any] | bool] = Field(
        default=None,
        description="Branching config or on/off toggle"
    )


class StoreSummary(BaseModel):
    """A registered store."""

    id: str
    name: str
    timeline_enabled: bool
    branching_enabled: bool
    position: int
    active_branch_id: str


class StateResponse(BaseModel):
    """Current data state of a store."""

    name: str
    state: dict[str, Any]


class TimelineResponse(BaseModel):
    """Timeline cursor and bounds."""

    enabled: bool
    position: int
    length: int
    can_back: bool
    can_forward: bool
    can_archive: bool


class GoRequest(BaseModel):
    """Absolute timeline jump."""

    position: int = Field(..., description="Target position (clamped to the log)")


class ForkRequest(BaseModel):
    """Request body for forking a branch."""

    name: Optional[str] = Field(
        default=None,
        description="Branch name (defaults to branch-<shortid>)"
    )


class RenameRequest(BaseModel):
    """Request body for renaming a branch."""

    name: str = Field(..., min_length=1, description="New branch name")


# --- Helpers ---

def _summary(store: Store) -> StoreSummary:
    return StoreSummary(
        id=store.id,
        name=store.name,
        timeline_enabled=store.temporal.enabled,
        branching_enabled=store.branch.enabled,
        position=store.temporal.position,
        active_branch_id=store.branch.active_branch_id,
    )


def _timeline(store: Store) -> TimelineResponse:
    temporal = store.temporal
    return TimelineResponse(
        enabled=temporal.enabled,
        position=temporal.position,
        length=temporal.length,
        can_back=temporal.can_back(),
        can_forward=temporal.can_forward(),
        can_archive=temporal.can_archive(),
    )


def _apply_update(store: Store, body: dict[str, Any], replace: bool) -> StateResponse:
    logger.info(
        "Updating state | store=%s replace=%s keys=%s",
        store.name,
        replace,
        list(body),
    )

    try:
        store.set_state(body, replace=replace)
    except (TypeError, ValueError) as e:
        logger.error("Invalid state update: %s", str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "validation_error", "message": str(e)},
        )
    except Exception as e:
        logger.exception("State update error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "update_error", "message": str(e)},
        )

    return StateResponse(name=store.name, state=store.get_data_state())


def _branch_http_error(e: BranchError) -> HTTPException:
    if isinstance(e, UnknownBranchError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(e, (ProtectedBranchError, ActiveBranchProtectedError)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(e, NotInitializedError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(e))


# --- Stores ---

@router.get("", response_model=list[StoreSummary])
async def list_stores(
    registry: StoreRegistry = Depends(get_registry)
) -> list[StoreSummary]:
    """List registered stores."""
    return [_summary(entry.store) for entry in registry.get_all()]


@router.post("", response_model=StoreSummary, status_code=status.HTTP_201_CREATED)
async def create(
    request: CreateStoreRequest,
    registry: StoreRegistry = Depends(get_registry)
) -> StoreSummary:
    """Create and register a store."""
    timeline = request.timeline
    if timeline is None:
        timeline = TimelineConfig(max_history=settings.default_max_history)

    config = StoreConfig(
        name=request.name,
        timeline=timeline,
        branching=request.branching,
        inspector_max_entries=settings.inspector_max_entries,
    )

    try:
        store = create_store(request.initial_state, config, registry=registry)
    except StoreExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    logger.info("Created store %s via API", store.name)
    return _summary(store)


@router.get("/{name}", response_model=StoreSummary)
async def get_store_summary(store: Store = Depends(get_store)) -> StoreSummary:
    """Describe one store."""
    return _summary(store)


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_store(
    store: Store = Depends(get_store),
    registry: StoreRegistry = Depends(get_registry)
) -> None:
    """Unregister a store."""
    registry.unregister(store.id)


# --- State ---

@router.get("/{name}/state", response_model=StateResponse)
async def read_state(store: Store = Depends(get_store)) -> StateResponse:
    """Current data state."""
    return StateResponse(name=store.name, state=store.get_data_state())


@router.put("/{name}/state", response_model=StateResponse)
async def replace_state(
    body: dict[str, Any],
    store: Store = Depends(get_store)
) -> StateResponse:
    """Replace the data state (recorded in the timeline)."""
    return _apply_update(store, body, replace=True)


@router.patch("/{name}/state", response_model=StateResponse)
async def merge_state(
    body: dict[str, Any],
    store: Store = Depends(get_store)
) -> StateResponse:
    """Merge top-level keys into the data state (recorded in the timeline)."""
    return _apply_update(store, body, replace=False)


# --- Timeline ---

@router.get("/{name}/timeline", response_model=TimelineResponse)
async def read_timeline(store: Store = Depends(get_store)) -> TimelineResponse:
    """Timeline cursor and bounds."""
    return _timeline(store)


@router.get("/{name}/timeline/history", response_model=list[dict[str, Any]])
async def read_history(store: Store = Depends(get_store)) -> list[dict[str, Any]]:
    """Every state from the oldest retained one to the end of the log."""
    return list(store.temporal.get_history())


@router.post("/{name}/timeline/back", response_model=TimelineResponse)
async def back(
    steps: int = Query(default=1, ge=0),
    store: Store = Depends(get_store)
) -> TimelineResponse:
    """Undo ``steps`` entries (clamped)."""
    store.temporal.back(steps)
    return _timeline(store)


@router.post("/{name}/timeline/forward", response_model=TimelineResponse)
async def forward(
    steps: int = Query(default=1, ge=0),
    store: Store = Depends(get_store)
) -> TimelineResponse:
    """Redo ``steps`` entries (clamped)."""
    store.temporal.forward(steps)
    return _timeline(store)


@router.post("/{name}/timeline/go", response_model=TimelineResponse)
async def go(request: GoRequest, store: Store = Depends(get_store)) -> TimelineResponse:
    """Jump to an absolute position (clamped)."""
    store.temporal.go(request.position)
    return _timeline(store)


@router.post("/{name}/timeline/reset", response_model=TimelineResponse)
async def reset(store: Store = Depends(get_store)) -> TimelineResponse:
    """Return to the oldest retained state."""
    store.temporal.reset()
    return _timeline(store)


@router.post("/{name}/timeline/archive", response_model=TimelineResponse)
async def archive(store: Store = Depends(get_store)) -> TimelineResponse:
    """Commit pending changes (manual archive mode)."""
    store.temporal.archive()
    return _timeline(store)


# --- Branches ---

@router.get("/{name}/branches", response_model=list[Branch])
async def list_branches(store: Store = Depends(get_store)) -> list[Branch]:
    """All branches of a store."""
    try:
        return store.branch.list_branches()
    except BranchError as e:
        raise _branch_http_error(e)


@router.post("/{name}/branches", response_model=Branch, status_code=status.HTTP_201_CREATED)
async def fork(request: ForkRequest, store: Store = Depends(get_store)) -> Branch:
    """Fork a branch from the active branch's current data."""
    try:
        return store.branch.fork(request.name)
    except BranchError as e:
        raise _branch_http_error(e)


@router.get("/{name}/branches/active", response_model=Branch)
async def active_branch(store: Store = Depends(get_store)) -> Branch:
    """The active branch."""
    try:
        return store.branch.active()
    except BranchError as e:
        raise _branch_http_error(e)


@router.get("/{name}/branches/diff", response_model=DiffResult)
async def diff_branches(
    a: str = Query(..., description="Left-hand branch id"),
    b: str = Query(..., description="Right-hand branch id"),
    store: Store = Depends(get_store)
) -> DiffResult:
    """Structural diff between the current data of two branches."""
    try:
        return store.branch.diff(a, b)
    except BranchError as e:
        raise _branch_http_error(e)


@router.post("/{name}/branches/{branch_id}/switch", response_model=StateResponse)
async def switch_branch(branch_id: str, store: Store = Depends(get_store)) -> StateResponse:
    """Make a branch active; returns the restored data state."""
    try:
        store.branch.switch(branch_id)
    except BranchError as e:
        raise _branch_http_error(e)
    return StateResponse(name=store.name, state=store.get_data_state())


@router.patch("/{name}/branches/{branch_id}", response_model=Branch)
async def rename_branch(
    branch_id: str,
    request: RenameRequest,
    store: Store = Depends(get_store)
) -> Branch:
    """Rename a branch."""
    try:
        store.branch.rename(branch_id, request.name)
        return next(b for b in store.branch.list_branches() if b.id == branch_id)
    except BranchError as e:
        raise _branch_http_error(e)


@router.delete("/{name}/branches/{branch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_branch(branch_id: str, store: Store = Depends(get_store)) -> None:
    """Delete a branch (not main, not the active one)."""
    try:
        store.branch.delete(branch_id)
    except BranchError as e:
        raise _branch_http_error(e)


# --- Action log ---

@router.get("/{name}/actions", response_model=list[ActionLogEntry])
async def read_actions(store: Store = Depends(get_store)) -> list[ActionLogEntry]:
    """The action log, oldest first."""
    return store.inspector.get_action_log()


@router.delete("/{name}/actions", status_code=status.HTTP_204_NO_CONTENT)
async def clear_actions(store: Store = Depends(get_store)) -> None:
    """Empty the action log."""
    store.inspector.clear()
