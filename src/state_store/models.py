"""
Pydantic models for store creation, events and snapshots.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator

from src.action_inspector import MAX_LOG_ENTRIES
from src.branch_manager import BranchingConfig
from src.timeline_engine import TimelineConfig

SNAPSHOT_VERSION = 1


class StoreConfig(BaseModel):
    """
    Store configuration.

    ``timeline`` and ``branching`` accept either a full config or a bool,
    where a bool only toggles ``enabled``.

    Example:
        >>> StoreConfig(name="counter", timeline={"max_history": 20}, branching=False)
    """

    name: Optional[str] = Field(
        default=None,
        description="Store name (defaults to store-<shortid>)"
    )
    timeline: TimelineConfig = Field(
        default_factory=TimelineConfig,
        description="Timeline (undo/redo) config"
    )
    branching: BranchingConfig = Field(
        default_factory=BranchingConfig,
        description="Branching config"
    )
    inspector_max_entries: int = Field(
        default=MAX_LOG_ENTRIES,
        ge=1,
        description="Action log capacity"
    )

    @field_validator("timeline", "branching", mode="before")
    @classmethod
    def coerce_toggle(cls, v: Any) -> Any:
        """Booleans (and None) stand for {"enabled": v}."""
        if v is None:
            return {}
        if isinstance(v, bool):
            return {"enabled": v}
        return v


class BridgeEventType(str, Enum):
    """Events emitted by stores for inspection tooling."""

    STATE_UPDATE = "state:update"
    TIMELINE_UPDATE = "timeline:update"
    BRANCH_UPDATE = "branch:update"
    ACTION_LOG = "action:log"
    STORE_REGISTER = "store:register"
    STORE_UNREGISTER = "store:unregister"


class BridgeEvent(BaseModel):
    """A single bridge event."""

    type: BridgeEventType
    store_id: Optional[str] = None
    payload: Any = None


class SnapshotData(BaseModel):
    """Data of every registered store, keyed by store name."""

    version: int = Field(
        default=SNAPSHOT_VERSION,
        description="Snapshot format version"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the snapshot was taken (UTC)"
    )
    stores: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Data state per store name"
    )
