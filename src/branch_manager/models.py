"""
Pydantic models for state branching.

A branch is an independent lineage of state history. Exactly one branch is
active at a time; the others hold their last known data, patch log and
cursor so they can be restored on switch.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, Field

from src.patch_engine import PatchPair


class BranchingConfig(BaseModel):
    """Branching configuration."""

    enabled: bool = Field(
        default=True,
        description="Enable state branching; when disabled only a synthetic main branch exists"
    )


class Branch(BaseModel):
    """A single state lineage."""

    id: str = Field(description="Unique, immutable branch identifier")
    name: str = Field(description="Human-readable branch name")
    parent_branch_id: Optional[str] = Field(
        default=None,
        description="Branch this one was forked from (historical, may dangle after delete)"
    )
    fork_point: int = Field(
        default=0,
        ge=0,
        description="Parent timeline position at fork time"
    )
    snapshot: dict[str, Any] = Field(
        default_factory=dict,
        description="Data state at fork time"
    )
    current_state: dict[str, Any] = Field(
        default_factory=dict,
        description="Data state at current_position"
    )
    timeline_log: list[PatchPair] = Field(
        default_factory=list,
        description="Patch log accumulated on this branch"
    )
    current_position: int = Field(
        default=0,
        ge=0,
        description="Timeline cursor within timeline_log"
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation time (UTC)"
    )
