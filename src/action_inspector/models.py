"""Pydantic models for the action log."""

from datetime import datetime, timezone
from pydantic import BaseModel, Field

from src.patch_engine import Patch

MAX_LOG_ENTRIES = 200


class ActionLogEntry(BaseModel):
    """One observed state mutation."""

    id: str = Field(description="Unique entry identifier")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the mutation was observed (UTC)"
    )
    action_name: str = Field(description="Derived name of the action")
    patches: list[Patch] = Field(
        default_factory=list,
        description="Forward patches of the mutation (empty if they could not be computed)"
    )
