"""
Pydantic models for state patches and structural diffs.

Patches follow JSON Patch (RFC 6902) structure restricted to the
add/replace/remove operations needed to move between two state snapshots.
"""

from enum import Enum
from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


class PatchOperation(str, Enum):
    """Supported patch operations (JSON Patch semantics)."""

    ADD = "add"
    REPLACE = "replace"
    REMOVE = "remove"


class Patch(BaseModel):
    """
    A single elementary edit.

    Follows JSON Patch structure:
        - op: The operation to perform
        - path: JSON Pointer to the target location
        - value: The new value (ignored for remove)

    Examples:
        Replace a counter:
            {"op": "replace", "path": "/count", "value": 3}

        Remove a nested key:
            {"op": "remove", "path": "/filters/archived"}
    """

    op: PatchOperation = Field(
        ...,
        description="The operation to perform"
    )
    path: str = Field(
        ...,
        description="JSON Pointer path to target (e.g., '/count', '/user/name')"
    )
    value: Any = Field(
        default=None,
        description="The new value (for add/replace operations)"
    )

    @field_validator("path")
    @classmethod
    def validate_path_format(cls, v: str) -> str:
        """Path must start with /."""
        if not v.startswith("/"):
            raise ValueError("path must start with '/'")
        return v


class PatchPair(BaseModel):
    """
    Forward and inverse edit scripts between two states.

    Applying ``forward`` to the pre-state yields the post-state;
    applying ``inverse`` to the post-state yields the pre-state.
    """

    forward: list[Patch] = Field(
        default_factory=list,
        description="Patches transforming the pre-state into the post-state"
    )
    inverse: list[Patch] = Field(
        default_factory=list,
        description="Patches transforming the post-state back into the pre-state"
    )

    @property
    def is_empty(self) -> bool:
        return not self.forward


class AddedEntry(BaseModel):
    """A key present only on the right-hand side of a diff."""

    path: list[str] = Field(description="Key path from the root")
    value: Any = Field(default=None, description="Value on the right-hand side")


class RemovedEntry(BaseModel):
    """A key present only on the left-hand side of a diff."""

    path: list[str] = Field(description="Key path from the root")
    value: Any = Field(default=None, description="Value on the left-hand side")


class ChangedEntry(BaseModel):
    """A key present on both sides with unequal values."""

    model_config = ConfigDict(populate_by_name=True)

    path: list[str] = Field(description="Key path from the root")
    from_: Any = Field(default=None, alias="from", description="Left-hand value")
    to: Any = Field(default=None, description="Right-hand value")


class DiffResult(BaseModel):
    """Structural differences between two states."""

    added: list[AddedEntry] = Field(default_factory=list)
    removed: list[RemovedEntry] = Field(default_factory=list)
    changed: list[ChangedEntry] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)
