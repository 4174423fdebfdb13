"""
Pydantic models for the timeline engine.

Covers engine configuration, the raw patch view exposed to callers and the
three mutation forms a caller can submit.
"""

from copy import deepcopy
from typing import Any, Callable, Union
from pydantic import BaseModel, ConfigDict, Field

from src.patch_engine import Patch


class TimelineConfig(BaseModel):
    """Timeline (undo/redo) configuration."""

    enabled: bool = Field(
        default=True,
        description="Enable time travel; when disabled every operation is a no-op"
    )
    max_history: int = Field(
        default=100,
        ge=1,
        description="Maximum number of retained history entries"
    )
    auto_archive: bool = Field(
        default=True,
        description="Record every mutation as its own history entry"
    )


class TimelinePatches(BaseModel):
    """Raw patch view of a timeline log, one list per history entry."""

    patches: list[list[Patch]] = Field(
        default_factory=list,
        description="Forward patches per entry"
    )
    inverse_patches: list[list[Patch]] = Field(
        default_factory=list,
        description="Inverse patches per entry"
    )


# --- Mutations ---

class Replace(BaseModel):
    """Replace the whole data state."""

    model_config = ConfigDict(frozen=True)

    state: dict[str, Any]


class Merge(BaseModel):
    """Shallow-merge top-level keys into the data state."""

    model_config = ConfigDict(frozen=True)

    partial: dict[str, Any]


class Mutate(BaseModel):
    """
    Run a mutator against a clone of the data state.

    The mutator may edit the clone in place and return None, or return
    a new dict which then becomes the post-state.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    fn: Callable[[dict[str, Any]], Any]
    name: str = "anonymous"


Mutation = Union[Replace, Merge, Mutate]


def function_name(fn: Callable[..., Any]) -> str:
    """Name of a mutator function, "anonymous" for lambdas and partials."""
    name = getattr(fn, "__name__", "")
    if not name or name == "<lambda>":
        return "anonymous"
    return name


def resolve_mutation(update: Any, replace: bool = False) -> Mutation:
    """
    Resolve a raw ``set_state`` argument into a mutation.

    Args:
        update: A callable mutator, a dict, or an existing mutation
        replace: Treat a dict as a full replacement instead of a merge

    Returns:
        Replace, Merge or Mutate

    Raises:
        TypeError: If the update is none of the supported forms

    Example:
        >>> resolve_mutation({"count": 1})
        Merge(partial={'count': 1})
        >>> resolve_mutation({"count": 1}, replace=True)
        Replace(state={'count': 1})
    """
    if isinstance(update, (Replace, Merge, Mutate)):
        return update
    if callable(update):
        return Mutate(fn=update, name=function_name(update))
    if isinstance(update, dict):
        if replace:
            return Replace(state=update)
        return Merge(partial=update)
    raise TypeError(f"Unsupported state update: {type(update).__name__}")


def apply_mutation(state: dict[str, Any], mutation: Mutation) -> dict[str, Any]:
    """
    Compute the post-state of a mutation without touching ``state``.

    Raises:
        TypeError: If a mutator returns something other than a dict or None
    """
    if isinstance(mutation, Replace):
        return deepcopy(mutation.state)

    if isinstance(mutation, Merge):
        result = deepcopy(state)
        result.update(deepcopy(mutation.partial))
        return result

    draft = deepcopy(state)
    returned = mutation.fn(draft)
    if returned is None:
        return draft
    if not isinstance(returned, dict):
        raise TypeError(
            f"Mutator '{mutation.name}' returned {type(returned).__name__}, expected dict or None"
        )
    return deepcopy(returned)
