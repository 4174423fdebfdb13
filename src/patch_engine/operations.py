"""
Patch operation handlers.

Path helpers implement JSON Pointer (RFC 6901). The public ``apply_*``
functions are pure: they take the current state and return a new state,
never mutating their input.
"""

from copy import deepcopy
from typing import Any

from .models import Patch, PatchOperation


class PatchError(ValueError):
    """Raised when a patch cannot be applied to a state."""

    def __init__(self, patch: Patch, reason: str):
        self.patch = patch
        self.reason = reason
        super().__init__(f"Cannot apply {patch.op.value} at '{patch.path}': {reason}")


def escape_segment(segment: str) -> str:
    """Escape a key for use inside a JSON Pointer."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    """Reverse :func:`escape_segment`."""
    return segment.replace("~1", "/").replace("~0", "~")


def parse_path(path: str) -> list[str]:
    """
    Parse a JSON Pointer path into segments.

    Args:
        path: JSON Pointer (e.g., "/todos/0/done")

    Returns:
        List of path segments (e.g., ["todos", "0", "done"])
    """
    if path == "":
        return []
    # Remove leading slash and split
    return [unescape_segment(s) for s in path[1:].split("/")]


def build_path(segments: list[str]) -> str:
    """
    Build a JSON Pointer from key segments.

    Args:
        segments: Keys from the root (e.g., ["user", "a/b"])

    Returns:
        JSON Pointer (e.g., "/user/a~1b")
    """
    return "".join("/" + escape_segment(str(s)) for s in segments)


def _step(current: Any, segment: str) -> Any:
    if isinstance(current, list):
        return current[int(segment)]
    if isinstance(current, dict):
        return current[segment]
    raise KeyError(f"Cannot traverse into {type(current).__name__} at {segment}")


def get_value_at_path(obj: dict[str, Any], path: str) -> Any:
    """
    Get value at a JSON Pointer path.

    Args:
        obj: The object to traverse
        path: JSON Pointer path

    Returns:
        Value at the path

    Raises:
        KeyError: If path doesn't exist
        IndexError: If array index is out of bounds
    """
    current = obj
    for segment in parse_path(path):
        current = _step(current, segment)
    return current


def _navigate_to_parent(obj: Any, segments: list[str]) -> Any:
    current = obj
    for segment in segments[:-1]:
        current = _step(current, segment)
    return current


def _set_in_place(obj: Any, segments: list[str], value: Any) -> None:
    parent = _navigate_to_parent(obj, segments)
    final_segment = segments[-1]
    if isinstance(parent, list):
        parent[int(final_segment)] = value
    elif isinstance(parent, dict):
        parent[final_segment] = value
    else:
        raise KeyError(f"Cannot set into {type(parent).__name__} at {final_segment}")


def _insert_in_place(obj: Any, segments: list[str], value: Any) -> None:
    parent = _navigate_to_parent(obj, segments)
    final_segment = segments[-1]
    if isinstance(parent, list):
        if final_segment == "-":
            parent.append(value)
        else:
            index = int(final_segment)
            if index > len(parent):
                raise IndexError(f"Insert index {index} out of range")
            parent.insert(index, value)
    elif isinstance(parent, dict):
        parent[final_segment] = value
    else:
        raise KeyError(f"Cannot add into {type(parent).__name__} at {final_segment}")


def _delete_in_place(obj: Any, segments: list[str]) -> Any:
    parent = _navigate_to_parent(obj, segments)
    final_segment = segments[-1]
    if isinstance(parent, list):
        return parent.pop(int(final_segment))
    if isinstance(parent, dict):
        return parent.pop(final_segment)
    raise KeyError(f"Cannot remove from {type(parent).__name__} at {final_segment}")


# --- Operation Dispatcher ---

def _apply_in_place(obj: dict[str, Any], patch: Patch) -> None:
    segments = parse_path(patch.path)
    try:
        if patch.op == PatchOperation.ADD:
            _insert_in_place(obj, segments, deepcopy(patch.value))
        elif patch.op == PatchOperation.REPLACE:
            _set_in_place(obj, segments, deepcopy(patch.value))
        elif patch.op == PatchOperation.REMOVE:
            _delete_in_place(obj, segments)
        else:
            raise PatchError(patch, "unsupported operation")
    except (KeyError, IndexError, TypeError, ValueError) as e:
        if isinstance(e, PatchError):
            raise
        raise PatchError(patch, str(e)) from e


def apply_patches(obj: dict[str, Any], patches: list[Patch]) -> dict[str, Any]:
    """
    Apply patches in order.

    The input is copied once and the patches are applied to the copy,
    so the caller's object is never touched.

    Example:
        >>> apply_patches({"count": 0}, [Patch(op="replace", path="/count", value=1)])
        {'count': 1}
    """
    result = deepcopy(obj)
    for patch in patches:
        _apply_in_place(result, patch)
    return result
