"""
Patch computation service.

Derives forward/inverse patch pairs between two state snapshots and
structural diffs between two branch states. Dicts are walked key by key;
lists and scalars are compared as whole values and never diffed element-wise.
"""

from copy import deepcopy
from typing import Any, Iterable

from .models import (
    AddedEntry,
    ChangedEntry,
    DiffResult,
    Patch,
    PatchOperation,
    PatchPair,
    RemovedEntry,
)
from .operations import build_path, get_value_at_path


def values_equal(a: Any, b: Any) -> bool:
    """
    Strict equality used by all comparisons.

    Identical objects are always equal (so NaN equals itself), and values
    of different types are never equal (so ``1`` differs from ``True``).
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    return a == b


def _is_plain_dict(value: Any) -> bool:
    return isinstance(value, dict)


def _ordered_keys(a: dict[str, Any], b: dict[str, Any]) -> Iterable[str]:
    yield from a
    for key in b:
        if key not in a:
            yield key


def compute_forward_patches(
    original: dict[str, Any],
    modified: dict[str, Any],
    path: list[str] | None = None
) -> list[Patch]:
    """
    Compute the patches that turn ``original`` into ``modified``.

    Args:
        original: The original object state
        modified: The modified object state
        path: Current key path (used for recursion)

    Returns:
        List of Patch objects representing the differences

    Example:
        >>> compute_forward_patches({"count": 0, "x": 1}, {"count": 1, "x": 1})
        [Patch(op=<PatchOperation.REPLACE: 'replace'>, path='/count', value=1)]
    """
    prefix = path or []
    patches: list[Patch] = []

    for key in _ordered_keys(original, modified):
        key_path = prefix + [key]

        if key not in original:
            patches.append(Patch(
                op=PatchOperation.ADD,
                path=build_path(key_path),
                value=deepcopy(modified[key])
            ))
        elif key not in modified:
            patches.append(Patch(
                op=PatchOperation.REMOVE,
                path=build_path(key_path)
            ))
        else:
            before = original[key]
            after = modified[key]
            if _is_plain_dict(before) and _is_plain_dict(after):
                patches.extend(compute_forward_patches(before, after, key_path))
            elif not values_equal(before, after):
                patches.append(Patch(
                    op=PatchOperation.REPLACE,
                    path=build_path(key_path),
                    value=deepcopy(after)
                ))

    return patches


def _invert(patch: Patch, original: dict[str, Any]) -> Patch:
    if patch.op == PatchOperation.ADD:
        return Patch(op=PatchOperation.REMOVE, path=patch.path)
    previous = get_value_at_path(original, patch.path)
    if patch.op == PatchOperation.REMOVE:
        return Patch(op=PatchOperation.ADD, path=patch.path, value=deepcopy(previous))
    return Patch(op=PatchOperation.REPLACE, path=patch.path, value=deepcopy(previous))


def compute_patches(
    original: dict[str, Any],
    modified: dict[str, Any]
) -> PatchPair:
    """
    Compute a forward/inverse patch pair between two states.

    The inverse script is the element-wise inverse of the forward script
    in reverse order, so applying it to ``modified`` restores ``original``.

    Args:
        original: State before the mutation
        modified: State after the mutation

    Returns:
        PatchPair (empty when the states are equal)

    Raises:
        TypeError: If either state is not a dict
    """
    if not _is_plain_dict(original) or not _is_plain_dict(modified):
        raise TypeError("State snapshots must be dicts")

    forward = compute_forward_patches(original, modified)
    inverse = [_invert(p, original) for p in reversed(forward)]
    return PatchPair(forward=forward, inverse=inverse)


def deep_diff(
    state_a: dict[str, Any],
    state_b: dict[str, Any],
    parent_path: list[str] | None = None
) -> DiffResult:
    """
    Compute the structural differences between two states.

    Nested dicts present on both sides are recursed into. Lists and
    scalars are compared by strict equality and reported as a single
    "changed" entry when unequal.

    Args:
        state_a: Left-hand state
        state_b: Right-hand state
        parent_path: Key path prefix (used for recursion)

    Returns:
        DiffResult with added, removed and changed entries

    Example:
        >>> result = deep_diff({"count": 2}, {"count": 4, "flag": True})
        >>> [e.path for e in result.changed], [e.path for e in result.added]
        ([['count']], [['flag']])
    """
    prefix = parent_path or []
    result = DiffResult()

    for key in _ordered_keys(state_a, state_b):
        path = prefix + [str(key)]
        in_a = key in state_a
        in_b = key in state_b

        if not in_a:
            result.added.append(AddedEntry(path=path, value=state_b[key]))
        elif not in_b:
            result.removed.append(RemovedEntry(path=path, value=state_a[key]))
        else:
            val_a = state_a[key]
            val_b = state_b[key]
            if _is_plain_dict(val_a) and _is_plain_dict(val_b):
                nested = deep_diff(val_a, val_b, path)
                result.added.extend(nested.added)
                result.removed.extend(nested.removed)
                result.changed.extend(nested.changed)
            elif not values_equal(val_a, val_b):
                result.changed.append(ChangedEntry(path=path, from_=val_a, to=val_b))

    return result
