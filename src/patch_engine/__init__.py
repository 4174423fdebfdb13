"""
State Patch Engine

Computes and applies JSON Patch style edit scripts between state snapshots.
Shared by the timeline (undo/redo), the branch manager (diff) and the
action inspector (audit patches).
"""

__version__ = "0.1.0"

from .models import (
    PatchOperation,
    Patch,
    PatchPair,
    AddedEntry,
    RemovedEntry,
    ChangedEntry,
    DiffResult,
)
from .operations import (
    PatchError,
    apply_patches,
    build_path,
    parse_path,
)
from .service import (
    compute_patches,
    compute_forward_patches,
    deep_diff,
    values_equal,
)

__all__ = [
    "__version__",
    "PatchOperation",
    "Patch",
    "PatchPair",
    "AddedEntry",
    "RemovedEntry",
    "ChangedEntry",
    "DiffResult",
    "PatchError",
    "apply_patches",
    "build_path",
    "parse_path",
    "compute_patches",
    "compute_forward_patches",
    "deep_diff",
    "values_equal",
]
