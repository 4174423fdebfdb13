"""
Timeline Engine

Patch-log undo/redo for a single state lineage.
"""

__version__ = "0.1.0"

from .models import (
    TimelineConfig,
    TimelinePatches,
    Replace,
    Merge,
    Mutate,
    Mutation,
    apply_mutation,
    function_name,
    resolve_mutation,
)
from .engine import (
    Timeline,
    NoopTimeline,
    create_timeline,
)

__all__ = [
    "__version__",
    "TimelineConfig",
    "TimelinePatches",
    "Replace",
    "Merge",
    "Mutate",
    "Mutation",
    "apply_mutation",
    "function_name",
    "resolve_mutation",
    "Timeline",
    "NoopTimeline",
    "create_timeline",
]
