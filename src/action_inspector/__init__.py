"""
Action Inspector

Bounded, append-only log of state mutations with diagnostic patches.
"""

__version__ = "0.1.0"

from .models import ActionLogEntry, MAX_LOG_ENTRIES
from .service import ActionInspector, extract_action_name

__all__ = [
    "__version__",
    "ActionLogEntry",
    "MAX_LOG_ENTRIES",
    "ActionInspector",
    "extract_action_name",
]
