"""
Branch Manager

Git-like state branching (fork/switch/diff/delete/rename) on top of the
timeline engine. Branches are independent lineages and are never merged.
"""

__version__ = "0.1.0"

from .exceptions import (
    MAIN_BRANCH_ID,
    BranchError,
    UnknownBranchError,
    ProtectedBranchError,
    ActiveBranchProtectedError,
    NotInitializedError,
)
from .models import Branch, BranchingConfig
from .service import BranchHost, BranchManager, NoopBranchManager

__all__ = [
    "__version__",
    "MAIN_BRANCH_ID",
    "BranchError",
    "UnknownBranchError",
    "ProtectedBranchError",
    "ActiveBranchProtectedError",
    "NotInitializedError",
    "Branch",
    "BranchingConfig",
    "BranchHost",
    "BranchManager",
    "NoopBranchManager",
]
