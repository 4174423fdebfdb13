"""Branch manager error taxonomy."""

MAIN_BRANCH_ID = "main"


class BranchError(Exception):
    """Base class for branch manager errors."""


class UnknownBranchError(BranchError, LookupError):
    """A branch id that the manager does not know about."""

    def __init__(self, branch_id: str):
        self.branch_id = branch_id
        super().__init__(f'Branch "{branch_id}" not found')


class ProtectedBranchError(BranchError):
    """Attempt to delete the main branch."""

    def __init__(self, branch_id: str = MAIN_BRANCH_ID):
        self.branch_id = branch_id
        super().__init__("Cannot delete the main branch")


class ActiveBranchProtectedError(BranchError):
    """Attempt to delete the branch that is currently active."""

    def __init__(self, branch_id: str):
        self.branch_id = branch_id
        super().__init__("Cannot delete the active branch. Switch first.")


class NotInitializedError(BranchError):
    """Branch operation before the main branch has been captured."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Branch manager is not initialized; call initialize() before {operation}()"
        )
