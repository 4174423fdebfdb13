"""Store-level errors."""


class StoreError(Exception):
    """Base class for store errors."""


class StoreExistsError(StoreError):
    """A store with the same name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Store "{name}" is already registered')


class SnapshotVersionError(StoreError, ValueError):
    """Snapshot written in an unsupported format version."""

    def __init__(self, version: int):
        self.version = version
        super().__init__(f"Unsupported snapshot version: {version}")
