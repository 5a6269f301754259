"""Exception hierarchy for the graph engine."""


class GraphError(Exception):
    """Base exception for graph operations."""
    pass


class StorageError(GraphError):
    """Raised when a storage adapter cannot read or write an item."""

    def __init__(self, message: str, item_id: str = ""):
        self.item_id = item_id
        super().__init__(message)


class InvalidImportError(GraphError):
    """Raised when an import payload cannot be parsed into nodes and edges."""
    pass
