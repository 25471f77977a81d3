"""Exceptions raised while loading snapshots and answering queries."""


class HeapTraceError(Exception):
    """Base class for heaptrace errors."""

    pass


class InputError(HeapTraceError):
    """Snapshot or source map could not be read or decoded."""

    pass


class GraphIntegrityError(HeapTraceError):
    """Snapshot records do not form a consistent graph."""

    pass


class NodeNotFoundError(HeapTraceError, KeyError):
    """A query named a node id that is not in the graph."""

    def __init__(self, node_id: int) -> None:
        self.node_id = node_id
        super().__init__(node_id)

    def __str__(self) -> str:
        return f"Can't find node with id={self.node_id}"


class ResourceExhaustedError(HeapTraceError):
    """A traversal exceeded its configured bound and was aborted."""

    def __init__(self, message: str, limit: int, observed: int) -> None:
        self.limit = limit
        self.observed = observed
        super().__init__(message)
