"""Reference worker: executes bridge commands against an in-memory document."""

from designbridge.worker.client import WorkerClient
from designbridge.worker.document import Document, DocumentError, Node
from designbridge.worker.session import WorkerSession

__all__ = ["Document", "DocumentError", "Node", "WorkerClient", "WorkerSession"]
