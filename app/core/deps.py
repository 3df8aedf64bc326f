"""FastAPI dependencies for the process-wide registry, storage and retrieval strategy.

They are created before serving (see app.main) and kept on app.state so tests
can pass doubles to create_app().
"""

from fastapi import Request

from app.registry.base import FileRegistry
from app.services.retrieval import RetrievalStrategy
from app.storage.base import StorageBackend


def get_registry(request: Request) -> FileRegistry:
    registry = request.app.state.registry
    if registry is None:
        raise RuntimeError("File registry is not initialized")
    return registry


def get_storage(request: Request) -> StorageBackend:
    return request.app.state.storage


def get_retrieval(request: Request) -> RetrievalStrategy:
    return request.app.state.retrieval
