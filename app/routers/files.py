"""Download API: resolve a short id and deliver the file."""

from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.core.deps import get_registry, get_retrieval
from app.core.errors import FileNotFound
from app.registry.base import FileRegistry
from app.services.retrieval import RetrievalStrategy

router = APIRouter(tags=["files"])


@router.get("/file/{short_id}")
async def get_file(
    short_id: str,
    registry: Annotated[FileRegistry, Depends(get_registry)],
    retrieval: Annotated[RetrievalStrategy, Depends(get_retrieval)],
) -> Response:
    """Redirect to, or stream, the file behind short_id depending on RETRIEVAL_MODE."""
    record = await registry.find(short_id)
    if record is None:
        raise FileNotFound()
    return await retrieval.serve(record)
