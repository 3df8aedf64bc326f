"""Upload API: store a file and hand back a short shareable link."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from app.config import MAX_UPLOAD_SIZE, PUBLIC_BASE_URL
from app.core.deps import get_registry, get_storage
from app.core.errors import NoFileUploaded
from app.registry.base import FileRegistry
from app.schemas.file_record import UploadLinkResponse
from app.services.file_links import create_file_link
from app.storage.base import StorageBackend

router = APIRouter(tags=["uploads"])


def _base_url(request: Request) -> str:
    return PUBLIC_BASE_URL or str(request.base_url).rstrip("/")


@router.post("/upload", response_model=UploadLinkResponse)
async def upload_file(
    request: Request,
    registry: Annotated[FileRegistry, Depends(get_registry)],
    storage: Annotated[StorageBackend, Depends(get_storage)],
) -> UploadLinkResponse:
    """
    Upload a single file (multipart, any field name) with an optional customName.
    Only the first file part is used; later ones are ignored.
    """
    async with request.form() as form:
        upload = next((v for _, v in form.multi_items() if isinstance(v, UploadFile)), None)
        if upload is None:
            raise NoFileUploaded()
        custom_name = form.get("customName")
        if not isinstance(custom_name, str):
            custom_name = None

        content = await upload.read()
        record = await create_file_link(
            registry=registry,
            storage=storage,
            filename=upload.filename or "",
            content=content,
            content_type=upload.content_type,
            custom_name=custom_name,
            max_size=MAX_UPLOAD_SIZE,
        )
    return UploadLinkResponse(link=f"{_base_url(request)}/file/{record.shortId}")
