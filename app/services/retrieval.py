"""Strategies for serving a stored file: local stream, redirect, or proxy stream."""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from urllib.parse import quote

import httpx
from fastapi.responses import FileResponse, RedirectResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from app.config import PROXY_TIMEOUT_SECONDS, REDIRECT_AS_ATTACHMENT, RETRIEVAL_MODE
from app.core.errors import StreamInterrupted, UpstreamNotFound
from app.schemas.file_record import FileRecord
from app.services.file_fetcher import open_upstream
from app.storage.base import StorageBackend

logger = logging.getLogger(__name__)

RETRIEVAL_MODES = ("local-stream", "redirect", "proxy-stream")


def content_disposition(filename: str) -> str:
    """Attachment header value; non-ASCII names use the RFC 5987 form."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


class RetrievalStrategy(ABC):
    """Turns a FileRecord into the response that delivers its bytes."""

    def __init__(self, storage: StorageBackend) -> None:
        self.storage = storage

    @abstractmethod
    async def serve(self, record: FileRecord) -> Response:
        ...

    async def aclose(self) -> None:
        """Release resources held across requests."""
        return None


class LocalStreamRetrieval(RetrievalStrategy):
    """Stream straight from local disk."""

    def __init__(self, storage: StorageBackend) -> None:
        super().__init__(storage)
        if not storage.is_local:
            raise ValueError("RETRIEVAL_MODE=local-stream requires STORAGE_BACKEND=local")

    async def serve(self, record: FileRecord) -> Response:
        path = self.storage.local_path(record.storageKey)
        if path is None or not path.is_file():
            logger.warning("Blob missing on disk for %s: %s", record.shortId, record.storageKey)
            raise UpstreamNotFound()
        return FileResponse(path, media_type=record.contentType, filename=record.originalName)


class RedirectRetrieval(RetrievalStrategy):
    """302 to the blob's public URL, optionally asking for an attachment."""

    def __init__(self, storage: StorageBackend, as_attachment: bool = REDIRECT_AS_ATTACHMENT) -> None:
        super().__init__(storage)
        self.as_attachment = as_attachment

    async def serve(self, record: FileRecord) -> Response:
        download_name = record.originalName if self.as_attachment else None
        url = self.storage.public_url(record.storageKey, download_name=download_name)
        return RedirectResponse(url, status_code=302)


class ProxyStreamRetrieval(RetrievalStrategy):
    """Fetch the blob server-side and pipe it through as a download."""

    def __init__(
        self,
        storage: StorageBackend,
        timeout: float = PROXY_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(storage)
        if storage.is_local and not storage.public_url("").startswith(("http://", "https://")):
            raise ValueError("RETRIEVAL_MODE=proxy-stream on local storage requires an absolute LOCAL_FILES_BASE_URL")
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True)

    async def serve(self, record: FileRecord) -> Response:
        upstream = await open_upstream(self.client, self.storage.public_url(record.storageKey))
        return StreamingResponse(
            self._relay(upstream, record.shortId),
            media_type=record.contentType,
            headers={"Content-Disposition": content_disposition(record.originalName)},
            background=BackgroundTask(upstream.aclose),
        )

    async def _relay(self, upstream: httpx.Response, short_id: str) -> AsyncIterator[bytes]:
        try:
            async for chunk in upstream.aiter_bytes():
                yield chunk
        except httpx.HTTPError as exc:
            # Headers are already sent; all we can do is drop the connection
            logger.exception("Upstream stream failed mid-transfer for %s", short_id)
            raise StreamInterrupted(short_id) from exc
        finally:
            await upstream.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()


def build_retrieval(storage: StorageBackend, mode: str = RETRIEVAL_MODE) -> RetrievalStrategy:
    """Create the strategy named by RETRIEVAL_MODE."""
    if mode == "local-stream":
        return LocalStreamRetrieval(storage)
    if mode == "redirect":
        return RedirectRetrieval(storage)
    if mode == "proxy-stream":
        return ProxyStreamRetrieval(storage)
    raise ValueError(f"Unknown RETRIEVAL_MODE {mode!r}; expected one of {', '.join(RETRIEVAL_MODES)}")
