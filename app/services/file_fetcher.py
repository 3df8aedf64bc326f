"""Fetch blob bytes from a remote storage URL, streaming."""

import logging

import httpx

from app.core.errors import UpstreamNotFound, UpstreamTimeout

logger = logging.getLogger(__name__)


async def open_upstream(client: httpx.AsyncClient, file_url: str) -> httpx.Response:
    """
    Start a streamed GET of file_url and return the response with headers read.
    The caller must aclose() it. Maps a timeout to UpstreamTimeout and a 404 to
    UpstreamNotFound; other failures propagate.
    """
    file_url = file_url.strip()
    if not (file_url.startswith("http://") or file_url.startswith("https://")):
        raise ValueError(f"Unsupported file_url format: {file_url[:50]}")
    request = client.build_request("GET", file_url)
    try:
        resp = await client.send(request, stream=True)
    except httpx.TimeoutException as exc:
        logger.warning("Upstream fetch timed out: %s", file_url)
        raise UpstreamTimeout() from exc
    if resp.status_code == 404:
        await resp.aclose()
        raise UpstreamNotFound()
    if resp.is_error:
        await resp.aclose()
        logger.warning("Upstream fetch failed with %s: %s", resp.status_code, file_url)
        resp.raise_for_status()
    return resp
