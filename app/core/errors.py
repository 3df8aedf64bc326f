"""Domain errors and the FastAPI exception handlers that render them.

Upload errors are returned as JSON ``{"error": message}``. Errors raised while
serving ``/file/...`` are rendered as a small HTML page, since that URL is
opened directly by browsers.
"""

import html
import logging

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected server error occurred."


class FileLinkError(Exception):
    """Base for errors with a client-visible status and message."""

    status_code = 500
    message = INTERNAL_ERROR_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class NoFileUploaded(FileLinkError):
    status_code = 400
    message = "No file was uploaded."


class InvalidCustomName(FileLinkError):
    status_code = 400
    message = "Custom name contains invalid characters."


class NameTaken(FileLinkError):
    status_code = 409
    message = "This custom link name is already taken."


class FileTooLarge(FileLinkError):
    status_code = 413
    message = "File too large."


class RetrievalError(FileLinkError):
    """Errors on the download route; rendered as HTML."""


class FileNotFound(RetrievalError):
    status_code = 404
    message = "File not found"


class UpstreamNotFound(RetrievalError):
    status_code = 404
    message = "File not found in storage"


class UpstreamTimeout(RetrievalError):
    status_code = 504
    message = "Timed out while fetching the file from storage. Please try again."


class StreamInterrupted(Exception):
    """Upstream body failed after the response started; already logged where it happened."""

    def __init__(self, short_id: str) -> None:
        self.short_id = short_id
        super().__init__(f"Upstream stream interrupted for {short_id}")


def _wants_html(request: Request) -> bool:
    return request.url.path.startswith("/file/")


def _html_error(status_code: int, message: str) -> HTMLResponse:
    return HTMLResponse(f"<h1>{html.escape(message)}</h1>", status_code=status_code)


def _file_link_exception_handler(request: Request, exc: FileLinkError) -> Response:
    if isinstance(exc, RetrievalError) or _wants_html(request):
        return _html_error(exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Keep the {"error": ...} shape for framework errors (404 routes, 405, ...)."""
    if _wants_html(request):
        return _html_error(exc.status_code, str(exc.detail))
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def _generic_exception_handler(request: Request, exc: Exception) -> Response:
    if not isinstance(exc, StreamInterrupted):
        logger.error("An unhandled error occurred: %s", exc, exc_info=exc)
    if _wants_html(request):
        return _html_error(500, "Something went wrong while fetching this file.")
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


def register_exception_handlers(app: FastAPI) -> None:
    """Register FileLinkError, HTTPException and catch-all handlers on the app."""
    app.add_exception_handler(FileLinkError, _file_link_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
