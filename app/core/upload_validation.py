"""Content-type and resource-kind detection for uploads."""

import mimetypes

from app.config import MAX_UPLOAD_SIZE
from app.schemas.file_record import ResourceKind

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Top-level MIME type -> resourceKind; anything else is "raw"
MIME_PREFIX_TO_KIND: dict[str, ResourceKind] = {
    "image": "image",
    "video": "video",
}


def detect_content_type(filename: str, content_type: str | None) -> str:
    """Use the declared content type, else guess from the extension."""
    if content_type:
        base_type = content_type.split(";")[0].strip().lower()
        if base_type and base_type != DEFAULT_CONTENT_TYPE:
            return content_type.strip()
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_CONTENT_TYPE


def detect_resource_kind(content_type: str) -> ResourceKind:
    """Classify a MIME type as image, video or raw."""
    prefix = content_type.split(";")[0].strip().lower().split("/", 1)[0]
    return MIME_PREFIX_TO_KIND.get(prefix, "raw")


def validate_upload_size(size: int, max_size: int = MAX_UPLOAD_SIZE) -> str | None:
    """Return an error message if the upload is too large, else None."""
    if size > max_size:
        if max_size < 1024 * 1024:
            return f"File too large. Max size: {max_size} bytes"
        return f"File too large. Max size: {max_size // (1024 * 1024)} MB"
    return None
