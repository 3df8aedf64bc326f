"""Create file links: resolve the short id, store the blob, commit the record.

Order within one upload is blob write, then registry commit, then response.
The registry's unique constraint decides races on the same id; the find()
done up front only saves a blob write in the common case. Whenever a commit
does not go through, the blob just written is deleted so nothing is orphaned.
"""

import logging
import uuid

from app.config import MAX_UPLOAD_SIZE, SHORT_ID_MAX_ATTEMPTS
from app.core.errors import FileLinkError, FileTooLarge, InvalidCustomName, NameTaken
from app.core.short_ids import sanitize_custom_name
from app.core.upload_validation import detect_content_type, detect_resource_kind, validate_upload_size
from app.registry.base import FileRegistry, IdentifierConflict
from app.schemas.file_record import FileRecord
from app.storage.base import StorageBackend

logger = logging.getLogger(__name__)


async def create_file_link(
    *,
    registry: FileRegistry,
    storage: StorageBackend,
    filename: str,
    content: bytes,
    content_type: str | None = None,
    custom_name: str | None = None,
    max_attempts: int = SHORT_ID_MAX_ATTEMPTS,
    max_size: int = MAX_UPLOAD_SIZE,
) -> FileRecord:
    """
    Store one uploaded file under a custom or generated short id.
    Raises InvalidCustomName / FileTooLarge before any write, NameTaken on conflict.
    """
    size_error = validate_upload_size(len(content), max_size)
    if size_error:
        raise FileTooLarge(size_error)

    short_id: str | None = None
    if custom_name:
        short_id = sanitize_custom_name(custom_name)
        if not short_id:
            raise InvalidCustomName()
        if await registry.find(short_id) is not None:
            raise NameTaken()

    filename = filename or "file"
    content_type = detect_content_type(filename, content_type)
    key = storage.key_for_upload(filename, uuid.uuid4().hex[:12])
    file_url = await storage.upload(content, key, content_type=content_type)

    attempts = 1 if short_id is not None else max(1, max_attempts)
    for attempt in range(1, attempts + 1):
        record = FileRecord(
            shortId=short_id if short_id is not None else registry.generate_candidate_id(),
            originalName=filename,
            fileUrl=file_url,
            storageKey=key,
            contentType=content_type,
            resourceKind=detect_resource_kind(content_type),
            fileSize=len(content),
        )
        try:
            await registry.commit(record)
        except IdentifierConflict:
            if short_id is not None:
                await _discard_blob(storage, key)
                raise NameTaken()
            logger.warning("Generated short id collided (attempt %d/%d): %s", attempt, attempts, record.shortId)
            continue
        except Exception:
            await _discard_blob(storage, key)
            raise
        logger.info("Registered %s -> %s (%s, %d bytes)", record.shortId, key, content_type, record.fileSize)
        return record

    await _discard_blob(storage, key)
    raise FileLinkError("Could not allocate a unique link. Please try again.")


async def _discard_blob(storage: StorageBackend, key: str) -> None:
    """Best-effort delete of a blob whose record was never committed."""
    try:
        await storage.delete(key)
    except Exception:
        logger.exception("Failed to delete orphaned blob %s", key)
