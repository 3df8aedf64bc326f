"""Pydantic schemas for file records and the upload API."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, Field

ResourceKind = Literal["image", "video", "raw"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileRecord(BaseModel):
    """Registry entry mapping a short id to a stored blob."""

    shortId: str
    originalName: str
    fileUrl: str = Field(..., description="Local /files/ path or the provider's public URL")
    storageKey: str = Field(..., description="Key the blob was written under; used for delete and URLs")
    contentType: str
    resourceKind: ResourceKind
    fileSize: int = 0
    createdAt: datetime = Field(default_factory=_utcnow)

    model_config = {"from_attributes": True, "frozen": True}


class UploadLinkResponse(BaseModel):
    """Shareable link returned by POST /upload."""

    link: str
