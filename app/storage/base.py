"""Abstract storage backend."""

from abc import ABC, abstractmethod
from pathlib import Path


class StorageBackend(ABC):
    """Interface for blob storage (local or cloud)."""

    is_local = False

    @abstractmethod
    async def upload(
        self,
        content: bytes,
        key: str,
        content_type: str | None = None,
    ) -> str:
        """
        Store file and return a URL or path used to reference it.
        key is a unique name like uniqueid_filename.
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove file at key. Key is the same one passed to upload."""
        ...

    @abstractmethod
    def public_url(self, key: str, download_name: str | None = None) -> str:
        """
        URL a client (or the proxy) can GET the blob from.
        With download_name, ask the provider to serve it as an attachment.
        """
        ...

    def local_path(self, key: str) -> Path | None:
        """Filesystem path for key, for backends that keep blobs on local disk."""
        return None

    def key_for_upload(self, filename: str, unique_id: str) -> str:
        """Build storage key: unique_id_filename to avoid collisions."""
        safe_name = "".join(c for c in filename if (c.isascii() and c.isalnum()) or c in "._-")[:64]
        return f"{unique_id}_{safe_name}" if safe_name else unique_id
