"""Local filesystem storage."""

from pathlib import Path
from urllib.parse import quote

import aiofiles
import aiofiles.os

from app.config import LOCAL_FILES_BASE_URL, LOCAL_STORAGE_PATH
from app.storage.base import StorageBackend


class LocalStorage(StorageBackend):
    """Store files on local disk. fileUrl is a path like /files/unique_name."""

    is_local = True

    def __init__(self, root: str | Path | None = None, base_url: str | None = None) -> None:
        self.root = Path(root if root is not None else LOCAL_STORAGE_PATH).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.base_url = (LOCAL_FILES_BASE_URL if base_url is None else base_url).rstrip("/")

    def _path(self, key: str) -> Path:
        key = key.replace("..", "").lstrip("/")
        resolved = (self.root / key).resolve()
        # Prevent path traversal
        if not resolved.is_relative_to(self.root):
            raise ValueError("Invalid storage key")
        return resolved

    async def upload(
        self,
        content: bytes,
        key: str,
        content_type: str | None = None,
    ) -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            await aiofiles.os.remove(path)

    def public_url(self, key: str, download_name: str | None = None) -> str:
        key = key.lstrip("/")
        url = f"{self.base_url}/{key}" if self.base_url else f"/files/{key}"
        if download_name:
            url += f"?download={quote(download_name)}"
        return url

    def local_path(self, key: str) -> Path | None:
        return self._path(key)
