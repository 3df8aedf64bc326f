"""Supabase Storage backend."""

import asyncio

from supabase import create_client

from app.config import SUPABASE_BUCKET, SUPABASE_SERVICE_ROLE_KEY, SUPABASE_URL
from app.storage.base import StorageBackend


class SupabaseStorage(StorageBackend):
    """Store files in a Supabase Storage bucket. Returns the public URL."""

    def __init__(self) -> None:
        if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
            raise RuntimeError(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set when STORAGE_BACKEND=supabase"
            )
        self.client = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)
        self.bucket = SUPABASE_BUCKET

    async def upload(
        self,
        content: bytes,
        key: str,
        content_type: str | None = None,
    ) -> str:
        opts: dict = {}
        if content_type:
            opts["content-type"] = content_type
        # The sync SDK does blocking HTTP; keep it off the event loop
        await asyncio.to_thread(self.client.storage.from_(self.bucket).upload, key, content, opts)
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self.client.storage.from_(self.bucket).remove, [key])

    def public_url(self, key: str, download_name: str | None = None) -> str:
        bucket = self.client.storage.from_(self.bucket)
        if download_name:
            return bucket.get_public_url(key, {"download": download_name})
        return bucket.get_public_url(key)
