import asyncio
import random

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.registry.base import FileRegistry, IdentifierConflict
from app.schemas.file_record import FileRecord
from app.services.retrieval import RedirectRetrieval
from app.storage.base import StorageBackend

BLOB_HOST = "https://blobs.example.test"


class InMemoryRegistry(FileRegistry):
    """Registry double. commit() checks and inserts without awaiting in between, so it is atomic under asyncio."""

    def __init__(self, rng=None):
        super().__init__(rng=rng)
        self.records = {}
        self.commit_attempts = 0

    async def find(self, short_id):
        return self.records.get(short_id)

    async def commit(self, record: FileRecord):
        self.commit_attempts += 1
        if record.shortId in self.records:
            raise IdentifierConflict(record.shortId)
        self.records[record.shortId] = record


class StaleReadRegistry(InMemoryRegistry):
    """find() never sees existing records, as when a concurrent commit lands after the pre-check."""

    async def find(self, short_id):
        return None


class FixedIdRegistry(InMemoryRegistry):
    """Hands out candidate ids from a fixed list."""

    def __init__(self, ids):
        super().__init__()
        self._ids = iter(ids)

    def generate_candidate_id(self):
        return next(self._ids)


class InMemoryStorage(StorageBackend):
    """Blob store double tracking every write and delete."""

    def __init__(self, fail_delete=False):
        self.blobs = {}
        self.content_types = {}
        self.writes = 0
        self.deleted = []
        self.fail_delete = fail_delete

    async def upload(self, content, key, content_type=None):
        # Yield so concurrent uploads interleave
        await asyncio.sleep(0)
        self.writes += 1
        self.blobs[key] = content
        self.content_types[key] = content_type
        return self.public_url(key)

    async def delete(self, key):
        if self.fail_delete:
            raise RuntimeError("storage unavailable")
        self.deleted.append(key)
        self.blobs.pop(key, None)

    def public_url(self, key, download_name=None):
        url = f"{BLOB_HOST}/{key}"
        if download_name:
            url += f"?download={download_name}"
        return url


@pytest.fixture
def registry():
    return InMemoryRegistry(rng=random.Random(1234))


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def app(registry, storage):
    return create_app(registry=registry, storage=storage, retrieval=RedirectRetrieval(storage))


@pytest.fixture
def client(app):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def upload(client, content=b"hello world", filename="hello.txt", content_type="text/plain", **data):
    """POST /upload with a single file part."""
    return client.post(
        "/upload",
        files={"file": (filename, content, content_type)},
        data=data,
    )
