"""Tests for the upload protocol: id resolution, blob write, commit and rollback."""

import logging

import pytest

from app.core.errors import FileLinkError, FileTooLarge, InvalidCustomName, NameTaken
from app.schemas.file_record import FileRecord
from app.services.file_links import create_file_link
from conftest import FixedIdRegistry, InMemoryRegistry, InMemoryStorage, StaleReadRegistry


def _existing(short_id):
    return FileRecord(
        shortId=short_id,
        originalName="old.txt",
        fileUrl="https://blobs.example.test/old",
        storageKey="old",
        contentType="text/plain",
        resourceKind="raw",
    )


@pytest.mark.asyncio
async def test_generated_id_upload_commits_record(registry, storage):
    record = await create_file_link(
        registry=registry,
        storage=storage,
        filename="cat.png",
        content=b"\x89PNG",
        content_type="image/png",
    )
    assert len(record.shortId) == 8
    assert registry.records[record.shortId] == record
    assert storage.blobs[record.storageKey] == b"\x89PNG"
    assert record.resourceKind == "image"
    assert record.fileSize == 4
    assert record.originalName == "cat.png"


@pytest.mark.asyncio
async def test_custom_name_is_sanitized(registry, storage):
    record = await create_file_link(
        registry=registry, storage=storage, filename="a.txt", content=b"a", custom_name="  my file!  "
    )
    assert record.shortId == "my-file"


@pytest.mark.asyncio
async def test_empty_custom_name_means_generated(registry, storage):
    record = await create_file_link(
        registry=registry, storage=storage, filename="a.txt", content=b"a", custom_name=""
    )
    assert len(record.shortId) == 8


@pytest.mark.asyncio
async def test_invalid_custom_name_writes_nothing(registry, storage):
    with pytest.raises(InvalidCustomName):
        await create_file_link(
            registry=registry, storage=storage, filename="a.txt", content=b"a", custom_name="!!!"
        )
    assert storage.writes == 0
    assert registry.commit_attempts == 0


@pytest.mark.asyncio
async def test_taken_name_fails_fast_without_write(registry, storage):
    registry.records["demo"] = _existing("demo")
    with pytest.raises(NameTaken):
        await create_file_link(
            registry=registry, storage=storage, filename="a.txt", content=b"a", custom_name="demo"
        )
    assert storage.writes == 0


@pytest.mark.asyncio
async def test_commit_conflict_deletes_written_blob():
    registry = StaleReadRegistry()
    registry.records["demo"] = _existing("demo")
    storage = InMemoryStorage()
    with pytest.raises(NameTaken):
        await create_file_link(
            registry=registry, storage=storage, filename="a.txt", content=b"a", custom_name="demo"
        )
    assert storage.writes == 1
    assert len(storage.deleted) == 1
    assert storage.blobs == {}
    assert registry.records["demo"].originalName == "old.txt"


@pytest.mark.asyncio
async def test_failed_cleanup_still_reports_name_taken(caplog):
    registry = StaleReadRegistry()
    registry.records["demo"] = _existing("demo")
    storage = InMemoryStorage(fail_delete=True)
    with caplog.at_level(logging.ERROR, logger="app.services.file_links"):
        with pytest.raises(NameTaken):
            await create_file_link(
                registry=registry, storage=storage, filename="a.txt", content=b"a", custom_name="demo"
            )
    assert "Failed to delete orphaned blob" in caplog.text


@pytest.mark.asyncio
async def test_generated_id_collision_is_retried():
    registry = FixedIdRegistry(["dupe0001", "fresh001"])
    registry.records["dupe0001"] = _existing("dupe0001")
    storage = InMemoryStorage()
    record = await create_file_link(registry=registry, storage=storage, filename="a.txt", content=b"a")
    assert record.shortId == "fresh001"
    assert storage.writes == 1
    assert storage.deleted == []


@pytest.mark.asyncio
async def test_generated_id_attempts_exhausted_cleans_up():
    registry = FixedIdRegistry(["dupe0001"] * 3)
    registry.records["dupe0001"] = _existing("dupe0001")
    storage = InMemoryStorage()
    with pytest.raises(FileLinkError):
        await create_file_link(
            registry=registry, storage=storage, filename="a.txt", content=b"a", max_attempts=3
        )
    assert registry.commit_attempts == 3
    assert storage.blobs == {}


@pytest.mark.asyncio
async def test_unexpected_commit_error_cleans_up_and_propagates():
    class BrokenRegistry(InMemoryRegistry):
        async def commit(self, record):
            raise ConnectionError("database unreachable")

    storage = InMemoryStorage()
    with pytest.raises(ConnectionError):
        await create_file_link(registry=BrokenRegistry(), storage=storage, filename="a.txt", content=b"a")
    assert storage.blobs == {}
    assert len(storage.deleted) == 1


@pytest.mark.asyncio
async def test_blob_write_failure_commits_nothing(registry):
    class FailingStorage(InMemoryStorage):
        async def upload(self, content, key, content_type=None):
            raise OSError("disk full")

    with pytest.raises(OSError):
        await create_file_link(registry=registry, storage=FailingStorage(), filename="a.txt", content=b"a")
    assert registry.records == {}
    assert registry.commit_attempts == 0


@pytest.mark.asyncio
async def test_oversized_upload_rejected_before_write(registry, storage):
    with pytest.raises(FileTooLarge) as exc_info:
        await create_file_link(
            registry=registry, storage=storage, filename="a.txt", content=b"abc", max_size=2
        )
    assert exc_info.value.message == "File too large. Max size: 2 bytes"
    assert storage.writes == 0
    assert registry.commit_attempts == 0


@pytest.mark.asyncio
async def test_upload_at_size_limit_is_accepted(registry, storage):
    record = await create_file_link(
        registry=registry, storage=storage, filename="a.txt", content=b"abc", max_size=3
    )
    assert record.fileSize == 3
