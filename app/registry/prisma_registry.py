"""Prisma-backed identifier registry (FileRecord table, shortId @unique)."""

import logging
import random
from typing import Any

from prisma.errors import UniqueViolationError

from app.registry.base import FileRegistry, IdentifierConflict
from app.schemas.file_record import FileRecord

logger = logging.getLogger(__name__)


class PrismaRegistry(FileRegistry):
    """Store records through a connected Prisma client."""

    def __init__(self, db: Any, rng: random.Random | None = None) -> None:
        super().__init__(rng=rng)
        self.db = db

    async def find(self, short_id: str) -> FileRecord | None:
        row = await self.db.filerecord.find_unique(where={"shortId": short_id})
        if row is None:
            return None
        return FileRecord.model_validate(row)

    async def commit(self, record: FileRecord) -> None:
        try:
            await self.db.filerecord.create(data=record.model_dump())
        except UniqueViolationError as exc:
            logger.info("Short id already registered: %s", record.shortId)
            raise IdentifierConflict(record.shortId) from exc
