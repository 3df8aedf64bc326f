"""Abstract identifier registry."""

import random
from abc import ABC, abstractmethod

from app.core.short_ids import generate_short_id
from app.schemas.file_record import FileRecord


class IdentifierConflict(Exception):
    """Raised by commit() when the short id is already registered."""

    def __init__(self, short_id: str) -> None:
        self.short_id = short_id
        super().__init__(f"Short id already registered: {short_id}")


class FileRegistry(ABC):
    """Durable mapping from short id to FileRecord. Uniqueness is enforced at commit time."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng

    @abstractmethod
    async def find(self, short_id: str) -> FileRecord | None:
        """Return the record for short_id, or None."""
        ...

    @abstractmethod
    async def commit(self, record: FileRecord) -> None:
        """
        Insert record. Raises IdentifierConflict if record.shortId exists.
        Must be atomic against concurrent commits of the same id; a prior find()
        is never enough.
        """
        ...

    def generate_candidate_id(self) -> str:
        return generate_short_id(rng=self._rng)
