"""Handle history repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.handle import HandleHistoryRecord


class IHandleHistoryRepository(Protocol):
    """Append-only repository for handle rename history."""

    async def add(self, record: HandleHistoryRecord) -> HandleHistoryRecord:
        """Append a history record."""
        ...

    async def list_for_profile(
        self, profile_id: UUID, limit: int = 50
    ) -> list[HandleHistoryRecord]:
        """History of a profile, newest first."""
        ...
