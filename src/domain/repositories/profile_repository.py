"""Profile handle repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.handle import HandleAccount


class IProfileRepository(Protocol):
    """Repository interface for the handle fields of account rows."""

    async def get(self, id: UUID) -> HandleAccount | None:
        """Get an account by ID."""
        ...

    async def get_for_update(self, id: UUID) -> HandleAccount | None:
        """Get an account by ID, locking its row until the transaction ends."""
        ...

    async def get_by_handle(self, normalized_handle: str) -> HandleAccount | None:
        """Get the account currently holding a handle (case-insensitive)."""
        ...

    async def handle_exists(
        self, normalized_handle: str, exclude_profile_id: UUID | None = None
    ) -> bool:
        """Check whether any other account holds a handle (case-insensitive)."""
        ...

    async def update_handle(
        self,
        id: UUID,
        handle: str,
        handle_updated_at: datetime | None,
        handle_change_count: int,
    ) -> HandleAccount:
        """Write the handle fields of an account."""
        ...

    async def list_ids_missing_handle(self) -> list[UUID]:
        """IDs of accounts without a handle, oldest account first."""
        ...

    async def search_by_handle(self, query: str, limit: int) -> list[HandleAccount]:
        """Accounts whose handle contains the query, best match first."""
        ...
