"""Reserved handle repository protocol."""

from typing import Protocol

from domain.entities.handle import ReservedHandle


class IReservedHandleRepository(Protocol):
    """Read-only access to the reserved handle table."""

    async def list_all(self) -> list[ReservedHandle]:
        """All reserved handles."""
        ...
