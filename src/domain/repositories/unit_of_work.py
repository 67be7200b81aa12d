"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.handle_history_repository import IHandleHistoryRepository
from domain.repositories.profile_repository import IProfileRepository
from domain.repositories.reserved_handle_repository import IReservedHandleRepository


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    profiles: IProfileRepository
    handle_history: IHandleHistoryRepository
    reserved_handles: IReservedHandleRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
