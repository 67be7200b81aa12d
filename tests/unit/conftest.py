"""Shared fixtures for unit tests."""

from collections.abc import Callable
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.handle import HandleAccount
from domain.services.reserved_registry import ReservedRegistry


class FakeUnitOfWork:
    """Fake Unit of Work with repository mocks for unit testing."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.handle_history = AsyncMock()
        self.reserved_handles = AsyncMock()
        self.profiles.handle_exists.return_value = False
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class FixedRandom:
    """Deterministic suggestion randomness."""

    def __init__(self, tag: str = "abc", number: int = 42) -> None:
        self._tag = tag
        self._number = number

    def tag(self, length: int) -> str:
        return self._tag[:length]

    def number(self, low: int, high: int) -> int:
        return self._number


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(uow: FakeUnitOfWork) -> Callable[[], FakeUnitOfWork]:
    """Factory that always hands out the same fake, so tests can inspect it."""
    return lambda: uow


@pytest.fixture
def registry() -> ReservedRegistry:
    return ReservedRegistry.default()


@pytest.fixture
def fixed_random() -> FixedRandom:
    return FixedRandom()


@pytest.fixture
def profile_id() -> UUID:
    """A random profile ID."""
    return uuid4()


@pytest.fixture
def make_account(profile_id: UUID) -> Callable[..., HandleAccount]:
    """Build a HandleAccount; defaults to the ``profile_id`` fixture."""

    def _make_account(**fields: Any) -> HandleAccount:
        fields.setdefault("id", profile_id)
        fields.setdefault("email", "tom@example.com")
        fields.setdefault("created_at", datetime(2026, 1, 1))
        return HandleAccount(**fields)

    return _make_account
