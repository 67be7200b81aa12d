"""Dependency injection factories for API v1."""

from datetime import timedelta
from functools import lru_cache
from typing import Callable

from core.config import settings
from domain.services.availability_service import AvailabilityService
from domain.services.backfill_service import BackfillService
from domain.services.handle_events import LogHandleEventPublisher
from domain.services.handle_service import HandleService
from domain.services.reserved_registry import ReservedRegistry
from domain.services.search_service import SearchService
from infrastructure.database.session import async_session_factory, read_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork

# Replaced at startup by the registry loaded from the database
_reserved_registry: ReservedRegistry = ReservedRegistry.default()


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


def get_read_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for Unit of Work instances on the read replica."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(read_session_factory)

    return factory


def get_reserved_registry() -> ReservedRegistry:
    return _reserved_registry


def set_reserved_registry(registry: ReservedRegistry) -> None:
    """Install a new registry and drop services built with the old one."""
    global _reserved_registry
    _reserved_registry = registry
    get_availability_service.cache_clear()
    get_handle_service.cache_clear()
    get_backfill_service.cache_clear()


@lru_cache
def get_availability_service() -> AvailabilityService:
    """Get Availability service instance."""
    return AvailabilityService(
        get_uow_factory(),
        get_reserved_registry(),
        tag_length=settings.handle_suggestion_tag_length,
    )


@lru_cache
def get_handle_service() -> HandleService:
    """Get Handle service instance."""
    return HandleService(
        get_uow_factory(),
        availability_service=get_availability_service(),
        event_publisher=LogHandleEventPublisher(),
        rename_cooldown=timedelta(days=settings.handle_rename_cooldown_days),
    )


@lru_cache
def get_search_service() -> SearchService:
    """Get Search service instance."""
    return SearchService(
        get_read_uow_factory(),
        default_limit=settings.handle_search_default_limit,
        max_limit=settings.handle_search_max_limit,
    )


@lru_cache
def get_backfill_service() -> BackfillService:
    """Get Backfill service instance."""
    return BackfillService(
        get_uow_factory(),
        get_reserved_registry(),
        max_attempts=settings.handle_backfill_max_attempts,
    )
