"""Handle search for autocomplete and mention resolution."""

from collections.abc import Callable

import structlog
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import StorageError
from domain.entities.handle import HandleAccount, HandleSearchResult, MatchType
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.handle_validator import normalize_handle

logger = structlog.get_logger()


def classify_match(handle: str, query: str) -> MatchType:
    """How ``handle`` matches an already-normalized query."""
    lowered = handle.lower()
    if lowered == query:
        return MatchType.EXACT
    if lowered.startswith(query):
        return MatchType.PREFIX
    return MatchType.PARTIAL


def search_rank(handle: str, query: str) -> tuple[int, int, int, str]:
    """Sort key: exact, then prefix, then shorter, then lexicographic."""
    lowered = handle.lower()
    return (
        0 if lowered == query else 1,
        0 if lowered.startswith(query) else 1,
        len(handle),
        handle,
    )


class SearchService:
    """Read-only, case-insensitive substring search over assigned handles.

    May be wired to a read replica; stale results only affect suggestions.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        default_limit: int = 10,
        max_limit: int = 50,
    ) -> None:
        self._uow_factory = uow_factory
        self._default_limit = default_limit
        self._max_limit = max_limit

    async def search_handles(
        self, raw_query: str, limit: int | None = None
    ) -> list[HandleSearchResult]:
        query = normalize_handle(raw_query or "")
        if not query:
            return []

        if limit is None:
            limit = self._default_limit
        limit = min(limit, self._max_limit)
        if limit <= 0:
            return []

        try:
            async with self._uow_factory() as uow:
                accounts = await uow.profiles.search_by_handle(query, limit)
        except SQLAlchemyError as exc:
            logger.error("handle_storage_error", operation="search_handles", error=str(exc))
            raise StorageError() from exc

        # Same key as the store's ORDER BY; applied again for stores that ignore it.
        matches = sorted(
            (a for a in accounts if a.handle and query in a.handle.lower()),
            key=lambda a: search_rank(a.handle or "", query),
        )
        return [self._to_result(account, query) for account in matches[:limit]]

    @staticmethod
    def _to_result(account: HandleAccount, query: str) -> HandleSearchResult:
        handle = account.handle or ""
        return HandleSearchResult(
            profile_id=account.id,
            handle=handle,
            match_type=classify_match(handle, query),
            first_name=account.first_name,
            last_name=account.last_name,
            display_name=account.display_name,
            avatar_url=account.avatar_url,
            sport=account.sport,
            school=account.school,
        )
