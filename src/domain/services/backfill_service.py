"""One-time handle backfill for accounts created before handles existed."""

import asyncio
import re
from collections.abc import Callable
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.exceptions import HandleConflictError, StorageError
from domain.entities.handle import HandleAccount
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.handle_service import is_unique_violation
from domain.services.handle_validator import HANDLE_MAX_LENGTH, HANDLE_MIN_LENGTH
from domain.services.reserved_registry import ReservedRegistry

logger = structlog.get_logger()

SHORT_HANDLE_FILLER = "user"

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def _alnum(value: str | None) -> str:
    return _NON_ALNUM.sub("", value or "")


def derive_handle_base(account: HandleAccount) -> str:
    """Derive the preferred handle for an account from its existing fields.

    Priority: legacy username (``full_name``), first + last name, first
    name, email local part. Sources that are empty once non-alphanumerics
    are stripped are skipped.
    """
    first = _alnum(account.first_name)
    last = _alnum(account.last_name)
    email_local = _alnum(account.email.split("@", 1)[0]) if account.email else ""

    candidates = [
        _alnum(account.full_name),
        first + last if first and last else "",
        first,
        email_local,
    ]
    base = next((c for c in candidates if c), "").lower()

    if len(base) < HANDLE_MIN_LENGTH:
        base += SHORT_HANDLE_FILLER
    return base[:HANDLE_MAX_LENGTH]


def with_counter_suffix(base: str, counter: int) -> str:
    """Append ``counter``, truncating ``base`` so the result still fits."""
    suffix = str(counter)
    return f"{base[:HANDLE_MAX_LENGTH - len(suffix)]}{suffix}"


class BackfillService:
    """Assigns a derived handle to every account that has none.

    Accounts are processed oldest first, one transaction per account, so
    re-runs resolve collisions the same way. Concurrent runs within this
    process are serialized; run a single worker across processes.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        registry: ReservedRegistry,
        max_attempts: int = 3,
    ) -> None:
        self._uow_factory = uow_factory
        self._registry = registry
        self._max_attempts = max_attempts
        self._lock = asyncio.Lock()

    async def backfill_missing_handles(self) -> int:
        """Assign handles to all accounts lacking one. Returns how many were assigned."""
        async with self._lock:
            async with self._uow_factory() as uow:
                profile_ids = await uow.profiles.list_ids_missing_handle()

            assigned = 0
            for profile_id in profile_ids:
                if await self._assign_with_retry(profile_id):
                    assigned += 1

        logger.info(
            "handle_backfill_completed",
            candidates=len(profile_ids),
            assigned=assigned,
        )
        return assigned

    async def _assign_with_retry(self, profile_id: UUID) -> str | None:
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await self._assign(profile_id)
            except HandleConflictError as exc:
                logger.info(
                    "handle_backfill_conflict",
                    profile_id=str(profile_id),
                    handle=exc.handle,
                    attempt=attempt,
                )

        logger.warning("handle_backfill_skipped", profile_id=str(profile_id))
        return None

    async def _assign(self, profile_id: UUID) -> str | None:
        candidate = ""
        async with self._uow_factory() as uow:
            try:
                account = await uow.profiles.get_for_update(profile_id)
                if not account or account.handle is not None:
                    # Deleted, or a handle was chosen since the scan.
                    return None

                base = derive_handle_base(account)
                candidate = base
                counter = 0
                while await self._is_unavailable(uow, candidate):
                    counter += 1
                    candidate = with_counter_suffix(base, counter)

                # An initial assignment: cooldown fields stay untouched.
                await uow.profiles.update_handle(
                    profile_id,
                    handle=candidate,
                    handle_updated_at=account.handle_updated_at,
                    handle_change_count=account.handle_change_count,
                )
                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                if is_unique_violation(exc):
                    raise HandleConflictError(candidate) from exc
                raise StorageError() from exc
            except SQLAlchemyError as exc:
                await uow.rollback()
                raise StorageError() from exc

        logger.info(
            "handle_backfill_assigned",
            profile_id=str(profile_id),
            handle=candidate,
        )
        return candidate

    async def _is_unavailable(self, uow: IUnitOfWork, candidate: str) -> bool:
        if self._registry.is_reserved(candidate):
            return True
        return await uow.profiles.handle_exists(candidate)  # type: ignore[no-any-return]
