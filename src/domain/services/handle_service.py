"""Handle service layer: renames, history and lookups."""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.exceptions import (
    HandleConflictError,
    HandleNotFoundError,
    ProfileNotFoundError,
    StorageError,
)
from domain.entities.handle import (
    HandleAccount,
    HandleErrorCode,
    HandleHistoryRecord,
    HandleRenamedEvent,
    RenameResult,
)
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.availability_service import TAKEN_MESSAGE, AvailabilityService
from domain.services.handle_events import IHandleEventPublisher
from domain.services.handle_validator import display_handle, format_handle, validate_handle

logger = structlog.get_logger()

DEFAULT_RENAME_COOLDOWN = timedelta(days=7)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when an IntegrityError comes from a unique constraint or index."""
    orig = str(exc.orig).lower() if exc.orig else str(exc).lower()
    return "unique" in orig or "duplicate" in orig


class HandleService:
    """Service layer for handle renames and handle lookups."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        availability_service: AvailabilityService,
        event_publisher: Optional[IHandleEventPublisher] = None,
        rename_cooldown: timedelta = DEFAULT_RENAME_COOLDOWN,
        clock: Callable[[], datetime] = datetime.utcnow,
    ) -> None:
        self._uow_factory = uow_factory
        self._availability = availability_service
        self._events = event_publisher
        self._cooldown = rename_cooldown
        self._clock = clock

    async def rename_handle(self, profile_id: UUID, raw_new_handle: str) -> RenameResult:
        """Change a profile's handle.

        Business failures come back as a rejected RenameResult. A lost
        uniqueness race is retried once and then reported as taken; only
        storage failures raise.
        """
        try:
            return await self._rename_once(profile_id, raw_new_handle)
        except HandleConflictError as exc:
            logger.info(
                "handle_rename_conflict",
                profile_id=str(profile_id),
                handle=exc.handle,
                retrying=True,
            )

        try:
            return await self._rename_once(profile_id, raw_new_handle)
        except HandleConflictError as exc:
            logger.warning(
                "handle_rename_conflict",
                profile_id=str(profile_id),
                handle=exc.handle,
                retrying=False,
            )
            return RenameResult.rejected(
                HandleErrorCode.TAKEN,
                TAKEN_MESSAGE,
                suggestions=self._availability.taken_suggestions(exc.handle),
            )

    async def _rename_once(self, profile_id: UUID, raw_new_handle: str) -> RenameResult:
        now = self._clock()
        new_handle = display_handle(raw_new_handle)
        normalized = new_handle.lower()

        async with self._uow_factory() as uow:
            try:
                account = await uow.profiles.get_for_update(profile_id)
                if not account:
                    return self._rejected(
                        profile_id, RenameResult.rejected(HandleErrorCode.NOT_FOUND, "Profile not found")
                    )

                # Case-only change: cannot collide with anyone else's
                # lower-cased handle, so no cooldown, history or counter.
                if (
                    account.handle
                    and new_handle.isascii()
                    and account.handle.lower() == normalized
                ):
                    await uow.profiles.update_handle(
                        profile_id,
                        handle=new_handle,
                        handle_updated_at=account.handle_updated_at,
                        handle_change_count=account.handle_change_count,
                    )
                    await uow.commit()
                    logger.info(
                        "handle_case_updated",
                        profile_id=str(profile_id),
                        old_handle=account.handle,
                        new_handle=new_handle,
                    )
                    return RenameResult(
                        success=True,
                        message="Handle casing updated",
                        handle=new_handle,
                    )

                if account.handle_updated_at is not None:
                    next_eligible_at = account.handle_updated_at + self._cooldown
                    if now < next_eligible_at:
                        return self._rejected(
                            profile_id,
                            RenameResult.rejected(
                                HandleErrorCode.RATE_LIMITED,
                                f"You can only change your handle once every "
                                f"{self._cooldown.days} days. "
                                f"Next available: {next_eligible_at:%b %d, %Y}",
                                next_eligible_at=next_eligible_at,
                            ),
                        )

                availability = await self._availability.evaluate(
                    uow, raw_new_handle, exclude_profile_id=profile_id
                )
                if not availability.available:
                    return self._rejected(
                        profile_id,
                        RenameResult.rejected(
                            availability.error_code or HandleErrorCode.INVALID_FORMAT,
                            availability.reason,
                            suggestions=availability.suggestions,
                        ),
                    )

                old_handle = account.handle
                if old_handle is None:
                    # First handle: an assignment, not a counted rename.
                    await uow.profiles.update_handle(
                        profile_id,
                        handle=new_handle,
                        handle_updated_at=account.handle_updated_at,
                        handle_change_count=account.handle_change_count,
                    )
                else:
                    await uow.handle_history.add(
                        HandleHistoryRecord(
                            profile_id=profile_id,
                            old_handle=old_handle,
                            new_handle=normalized,
                            changed_at=now,
                        )
                    )
                    await uow.profiles.update_handle(
                        profile_id,
                        handle=new_handle,
                        handle_updated_at=now,
                        handle_change_count=account.handle_change_count + 1,
                    )

                await uow.commit()
            except IntegrityError as exc:
                await uow.rollback()
                if is_unique_violation(exc):
                    raise HandleConflictError(normalized) from exc
                raise StorageError() from exc
            except SQLAlchemyError as exc:
                await uow.rollback()
                logger.error("handle_storage_error", profile_id=str(profile_id), error=str(exc))
                raise StorageError() from exc

        logger.info(
            "handle_renamed",
            profile_id=str(profile_id),
            old_handle=old_handle,
            new_handle=new_handle,
            counted=old_handle is not None,
        )
        await self._publish(
            HandleRenamedEvent(
                profile_id=profile_id,
                old_handle=old_handle,
                new_handle=new_handle,
                changed_at=now,
            )
        )

        if old_handle is None:
            message = f"Handle set to {format_handle(new_handle)}"
        else:
            message = f"Handle updated to {format_handle(new_handle)}"
        return RenameResult(success=True, message=message, handle=new_handle)

    def _rejected(self, profile_id: UUID, result: RenameResult) -> RenameResult:
        logger.info(
            "handle_rename_rejected",
            profile_id=str(profile_id),
            error_code=result.error_code,
        )
        return result

    async def _publish(self, event: HandleRenamedEvent) -> None:
        if not self._events:
            return
        # The rename is already committed; a broken consumer must not undo it.
        try:
            await self._events.publish(event)
        except Exception:
            logger.exception("handle_event_publish_failed", profile_id=str(event.profile_id))

    async def get_profile_by_handle(self, raw_handle: str) -> HandleAccount:
        """Resolve an ``@handle`` to the profile that currently holds it."""
        validation = validate_handle(raw_handle)
        if not validation.valid:
            raise HandleNotFoundError(validation.normalized)

        try:
            async with self._uow_factory() as uow:
                account = await uow.profiles.get_by_handle(validation.normalized)
        except SQLAlchemyError as exc:
            raise self._storage_error("get_profile_by_handle", exc) from exc

        if not account:
            raise HandleNotFoundError(validation.normalized)
        return account

    async def get_handle_history(
        self, profile_id: UUID, limit: int = 50
    ) -> list[HandleHistoryRecord]:
        """A profile's own rename history, newest first."""
        try:
            async with self._uow_factory() as uow:
                account = await uow.profiles.get(profile_id)
                if not account:
                    raise ProfileNotFoundError(str(profile_id))
                return await uow.handle_history.list_for_profile(profile_id, limit=limit)  # type: ignore[no-any-return]
        except SQLAlchemyError as exc:
            raise self._storage_error("get_handle_history", exc) from exc

    async def suggest_handles(self, profile_id: UUID) -> list[str]:
        """Available handle ideas derived from the profile's name and email."""
        try:
            async with self._uow_factory() as uow:
                account = await uow.profiles.get(profile_id)
                if not account:
                    raise ProfileNotFoundError(str(profile_id))
                return await self._availability.suggest_for_account(uow, account)
        except SQLAlchemyError as exc:
            raise self._storage_error("suggest_handles", exc) from exc

    @staticmethod
    def _storage_error(operation: str, exc: SQLAlchemyError) -> StorageError:
        logger.error("handle_storage_error", operation=operation, error=str(exc))
        return StorageError()
