"""Publishing of handle rename events to external consumers."""

from typing import Protocol

import structlog

from domain.entities.handle import HandleRenamedEvent

logger = structlog.get_logger()


class IHandleEventPublisher(Protocol):
    """Receives rename events after the rename has committed."""

    async def publish(self, event: HandleRenamedEvent) -> None:
        ...


class LogHandleEventPublisher:
    """Publisher that only records events in the structured log."""

    async def publish(self, event: HandleRenamedEvent) -> None:
        logger.info(
            "handle_renamed_event",
            profile_id=str(event.profile_id),
            old_handle=event.old_handle,
            new_handle=event.new_handle,
            changed_at=event.changed_at.isoformat(),
        )
