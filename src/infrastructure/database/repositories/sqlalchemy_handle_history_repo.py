"""SQLAlchemy implementation of the handle history repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.handle import HandleHistoryRecord
from infrastructure.database.models import HandleHistoryModel


class SQLAlchemyHandleHistoryRepository:
    """SQLAlchemy implementation of IHandleHistoryRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, record: HandleHistoryRecord) -> HandleHistoryRecord:
        """Append a history record."""
        model = HandleHistoryModel(
            id=record.id,
            profile_id=record.profile_id,
            old_handle=record.old_handle,
            new_handle=record.new_handle,
            changed_at=record.changed_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def list_for_profile(
        self, profile_id: UUID, limit: int = 50
    ) -> list[HandleHistoryRecord]:
        """History of a profile, newest first."""
        stmt = (
            select(HandleHistoryModel)
            .where(HandleHistoryModel.profile_id == profile_id)
            .order_by(HandleHistoryModel.changed_at.desc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: HandleHistoryModel) -> HandleHistoryRecord:
        return HandleHistoryRecord(
            id=model.id,
            profile_id=model.profile_id,
            old_handle=model.old_handle,
            new_handle=model.new_handle,
            changed_at=model.changed_at,
        )
