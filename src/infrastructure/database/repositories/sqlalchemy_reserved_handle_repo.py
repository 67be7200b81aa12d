"""SQLAlchemy implementation of the reserved handle repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.handle import ReservedHandle
from infrastructure.database.models import ReservedHandleModel


class SQLAlchemyReservedHandleRepository:
    """SQLAlchemy implementation of IReservedHandleRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_all(self) -> list[ReservedHandle]:
        stmt = select(ReservedHandleModel).order_by(ReservedHandleModel.handle)
        result = await self._session.execute(stmt)
        return [
            ReservedHandle(handle=model.handle, reason=model.reason)
            for model in result.scalars()
        ]
