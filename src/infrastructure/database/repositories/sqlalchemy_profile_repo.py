"""SQLAlchemy implementation of the profile handle repository."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.handle import HandleAccount
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> HandleAccount | None:
        """Get an account by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def get_for_update(self, id: UUID) -> HandleAccount | None:
        """Get an account by ID with a row lock (no-op on SQLite)."""
        stmt = select(ProfileModel).where(ProfileModel.id == id).with_for_update()
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_handle(self, normalized_handle: str) -> HandleAccount | None:
        """Get the account holding a handle, ignoring case."""
        stmt = select(ProfileModel).where(
            func.lower(ProfileModel.handle) == normalized_handle.lower()
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def handle_exists(
        self, normalized_handle: str, exclude_profile_id: UUID | None = None
    ) -> bool:
        """Check whether a handle is held by an account other than the excluded one."""
        stmt = select(ProfileModel.id).where(
            func.lower(ProfileModel.handle) == normalized_handle.lower()
        )
        if exclude_profile_id is not None:
            stmt = stmt.where(ProfileModel.id != exclude_profile_id)
        result = await self._session.execute(stmt.limit(1))
        return result.first() is not None

    async def update_handle(
        self,
        id: UUID,
        handle: str,
        handle_updated_at: datetime | None,
        handle_change_count: int,
    ) -> HandleAccount:
        """Write the handle columns. Raises IntegrityError if the handle is taken."""
        model = await self._get_model(id)
        if not model:
            raise ValueError(f"Profile {id} not found")

        model.handle = handle
        model.handle_updated_at = handle_updated_at
        model.handle_change_count = handle_change_count

        await self._session.flush()
        return self._to_entity(model)

    async def list_ids_missing_handle(self) -> list[UUID]:
        """IDs of accounts without a handle, oldest first."""
        stmt = (
            select(ProfileModel.id)
            .where(ProfileModel.handle.is_(None))
            .order_by(ProfileModel.created_at, ProfileModel.id)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def search_by_handle(self, query: str, limit: int) -> list[HandleAccount]:
        """Accounts whose handle contains ``query`` (already lower-cased)."""
        lowered = func.lower(ProfileModel.handle)
        stmt = (
            select(ProfileModel)
            .where(
                ProfileModel.handle.is_not(None),
                lowered.contains(query, autoescape=True),
            )
            .order_by(
                case((lowered == query, 0), else_=1),
                case((lowered.startswith(query, autoescape=True), 0), else_=1),
                func.length(ProfileModel.handle),
                self._binary_order(ProfileModel.handle),
            )
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _binary_order(self, column: Any) -> Any:
        """Order ``column`` by code point whatever the database collation is."""
        if self._session.get_bind().dialect.name == "postgresql":
            return column.collate("C")
        # SQLite compares text with BINARY by default.
        return column

    async def _get_model(self, id: UUID) -> ProfileModel | None:
        stmt = select(ProfileModel).where(ProfileModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: ProfileModel) -> HandleAccount:
        """Convert ORM model to domain entity."""
        return HandleAccount(
            id=model.id,
            email=model.email,
            handle=model.handle,
            handle_updated_at=model.handle_updated_at,
            handle_change_count=model.handle_change_count or 0,
            full_name=model.full_name,
            first_name=model.first_name,
            last_name=model.last_name,
            display_name=model.display_name,
            avatar_url=model.avatar_url,
            sport=model.sport,
            school=model.school,
            created_at=model.created_at,
        )
