"""SQLAlchemy ORM models."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class ProfileModel(Base):
    """Account profile model.

    The account store owns this table; the handle columns are only written
    through the handle services.
    """

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # Legacy free-form username, first choice for backfill derivation
    full_name: Mapped[str | None] = mapped_column(String(255))
    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    display_name: Mapped[str | None] = mapped_column(String(100))
    avatar_url: Mapped[str | None] = mapped_column(String(500))
    sport: Mapped[str | None] = mapped_column(String(50))
    school: Mapped[str | None] = mapped_column(String(255))

    handle: Mapped[str | None] = mapped_column(String(20), index=True)
    handle_updated_at: Mapped[datetime | None] = mapped_column(DateTime)
    handle_change_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    handle_history: Mapped[list["HandleHistoryModel"]] = relationship(
        "HandleHistoryModel",
        back_populates="profile",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


# Case-insensitive uniqueness: @TomK and @tomk are the same handle.
Index("uq_profiles_handle_lower", func.lower(ProfileModel.handle), unique=True)


class HandleHistoryModel(Base):
    """Append-only record of handle renames (audit trail and redirects)."""

    __tablename__ = "handle_history"
    __table_args__ = (
        UniqueConstraint(
            "profile_id",
            "old_handle",
            "changed_at",
            name="uq_handle_history_entry",
        ),
        Index("ix_handle_history_profile_changed", "profile_id", "changed_at"),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    profile_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    old_handle: Mapped[str] = mapped_column(Text, nullable=False)
    new_handle: Mapped[str] = mapped_column(Text, nullable=False)
    changed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    profile: Mapped["ProfileModel"] = relationship(
        "ProfileModel",
        back_populates="handle_history",
    )


# Lets routing code redirect an old @handle to its current owner.
Index("ix_handle_history_old_handle_lower", func.lower(HandleHistoryModel.old_handle))


class ReservedHandleModel(Base):
    """Handles that can never be assigned."""

    __tablename__ = "reserved_handles"

    handle: Mapped[str] = mapped_column(String(50), primary_key=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    reserved_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
