"""Handle domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class HandleErrorCode(StrEnum):
    """Why a handle could not be assigned."""

    INVALID_FORMAT = "invalid_format"
    RESERVED = "reserved"
    TAKEN = "taken"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"


class MatchType(StrEnum):
    """How a search result matched the query."""

    EXACT = "exact"
    PREFIX = "prefix"
    PARTIAL = "partial"


@dataclass
class HandleAccount:
    """Handle-related view of an account row.

    The account store owns the row; only ``handle``, ``handle_updated_at``
    and ``handle_change_count`` are written by the handle services. The name
    and email fields feed backfill derivation and suggestions.
    """

    id: UUID = field(default_factory=uuid4)
    email: str = ""
    handle: str | None = None
    handle_updated_at: datetime | None = None
    handle_change_count: int = 0
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    sport: str | None = None
    school: str | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class HandleHistoryRecord:
    """Append-only audit entry written on every counted rename."""

    profile_id: UUID
    old_handle: str
    new_handle: str
    changed_at: datetime = field(default_factory=datetime.utcnow)
    id: UUID = field(default_factory=uuid4)


@dataclass(frozen=True)
class ReservedHandle:
    """A handle that can never be assigned, with the reason it is blocked."""

    handle: str
    reason: str


@dataclass
class AvailabilityResult:
    """Outcome of an availability check."""

    available: bool
    reason: str
    suggestions: list[str] = field(default_factory=list)
    error_code: HandleErrorCode | None = None
    normalized: str = ""


@dataclass
class RenameResult:
    """Outcome of a rename attempt. Business failures are data, not exceptions."""

    success: bool
    message: str
    handle: str | None = None
    error_code: HandleErrorCode | None = None
    suggestions: list[str] = field(default_factory=list)
    next_eligible_at: datetime | None = None

    @classmethod
    def rejected(
        cls,
        error_code: HandleErrorCode,
        message: str,
        suggestions: list[str] | None = None,
        next_eligible_at: datetime | None = None,
    ) -> "RenameResult":
        return cls(
            success=False,
            message=message,
            error_code=error_code,
            suggestions=list(suggestions or []),
            next_eligible_at=next_eligible_at,
        )


@dataclass
class HandleSearchResult:
    """A profile matched by handle search, with its basic public fields."""

    profile_id: UUID
    handle: str
    match_type: MatchType
    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    sport: str | None = None
    school: str | None = None


@dataclass(frozen=True)
class HandleRenamedEvent:
    """Published after a full rename commits (mention redirects, notifications)."""

    profile_id: UUID
    old_handle: str | None
    new_handle: str
    changed_at: datetime
