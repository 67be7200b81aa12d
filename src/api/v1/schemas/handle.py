"""Pydantic schemas for Handle API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.handle import MatchType


class HandleCheckResponse(BaseModel):
    """Availability of a handle."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "handle": "tomk",
                "available": False,
                "reason": "This handle is already taken.",
                "error_code": "taken",
                "suggestions": ["tomk1", "tomk_", "tomk2", "tomk.x7q"],
            }
        },
    )

    handle: str
    available: bool
    reason: str
    error_code: str | None = None
    suggestions: list[str] = Field(default_factory=list)


class HandleUpdate(BaseModel):
    """Schema for changing the caller's handle.

    Grammar is checked by the service so the caller gets a specific reason.
    """

    handle: str = Field(..., max_length=100)


class HandleUpdateData(BaseModel):
    handle: str
    display: str
    message: str


class HandleUpdateResponse(BaseModel):
    """Schema for a successful rename."""

    data: HandleUpdateData


class HandleHistoryItem(BaseModel):
    """One past rename."""

    model_config = ConfigDict(from_attributes=True)

    old_handle: str
    new_handle: str
    changed_at: datetime


class HandleHistoryResponse(BaseModel):
    data: list[HandleHistoryItem]


class HandleSuggestionsResponse(BaseModel):
    data: list[str]


class HandleSearchItem(BaseModel):
    """A search hit with the public profile fields needed for autocomplete."""

    model_config = ConfigDict(from_attributes=True)

    profile_id: UUID
    handle: str
    match_type: MatchType
    first_name: str | None = None
    last_name: str | None = None
    display_name: str | None = None
    avatar_url: str | None = None
    sport: str | None = None
    school: str | None = None


class HandleSearchResponse(BaseModel):
    data: list[HandleSearchItem]


class PublicProfile(BaseModel):
    """Public view of the profile holding a handle."""

    id: UUID
    handle: str
    display_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None
    sport: str | None = None
    school: str | None = None


class PublicProfileResponse(BaseModel):
    data: PublicProfile
