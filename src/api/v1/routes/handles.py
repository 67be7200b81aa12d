"""Handle API routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser, OptionalUser
from api.v1.dependencies import get_availability_service, get_handle_service, get_search_service
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.handle import (
    HandleCheckResponse,
    HandleHistoryItem,
    HandleHistoryResponse,
    HandleSearchItem,
    HandleSearchResponse,
    HandleSuggestionsResponse,
    HandleUpdate,
    HandleUpdateData,
    HandleUpdateResponse,
    PublicProfile,
    PublicProfileResponse,
)
from core.exceptions import ErrorCode, HandleRejectedError
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.handle import HandleErrorCode, RenameResult
from domain.services.availability_service import AvailabilityService
from domain.services.handle_service import HandleService
from domain.services.handle_validator import format_handle
from domain.services.search_service import SearchService

router = APIRouter(prefix="/handles", tags=["handles"])

_REJECTIONS: dict[HandleErrorCode, tuple[ErrorCode, int]] = {
    HandleErrorCode.INVALID_FORMAT: (ErrorCode.HANDLE_INVALID_FORMAT, 400),
    HandleErrorCode.RESERVED: (ErrorCode.HANDLE_RESERVED, 400),
    HandleErrorCode.TAKEN: (ErrorCode.HANDLE_TAKEN, 409),
    HandleErrorCode.RATE_LIMITED: (ErrorCode.HANDLE_RATE_LIMITED, 429),
    HandleErrorCode.NOT_FOUND: (ErrorCode.PROFILE_NOT_FOUND, 404),
}


def rejection_error(result: RenameResult) -> HandleRejectedError:
    """Map a rejected rename to its HTTP error."""
    error_code, status_code = _REJECTIONS.get(
        result.error_code or HandleErrorCode.INVALID_FORMAT,
        (ErrorCode.HANDLE_INVALID_FORMAT, 400),
    )
    return HandleRejectedError(
        error_code=error_code,
        message=result.message,
        status_code=status_code,
        details={
            "suggestions": result.suggestions,
            "next_eligible_at": (
                result.next_eligible_at.isoformat() if result.next_eligible_at else None
            ),
        },
    )


@router.get(
    "/check",
    response_model=HandleCheckResponse,
    summary="Check handle availability",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def check_handle(
    request: Request,
    user: OptionalUser,
    handle: str = Query(..., max_length=100),
    service: AvailabilityService = Depends(get_availability_service),
) -> HandleCheckResponse:
    """Report whether a handle can be claimed. The caller's own handle counts as free."""
    result = await service.check_availability(
        handle, exclude_profile_id=user.id if user else None
    )
    return HandleCheckResponse(
        handle=result.normalized,
        available=result.available,
        reason=result.reason,
        error_code=result.error_code.value if result.error_code else None,
        suggestions=result.suggestions,
    )


@router.put(
    "/me",
    response_model=HandleUpdateResponse,
    summary="Change your handle",
    responses={
        400: {"model": ErrorResponse, "description": "Invalid format or reserved handle"},
        401: {"model": ErrorResponse, "description": "Missing or invalid token"},
        409: {"model": ErrorResponse, "description": "Handle already taken"},
        429: {"model": ErrorResponse, "description": "Renamed too recently"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_my_handle(
    request: Request,
    body: HandleUpdate,
    user: CurrentUser,
    service: HandleService = Depends(get_handle_service),
) -> HandleUpdateResponse:
    result = await service.rename_handle(user.id, body.handle)
    if not result.success or result.handle is None:
        raise rejection_error(result)

    return HandleUpdateResponse(
        data=HandleUpdateData(
            handle=result.handle,
            display=format_handle(result.handle),
            message=result.message,
        )
    )


@router.get(
    "/me/history",
    response_model=HandleHistoryResponse,
    summary="Your handle history",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_my_handle_history(
    request: Request,
    user: CurrentUser,
    limit: int = Query(50, ge=1, le=100),
    service: HandleService = Depends(get_handle_service),
) -> HandleHistoryResponse:
    """Past renames of the caller's handle, newest first."""
    records = await service.get_handle_history(user.id, limit=limit)
    return HandleHistoryResponse(
        data=[HandleHistoryItem.model_validate(record) for record in records]
    )


@router.get(
    "/me/suggestions",
    response_model=HandleSuggestionsResponse,
    summary="Handle ideas",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_my_handle_suggestions(
    request: Request,
    user: CurrentUser,
    service: HandleService = Depends(get_handle_service),
) -> HandleSuggestionsResponse:
    """Available handles derived from the caller's name and email."""
    return HandleSuggestionsResponse(data=await service.suggest_handles(user.id))


@router.get(
    "/search",
    response_model=HandleSearchResponse,
    summary="Search handles",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def search_handles(
    request: Request,
    q: str = Query("", max_length=100),
    limit: int | None = Query(None, ge=1),
    service: SearchService = Depends(get_search_service),
) -> HandleSearchResponse:
    """Case-insensitive substring search: exact first, then prefix, then shortest."""
    results = await service.search_handles(q, limit=limit)
    return HandleSearchResponse(
        data=[HandleSearchItem.model_validate(result) for result in results]
    )


@router.get(
    "/{handle}",
    response_model=PublicProfileResponse,
    summary="Look up a profile by handle",
    responses={404: {"model": ErrorResponse, "description": "No profile holds this handle"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_profile_by_handle(
    request: Request,
    handle: str,
    service: HandleService = Depends(get_handle_service),
) -> PublicProfileResponse:
    account = await service.get_profile_by_handle(handle)
    return PublicProfileResponse(
        data=PublicProfile(
            id=account.id,
            handle=account.handle or "",
            display_name=account.display_name,
            first_name=account.first_name,
            last_name=account.last_name,
            avatar_url=account.avatar_url,
            sport=account.sport,
            school=account.school,
        )
    )
