"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    HANDLE_NOT_FOUND = "HANDLE_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    HANDLE_INVALID_FORMAT = "HANDLE_INVALID_FORMAT"
    HANDLE_RESERVED = "HANDLE_RESERVED"

    # Conflict errors (409)
    HANDLE_TAKEN = "HANDLE_TAKEN"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    HANDLE_RATE_LIMITED = "HANDLE_RATE_LIMITED"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class ProfileNotFoundError(AppException):
    """Profile not found."""

    def __init__(self, profile_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {profile_id}",
            status_code=404,
            details={"profile_id": profile_id},
        )


class HandleNotFoundError(AppException):
    """No profile currently holds the handle."""

    def __init__(self, handle: str) -> None:
        super().__init__(
            error_code=ErrorCode.HANDLE_NOT_FOUND,
            message=f"Handle not found: @{handle}",
            status_code=404,
            details={"handle": handle},
        )


class HandleRejectedError(AppException):
    """A rename was refused for a business reason (format, reserved, taken...)."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=status_code,
            details=details,
        )


class HandleConflictError(Exception):
    """A uniqueness race was lost at commit time.

    Internal to the rename and backfill paths; callers never see it because
    the conflict is retried and then reported as "taken".
    """

    def __init__(self, handle: str) -> None:
        self.handle = handle
        super().__init__(f"Handle already claimed concurrently: {handle}")


class StorageError(AppException):
    """The account store failed (connection loss, aborted transaction...)."""

    def __init__(self, message: str = "Handle storage is unavailable") -> None:
        super().__init__(
            error_code=ErrorCode.DATABASE_ERROR,
            message=message,
            status_code=503,
        )
