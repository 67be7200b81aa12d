"""Handle availability checks and suggestion generation."""

import re
import secrets
import string
from collections.abc import Callable
from typing import Protocol
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import StorageError
from domain.entities.handle import AvailabilityResult, HandleAccount, HandleErrorCode
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.handle_validator import HANDLE_MAX_LENGTH, HANDLE_MIN_LENGTH, validate_handle
from domain.services.reserved_registry import ReservedRegistry

logger = structlog.get_logger()

RESERVED_MESSAGE = "This handle is reserved."
TAKEN_MESSAGE = "This handle is already taken."
AVAILABLE_MESSAGE = "Handle is available!"

MAX_NAME_SUGGESTIONS = 5

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_TAG_ALPHABET = string.ascii_lowercase + string.digits


class SuggestionRandom(Protocol):
    """Source of randomness for suggestions, swappable in tests."""

    def tag(self, length: int) -> str:
        """A random lower-case alphanumeric string."""
        ...

    def number(self, low: int, high: int) -> int:
        """A random integer in ``[low, high]``."""
        ...


class SecretsSuggestionRandom:
    """Default randomness backed by the ``secrets`` module."""

    def tag(self, length: int) -> str:
        return "".join(secrets.choice(_TAG_ALPHABET) for _ in range(length))

    def number(self, low: int, high: int) -> int:
        return low + secrets.randbelow(high - low + 1)


def reserved_suggestions(normalized: str) -> list[str]:
    return [f"{normalized}1", f"{normalized}_", f"{normalized}2"]


def taken_suggestions(normalized: str, random_tag: str) -> list[str]:
    return [*reserved_suggestions(normalized), f"{normalized}.{random_tag}"]


def _alnum(value: str | None) -> str:
    return _NON_ALNUM.sub("", (value or "").lower())


def suggest_from_names(
    first_name: str | None,
    last_name: str | None,
    email: str | None,
    random: SuggestionRandom,
) -> list[str]:
    """Onboarding candidates derived from an account's name and email.

    Candidates are not checked against the store; callers filter them.
    """
    suggestions: list[str] = []
    first = _alnum(first_name)
    last = _alnum(last_name)

    def add(candidate: str) -> None:
        candidate = candidate[:HANDLE_MAX_LENGTH]
        if len(candidate) >= HANDLE_MIN_LENGTH and candidate not in suggestions:
            suggestions.append(candidate)

    if first and last:
        add(first + last)
        add(first[0] + last)
        add(last + first)
    elif first:
        add(first)
        add(f"{first[:HANDLE_MAX_LENGTH - 2]}{random.number(1, 99)}")

    if email:
        add(_alnum(email.split("@", 1)[0]))

    if len(suggestions) < 3:
        suffix = random.number(1, 9999)
        add(f"user{suffix}")
        add(f"athlete{suffix}")

    return suggestions[:MAX_NAME_SUGGESTIONS]


class AvailabilityService:
    """Decides whether a handle can be assigned. Never writes."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        registry: ReservedRegistry,
        random: SuggestionRandom | None = None,
        tag_length: int = 3,
    ) -> None:
        self._uow_factory = uow_factory
        self._registry = registry
        self._random = random or SecretsSuggestionRandom()
        self._tag_length = tag_length

    @property
    def registry(self) -> ReservedRegistry:
        return self._registry

    async def check_availability(
        self, raw_handle: str, exclude_profile_id: UUID | None = None
    ) -> AvailabilityResult:
        """Check a handle in its own read-only transaction."""
        try:
            async with self._uow_factory() as uow:
                result = await self.evaluate(uow, raw_handle, exclude_profile_id)
        except SQLAlchemyError as exc:
            logger.error("handle_storage_error", operation="check_availability", error=str(exc))
            raise StorageError() from exc

        logger.debug(
            "handle_availability_checked",
            handle=result.normalized,
            available=result.available,
            error_code=result.error_code,
        )
        return result

    async def evaluate(
        self,
        uow: IUnitOfWork,
        raw_handle: str,
        exclude_profile_id: UUID | None = None,
    ) -> AvailabilityResult:
        """Check a handle inside a caller-owned transaction.

        Order matters: format first, then the reserved registry, then the
        store, so a malformed string never reports "reserved" or "taken".
        """
        validation = validate_handle(raw_handle)
        normalized = validation.normalized

        if not validation.valid:
            return AvailabilityResult(
                available=False,
                reason=validation.reason or "Invalid handle",
                error_code=HandleErrorCode.INVALID_FORMAT,
                normalized=normalized,
            )

        if self._registry.is_reserved(normalized):
            return AvailabilityResult(
                available=False,
                reason=RESERVED_MESSAGE,
                suggestions=reserved_suggestions(normalized),
                error_code=HandleErrorCode.RESERVED,
                normalized=normalized,
            )

        if await uow.profiles.handle_exists(normalized, exclude_profile_id):
            return AvailabilityResult(
                available=False,
                reason=TAKEN_MESSAGE,
                suggestions=self.taken_suggestions(normalized),
                error_code=HandleErrorCode.TAKEN,
                normalized=normalized,
            )

        return AvailabilityResult(
            available=True,
            reason=AVAILABLE_MESSAGE,
            normalized=normalized,
        )

    def taken_suggestions(self, normalized: str) -> list[str]:
        return taken_suggestions(normalized, self._random.tag(self._tag_length))

    async def suggest_for_account(self, uow: IUnitOfWork, account: HandleAccount) -> list[str]:
        """Name-based candidates that are currently free for this account."""
        candidates = suggest_from_names(
            account.first_name, account.last_name, account.email, self._random
        )
        available: list[str] = []
        for candidate in candidates:
            result = await self.evaluate(uow, candidate, exclude_profile_id=account.id)
            if result.available:
                available.append(candidate)
        return available
