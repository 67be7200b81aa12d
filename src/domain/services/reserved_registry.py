"""Reserved handle registry.

The built-in catalog below is the policy data; ``ReservedRegistry`` is the
only way the rest of the code asks whether a handle is blocked. The same
catalog seeded the ``reserved_handles`` table, and at startup the registry is
rebuilt from that table so operators can extend it without a deploy.
"""

from collections.abc import Callable, Iterable, Mapping

import structlog

from domain.entities.handle import ReservedHandle
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

SYSTEM_RESERVED = "System reserved"
SYSTEM_PATH = "System path"
TECHNICAL_TERM = "Technical term"
SPORT_NAME = "Sport name"
BRAND_PROTECTION = "Brand protection"

DEFAULT_RESERVED_HANDLES: Mapping[str, str] = {
    # System/admin
    "admin": SYSTEM_RESERVED,
    "administrator": SYSTEM_RESERVED,
    "support": SYSTEM_RESERVED,
    "help": SYSTEM_RESERVED,
    "api": SYSTEM_RESERVED,
    "team": SYSTEM_RESERVED,
    "staff": SYSTEM_RESERVED,
    "official": SYSTEM_RESERVED,
    "verified": SYSTEM_RESERVED,
    "root": SYSTEM_RESERVED,
    "system": SYSTEM_RESERVED,
    # Route segments
    "me": SYSTEM_PATH,
    "u": SYSTEM_PATH,
    "user": SYSTEM_PATH,
    "users": SYSTEM_PATH,
    "athlete": SYSTEM_PATH,
    "athletes": SYSTEM_PATH,
    "club": SYSTEM_PATH,
    "clubs": SYSTEM_PATH,
    "league": SYSTEM_PATH,
    "leagues": SYSTEM_PATH,
    "app": SYSTEM_PATH,
    "dashboard": SYSTEM_PATH,
    "settings": SYSTEM_PATH,
    "profile": SYSTEM_PATH,
    "account": SYSTEM_PATH,
    "search": SYSTEM_PATH,
    "handles": SYSTEM_PATH,
    # Literals that break clients
    "null": TECHNICAL_TERM,
    "undefined": TECHNICAL_TERM,
    "true": TECHNICAL_TERM,
    "false": TECHNICAL_TERM,
    # Sports, held for official accounts
    "golf": SPORT_NAME,
    "basketball": SPORT_NAME,
    "football": SPORT_NAME,
    "soccer": SPORT_NAME,
    "baseball": SPORT_NAME,
    "hockey": SPORT_NAME,
    "volleyball": SPORT_NAME,
    "tennis": SPORT_NAME,
    "swimming": SPORT_NAME,
    "trackandfield": SPORT_NAME,
    # Brand
    "edgeathletes": BRAND_PROTECTION,
    "edgeathlete": BRAND_PROTECTION,
    "edge": BRAND_PROTECTION,
}


class ReservedRegistry:
    """Case-insensitive, read-only lookup of reserved handles."""

    def __init__(self, entries: Iterable[ReservedHandle] = ()) -> None:
        self._reasons: dict[str, str] = {}
        for entry in entries:
            self._reasons.setdefault(entry.handle.strip().lower(), entry.reason)

    @classmethod
    def default(cls) -> "ReservedRegistry":
        """Registry holding only the built-in catalog."""
        return cls(default_entries())

    def is_reserved(self, normalized_handle: str) -> bool:
        return normalized_handle.lower() in self._reasons

    def reason_for(self, normalized_handle: str) -> str | None:
        return self._reasons.get(normalized_handle.lower())

    def __len__(self) -> int:
        return len(self._reasons)


def default_entries() -> list[ReservedHandle]:
    return [ReservedHandle(handle=h, reason=r) for h, r in DEFAULT_RESERVED_HANDLES.items()]


async def load_reserved_registry(uow_factory: Callable[[], IUnitOfWork]) -> ReservedRegistry:
    """Build the registry from the reserved_handles table plus the built-in catalog.

    Table rows win over the built-in reason for the same handle.
    """
    async with uow_factory() as uow:
        stored = await uow.reserved_handles.list_all()

    registry = ReservedRegistry([*stored, *default_entries()])
    logger.info(
        "reserved_registry_loaded",
        stored_count=len(stored),
        total_count=len(registry),
    )
    return registry
