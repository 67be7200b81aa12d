"""Handle format validation.

Pure functions, no I/O. A handle is compared in its canonical form
(trimmed, one leading ``@`` removed, lower-cased) while the caller's casing
is kept for storage and display.
"""

import re
from dataclasses import dataclass

HANDLE_MIN_LENGTH = 3
HANDLE_MAX_LENGTH = 20

_HANDLE_PATTERN = re.compile(r"^[a-z0-9][a-z0-9._]*[a-z0-9]$")
_CONSECUTIVE_SEPARATORS = re.compile(r"[._]{2,}")


@dataclass(frozen=True)
class HandleValidation:
    """Result of validating a raw handle."""

    valid: bool
    normalized: str
    reason: str | None = None


def display_handle(raw: str) -> str:
    """Strip whitespace and one leading ``@``, keeping the caller's casing."""
    cleaned = raw.strip()
    if cleaned.startswith("@"):
        cleaned = cleaned[1:]
    return cleaned


def normalize_handle(raw: str) -> str:
    """Canonical form used for every comparison."""
    return display_handle(raw).lower()


def format_handle(handle: str | None) -> str:
    """Render a handle for display with its ``@`` prefix."""
    if not handle:
        return ""
    return f"@{display_handle(handle)}"


def validate_handle(raw: str | None) -> HandleValidation:
    """Check a raw handle against the handle grammar.

    Rules: 3-20 characters, ASCII letters, digits, dots and underscores only,
    starts and ends with a letter or digit, no two separators in a row.
    """
    if raw is None:
        return HandleValidation(False, "", "Handle is required")

    cleaned = display_handle(raw)
    normalized = cleaned.lower()

    if not normalized:
        return HandleValidation(False, normalized, "Handle is required")

    # Checked before lower-casing matters: some non-ASCII letters
    # (e.g. the Kelvin sign) lower-case to ASCII.
    if not cleaned.isascii():
        return HandleValidation(
            False,
            normalized,
            "Handle can only contain letters, numbers, dots, and underscores",
        )

    if len(normalized) < HANDLE_MIN_LENGTH:
        return HandleValidation(
            False,
            normalized,
            f"Handle must be at least {HANDLE_MIN_LENGTH} characters long",
        )

    if len(normalized) > HANDLE_MAX_LENGTH:
        return HandleValidation(
            False,
            normalized,
            f"Handle must be {HANDLE_MAX_LENGTH} characters or less",
        )

    if not _HANDLE_PATTERN.match(normalized):
        return HandleValidation(
            False,
            normalized,
            "Handle can only contain letters, numbers, dots, and underscores, "
            "and must start and end with a letter or number",
        )

    if _CONSECUTIVE_SEPARATORS.search(normalized):
        return HandleValidation(
            False,
            normalized,
            "Handle cannot have consecutive dots or underscores",
        )

    return HandleValidation(True, normalized)

