"""
Request Validation

Turns the decoded JSON body of a fetch request into a normalized
FetchRequest, or rejects it with a typed error before any fetch starts.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

from .config import MAX_PART_NUMBERS


# ============================================
# Errors
# ============================================


class PartNumberValidationError(ValueError):
    """Base class for rejected fetch requests. The message is client-facing."""

    message = "Invalid request"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class InvalidInput(PartNumberValidationError):
    """The partNumbers field is missing or is not a list."""

    message = "Invalid part numbers provided"


class TooManyItems(PartNumberValidationError):
    """More part numbers than the system allows in one batch."""

    message = f"Maximum {MAX_PART_NUMBERS} part numbers allowed"


class InvalidItem(PartNumberValidationError):
    """An element is not a string or is blank after trimming."""

    message = "All part numbers must be non-empty strings"


# ============================================
# Validated request
# ============================================


# Whitespace plus the byte order mark, which str.strip() leaves in place
_EDGE_WHITESPACE = re.compile(r"^[\s\ufeff]+|[\s\ufeff]+$")


def trim_part_number(part: str) -> str:
    return _EDGE_WHITESPACE.sub("", part)


@dataclass(frozen=True)
class FetchRequest:
    """Validated batch of part numbers, already trimmed."""
    part_numbers: Tuple[str, ...]

    def __init__(self, part_numbers: Iterable[str]):
        object.__setattr__(self, "part_numbers", tuple(part_numbers))

    def __len__(self) -> int:
        return len(self.part_numbers)


def validate_fetch_request(body: Any) -> FetchRequest:
    """
    Validate a decoded request body.

    Args:
        body: Decoded JSON, expected to look like {"partNumbers": [...]}

    Returns:
        FetchRequest with trimmed part numbers, in input order

    Raises:
        InvalidInput, TooManyItems, InvalidItem
    """
    part_numbers = body.get("partNumbers") if isinstance(body, dict) else None

    if not isinstance(part_numbers, list):
        raise InvalidInput()

    if len(part_numbers) > MAX_PART_NUMBERS:
        raise TooManyItems()

    if any(not isinstance(part, str) or not trim_part_number(part) for part in part_numbers):
        raise InvalidItem()

    return FetchRequest(part_numbers=[trim_part_number(part) for part in part_numbers])
