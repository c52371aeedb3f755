"""Action name rules: format checks and availability."""

from __future__ import annotations

import re
from typing import Optional, cast

from map_to_side_effects.errors import InvalidNameFormatError, NameNotAvailableError

from .models import RESERVED_PREFIX
from .store import IdentifierStore

MAX_NAME_LENGTH = 45
_NAME_PATTERN = re.compile(r"[-_.:A-Za-z0-9]+")


def format_problem(name: object) -> Optional[str]:
    """Describe the first naming rule ``name`` breaks, or ``None`` if valid."""

    if not isinstance(name, str):
        return f"must be a string, got {type(name).__name__}"
    if not 1 <= len(name) <= MAX_NAME_LENGTH:
        return f"must be 1-{MAX_NAME_LENGTH} characters long, got {len(name)}"
    if not _NAME_PATTERN.fullmatch(name):
        return "allowed characters are A-Z, a-z, 0-9, '-', '_', '.' and ':'"
    if name.lower().startswith(RESERVED_PREFIX.lower()):
        return f"must not start with {RESERVED_PREFIX!r} (in any letter case)"
    return None


def name_format_valid(name: object) -> bool:
    return format_problem(name) is None


def generated_name(action_id: int) -> str:
    return f"{RESERVED_PREFIX}-{action_id}"


class NameValidator:
    """Checks proposed names against the format rules and the live store."""

    def __init__(self, store: IdentifierStore) -> None:
        self._store = store

    def format_valid(self, name: object) -> bool:
        return name_format_valid(name)

    def available(self, name: str) -> bool:
        return not self._store.has_name(name)

    def validate(self, name: object) -> str:
        problem = format_problem(name)
        if problem is not None:
            raise InvalidNameFormatError(name, problem)
        checked = cast(str, name)
        if not self.available(checked):
            raise NameNotAvailableError(checked, self._store.resolve(checked))
        return checked


__all__ = [
    "MAX_NAME_LENGTH",
    "NameValidator",
    "format_problem",
    "generated_name",
    "name_format_valid",
]
