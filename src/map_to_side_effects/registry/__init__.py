"""Action registry, id/name store and name validation."""

from .models import (
    DEFAULT_MODES,
    RESERVED_PREFIX,
    ActionKind,
    InputMode,
    ModeGroup,
    RegisteredAction,
    SetUpOptions,
    parse_modes,
)
from .store import IdentifierStore, IdentifierStoreStats
from .names import NameValidator, format_problem, generated_name, name_format_valid
from .actions import ActionRegistry

__all__ = [
    "DEFAULT_MODES",
    "RESERVED_PREFIX",
    "ActionKind",
    "InputMode",
    "ModeGroup",
    "RegisteredAction",
    "SetUpOptions",
    "parse_modes",
    "IdentifierStore",
    "IdentifierStoreStats",
    "NameValidator",
    "format_problem",
    "generated_name",
    "name_format_valid",
    "ActionRegistry",
]
