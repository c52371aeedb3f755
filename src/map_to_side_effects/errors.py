"""Error conditions raised by registration, clearing and dispatch."""

from __future__ import annotations

from typing import Iterable


class SideEffectsError(RuntimeError):
    """Base class for every error raised by this package."""


class InvalidNameFormatError(SideEffectsError, ValueError):
    """Raised when a proposed action name breaks the naming rules."""

    def __init__(self, name: object, problem: str):
        super().__init__(f"Invalid action name {name!r}: {problem}")
        self.name = name
        self.problem = problem


class NameNotAvailableError(SideEffectsError):
    """Raised when a well-formed name is already claimed by a registration."""

    def __init__(self, name: str, owner_id: int | None = None):
        message = f"Action name {name!r} is already in use"
        if owner_id is not None:
            message += f" by action {owner_id}"
        super().__init__(f"{message}; clear it before registering it again")
        self.name = name
        self.owner_id = owner_id


class UnknownIdError(SideEffectsError, LookupError):
    """Raised when an action id is not (or no longer) registered."""

    def __init__(self, action_ids: int | Iterable[int]):
        if isinstance(action_ids, int):
            ids: tuple[int, ...] = (action_ids,)
        else:
            ids = tuple(action_ids)
        listed = ", ".join(str(action_id) for action_id in ids)
        noun = "id" if len(ids) == 1 else "ids"
        super().__init__(f"Unknown action {noun}: {listed}")
        self.action_ids = ids

    @property
    def action_id(self) -> int:
        return self.action_ids[0]


class UnknownNameError(SideEffectsError, LookupError):
    """Raised when no registration carries the given name."""

    def __init__(self, names: str | Iterable[str]):
        if isinstance(names, str):
            values: tuple[str, ...] = (names,)
        else:
            values = tuple(names)
        noun = "name" if len(values) == 1 else "names"
        super().__init__(f"Unknown action {noun}: {', '.join(map(repr, values))}")
        self.names = values

    @property
    def name(self) -> str:
        return self.names[0]


class UnsupportedModeError(SideEffectsError, ValueError):
    """Raised for a mode string that names no mode or an unknown mode flag."""

    def __init__(self, mode: str, message: str | None = None):
        super().__init__(
            message
            or f"Unsupported mode {mode!r}: use flags from 'n', 'v', 'x', 's', 'o'"
        )
        self.mode = mode


class DuplicateTriggerError(SideEffectsError):
    """Raised by a host when the trigger is already mapped in that mode."""

    def __init__(self, trigger: str, mode: str, detail: str | None = None):
        message = f"Trigger {trigger!r} is already mapped in mode {mode!r}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.trigger = trigger
        self.mode = mode


__all__ = [
    "SideEffectsError",
    "InvalidNameFormatError",
    "NameNotAvailableError",
    "UnknownIdError",
    "UnknownNameError",
    "UnsupportedModeError",
    "DuplicateTriggerError",
]
