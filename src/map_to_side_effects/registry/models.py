"""Dataclasses and enumerations describing registered actions."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Callable, Mapping, Optional, Union

from map_to_side_effects.errors import UnsupportedModeError

RESERVED_PREFIX = "MapToSideEffects"
DEFAULT_MODES = "nvo"

ActionId = int
Action = Callable[..., object]


class ActionKind(str, Enum):
    """How an action is called and whether repeating it is safe."""

    IDEMPOTENT = "idempotent"
    REPEATABLE = "repeatable"
    WITH_COUNT = "with_count"
    WITH_COUNT1 = "with_count1"


class ModeGroup(str, Enum):
    """Execution model shared by a family of input modes."""

    ORDINARY = "ordinary"
    SELECTION = "selection"
    OPERATOR_PENDING = "operator_pending"


class InputMode(str, Enum):
    """Mode flags accepted in the ``modes`` option, named after the host's."""

    NORMAL = "n"
    VISUAL_SELECT = "v"
    VISUAL = "x"
    SELECT = "s"
    OPERATOR_PENDING = "o"

    @property
    def group(self) -> ModeGroup:
        if self is InputMode.NORMAL:
            return ModeGroup.ORDINARY
        if self is InputMode.OPERATOR_PENDING:
            return ModeGroup.OPERATOR_PENDING
        return ModeGroup.SELECTION


def parse_modes(modes: str) -> tuple[InputMode, ...]:
    """Turn a string such as ``"nvo"`` into distinct ``InputMode`` values.

    Order of first appearance is kept. ``v`` already spans visual and select,
    so ``x`` and ``s`` are dropped when it is present.
    """

    if not isinstance(modes, str):
        raise UnsupportedModeError(
            repr(modes), f"modes must be a string, got {type(modes).__name__}"
        )
    if not modes:
        raise UnsupportedModeError(
            modes, "modes must name at least one of 'n', 'v', 'x', 's', 'o'"
        )

    parsed: dict[InputMode, None] = {}
    for flag in modes:
        try:
            parsed[InputMode(flag)] = None
        except ValueError:
            raise UnsupportedModeError(flag) from None

    result = tuple(parsed)
    if InputMode.VISUAL_SELECT in parsed:
        result = tuple(
            mode
            for mode in result
            if mode not in (InputMode.VISUAL, InputMode.SELECT)
        )
    return result


@dataclass(frozen=True, slots=True)
class SetUpOptions:
    """Options accepted by every ``set_up_*`` call."""

    modes: str = DEFAULT_MODES
    name: Optional[str] = None

    @classmethod
    def coerce(
        cls, options: Union["SetUpOptions", Mapping[str, object], None]
    ) -> "SetUpOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        known = {option.name for option in fields(cls)}
        unknown = sorted(str(key) for key in options if key not in known)
        if unknown:
            raise ValueError(
                f"Unrecognized set-up option(s) {unknown}; expected {sorted(known)}"
            )
        values = {str(key): value for key, value in options.items()}
        return cls(**values)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class RegisteredAction:
    """Callback plus the immutable facts fixed when it was registered."""

    id: ActionId
    kind: ActionKind
    handler: Action
    modes: tuple[InputMode, ...] = ()

    def __post_init__(self) -> None:
        if self.id <= 0:
            raise ValueError("action ids are positive integers")
        if not callable(self.handler):
            raise TypeError("action must be callable")


__all__ = [
    "RESERVED_PREFIX",
    "DEFAULT_MODES",
    "Action",
    "ActionId",
    "ActionKind",
    "InputMode",
    "ModeGroup",
    "RegisteredAction",
    "SetUpOptions",
    "parse_modes",
]
