"""Host-neutral description of the mappings the synthesizer produces."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from map_to_side_effects.registry.models import ActionId, InputMode

TRIGGER_KEY = "<Plug>"


def trigger_for(name: str) -> str:
    """Key sequence installed for the action called ``name``."""

    return f"{TRIGGER_KEY}({name})"


class Mechanism(str, Enum):
    """How the host routes a triggered key sequence to a shim."""

    # Strategy B: run the call on the command line.
    COMMAND_LINE = "command_line"
    # Strategy A: evaluate the call as the mapping's expression; the
    # (always empty) result is fed back as keys.
    EXPRESSION = "expression"
    # Strategy A: evaluate the call while selecting the expression
    # register, which is then never used, so nothing counts as a change.
    EXPRESSION_REGISTER = "expression_register"


class Shim(str, Enum):
    """Fixed entry points synthesized mappings call back into."""

    INVOKE = "invoke"
    INVOKE_REPEATED = "invoke_repeated"
    INVOKE_WITH_COUNT = "invoke_with_count"


class CountSource(str, Enum):
    """Which count prefix, if any, is passed along with the action id."""

    NONE = "none"
    COUNT = "count"
    COUNT1 = "count1"


@dataclass(frozen=True, slots=True)
class ShimCall:
    """A call to one shim with the action id and an optional count."""

    shim: Shim
    action_id: ActionId
    count: CountSource = CountSource.NONE
    # Read the count while the mapping text is built and embed it as a
    # literal instead of reading it when the call runs.
    bake_count: bool = False

    def __post_init__(self) -> None:
        if self.bake_count and self.count is CountSource.NONE:
            raise ValueError("bake_count requires a count source")
        takes_count = self.shim is not Shim.INVOKE
        if takes_count != (self.count is not CountSource.NONE):
            raise ValueError(
                f"shim {self.shim.value} does not match count {self.count.value}"
            )

    def arguments(self, count: int, count1: int) -> tuple[int, ...]:
        """Arguments for the shim given the host's current count prefix."""

        if self.count is CountSource.COUNT:
            return (self.action_id, count)
        if self.count is CountSource.COUNT1:
            return (self.action_id, count1)
        return (self.action_id,)


@dataclass(frozen=True, slots=True)
class MappingSpec:
    """Everything a host needs to install one binding in one mode."""

    mode: InputMode
    trigger: str
    mechanism: Mechanism
    call: ShimCall
    # Discard the range the host inserts when a count precedes ':'.
    cancel_range: bool = False

    def __post_init__(self) -> None:
        if self.cancel_range and self.mechanism is not Mechanism.COMMAND_LINE:
            raise ValueError("cancel_range only applies to command-line mappings")
        if self.cancel_range and self.mode is InputMode.OPERATOR_PENDING:
            raise ValueError("a range prefix would break operator-pending mappings")

    @property
    def action_id(self) -> ActionId:
        return self.call.action_id

    @property
    def key(self) -> tuple[InputMode, str]:
        return (self.mode, self.trigger)


__all__ = [
    "TRIGGER_KEY",
    "CountSource",
    "MappingSpec",
    "Mechanism",
    "Shim",
    "ShimCall",
    "trigger_for",
]
