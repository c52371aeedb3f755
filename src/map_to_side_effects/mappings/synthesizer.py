"""Chooses the invocation mechanism for every (action kind, mode) pair."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Union

from map_to_side_effects.errors import UnsupportedModeError
from map_to_side_effects.registry.models import (
    ActionId,
    ActionKind,
    InputMode,
    ModeGroup,
    RegisteredAction,
)
from map_to_side_effects.runtime.telemetry import span

from .models import CountSource, MappingSpec, Mechanism, Shim, ShimCall, trigger_for


@dataclass(frozen=True, slots=True)
class MappingRecipe:
    """Mechanism, shim and count threading for one table cell."""

    mechanism: Mechanism
    shim: Shim
    count: CountSource = CountSource.NONE
    bake_count: bool = False

    def build(self, action_id: ActionId, mode: InputMode, trigger: str) -> MappingSpec:
        return MappingSpec(
            mode=mode,
            trigger=trigger,
            mechanism=self.mechanism,
            call=ShimCall(
                shim=self.shim,
                action_id=action_id,
                count=self.count,
                bake_count=self.bake_count,
            ),
            cancel_range=(
                self.mechanism is Mechanism.COMMAND_LINE
                and mode.group is ModeGroup.ORDINARY
            ),
        )


def _register(shim: Shim, count: CountSource = CountSource.NONE) -> MappingRecipe:
    return MappingRecipe(
        Mechanism.EXPRESSION_REGISTER,
        shim,
        count,
        bake_count=count is not CountSource.NONE,
    )


def _expression(shim: Shim, count: CountSource = CountSource.NONE) -> MappingRecipe:
    return MappingRecipe(Mechanism.EXPRESSION, shim, count)


def _command_line(shim: Shim, count: CountSource = CountSource.NONE) -> MappingRecipe:
    return MappingRecipe(Mechanism.COMMAND_LINE, shim, count)


_N = ModeGroup.ORDINARY
_V = ModeGroup.SELECTION
_O = ModeGroup.OPERATOR_PENDING

# Idempotent actions go through the expression register so the host's
# repeat command never sees them. Counts in selection modes can only be
# read while the mapping text is produced, hence the baked literals.
_TABLE: Mapping[tuple[ActionKind, ModeGroup], MappingRecipe] = MappingProxyType(
    {
        (ActionKind.IDEMPOTENT, _N): _register(Shim.INVOKE),
        (ActionKind.IDEMPOTENT, _V): _register(Shim.INVOKE),
        (ActionKind.IDEMPOTENT, _O): _command_line(Shim.INVOKE),
        (ActionKind.REPEATABLE, _N): _expression(
            Shim.INVOKE_REPEATED, CountSource.COUNT1
        ),
        (ActionKind.REPEATABLE, _V): _expression(
            Shim.INVOKE_REPEATED, CountSource.COUNT1
        ),
        (ActionKind.REPEATABLE, _O): _command_line(
            Shim.INVOKE_REPEATED, CountSource.COUNT1
        ),
        (ActionKind.WITH_COUNT, _N): _command_line(
            Shim.INVOKE_WITH_COUNT, CountSource.COUNT
        ),
        (ActionKind.WITH_COUNT, _V): _register(
            Shim.INVOKE_WITH_COUNT, CountSource.COUNT
        ),
        (ActionKind.WITH_COUNT, _O): _command_line(
            Shim.INVOKE_WITH_COUNT, CountSource.COUNT
        ),
        (ActionKind.WITH_COUNT1, _N): _command_line(
            Shim.INVOKE_WITH_COUNT, CountSource.COUNT1
        ),
        (ActionKind.WITH_COUNT1, _V): _register(
            Shim.INVOKE_WITH_COUNT, CountSource.COUNT1
        ),
        (ActionKind.WITH_COUNT1, _O): _command_line(
            Shim.INVOKE_WITH_COUNT, CountSource.COUNT1
        ),
    }
)

_missing = {(kind, group) for kind in ActionKind for group in ModeGroup} - set(_TABLE)
if _missing:  # pragma: no cover - guards edits to the table above
    raise RuntimeError(f"Mapping table misses {sorted(_missing)}")


def _coerce_mode(mode: Union[InputMode, str]) -> InputMode:
    if isinstance(mode, InputMode):
        return mode
    try:
        return InputMode(mode)
    except ValueError:
        raise UnsupportedModeError(str(mode)) from None


class MappingSynthesizer:
    """Produces ``MappingSpec`` values; rendering them is the host's job."""

    def __init__(self, *, logger_name: str | None = None) -> None:
        self._logger_name = logger_name
        self._table = _TABLE

    def recipe(self, kind: ActionKind, mode: Union[InputMode, str]) -> MappingRecipe:
        return self._table[(ActionKind(kind), _coerce_mode(mode).group)]

    def spec_for(
        self,
        kind: ActionKind,
        mode: Union[InputMode, str],
        action_id: ActionId,
        name: str,
    ) -> MappingSpec:
        input_mode = _coerce_mode(mode)
        return self.recipe(kind, input_mode).build(
            action_id, input_mode, trigger_for(name)
        )

    def synthesize(
        self,
        entry: RegisteredAction,
        name: str,
        modes: Iterable[Union[InputMode, str]] | None = None,
    ) -> tuple[MappingSpec, ...]:
        """Build one spec per mode, checking every mode before building any."""

        targets = tuple(
            _coerce_mode(mode) for mode in (entry.modes if modes is None else modes)
        )
        with span(
            "mappings::synthesize",
            logger_name=self._logger_name,
            component="mappings",
            metadata={
                "action_id": entry.id,
                "kind": entry.kind.value,
                "modes": "".join(mode.value for mode in targets),
            },
        ):
            return tuple(
                self.spec_for(entry.kind, mode, entry.id, name) for mode in targets
            )


__all__ = ["MappingRecipe", "MappingSynthesizer"]
