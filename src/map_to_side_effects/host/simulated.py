"""In-memory host editor for tests and for embedding without an editor.

It keeps a mapping table per mode, a count prefix, the expression register
and a "repeat last change" command. Command-line and expression mappings
are remembered as the last change; selecting the expression register is
not a change, so repeating never re-runs those mappings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Union

from map_to_side_effects.errors import DuplicateTriggerError, UnsupportedModeError
from map_to_side_effects.mappings.models import MappingSpec, Mechanism
from map_to_side_effects.mappings.shims import Dispatcher
from map_to_side_effects.registry.models import InputMode
from map_to_side_effects.runtime import telemetry

from .vimscript import VimscriptRenderer

ModeLike = Union[InputMode, str]


@dataclass(frozen=True, slots=True)
class ForeignMapping:
    """A mapping some other plugin or the user defined for a trigger."""

    mode: InputMode
    trigger: str
    rhs: str


@dataclass(frozen=True, slots=True)
class Change:
    trigger: str
    mode: InputMode
    count: Optional[int]


def _mode(mode: ModeLike) -> InputMode:
    if isinstance(mode, InputMode):
        return mode
    try:
        return InputMode(mode)
    except ValueError:
        raise UnsupportedModeError(str(mode)) from None


def _overlapping(mode: InputMode) -> tuple[InputMode, ...]:
    """Mode flags whose mappings would share a table slot with ``mode``."""

    if mode is InputMode.VISUAL_SELECT:
        return (InputMode.VISUAL_SELECT, InputMode.VISUAL, InputMode.SELECT)
    if mode in (InputMode.VISUAL, InputMode.SELECT):
        return (mode, InputMode.VISUAL_SELECT)
    return (mode,)


class SimulatedEditor:
    """Host that executes synthesized mappings without a real editor."""

    def __init__(self, *, renderer: VimscriptRenderer | None = None) -> None:
        self.renderer = renderer or VimscriptRenderer()
        self.logger = telemetry.get_logger("map_to_side_effects.simulated")
        self.commands: List[str] = []
        self.expression_register: Optional[str] = None
        self.last_change: Optional[Change] = None
        self._mappings: Dict[
            tuple[InputMode, str], Union[MappingSpec, ForeignMapping]
        ] = {}
        self._dispatcher: Optional[Dispatcher] = None
        self._count: Optional[int] = None

    def attach(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher

    @property
    def count(self) -> int:
        return self._count or 0

    @property
    def count1(self) -> int:
        return self._count or 1

    def install(self, spec: MappingSpec) -> None:
        self._claim(spec.mode, spec.trigger)
        self.commands.append(self.renderer.map_command(spec))
        self._mappings[spec.key] = spec

    def define(self, mode: ModeLike, trigger: str, rhs: str) -> ForeignMapping:
        """Map ``trigger`` to plain keys, as a user's own mapping would."""

        mapping = ForeignMapping(_mode(mode), trigger, rhs)
        self._claim(mapping.mode, trigger)
        self._mappings[(mapping.mode, trigger)] = mapping
        return mapping

    def remove(self, spec: MappingSpec) -> None:
        current = self._mappings.get(spec.key)
        if current is None:
            raise LookupError(
                f"No mapping for {spec.trigger} in mode {spec.mode.value!r}"
            )
        self.commands.append(self.renderer.unmap_command(spec))
        del self._mappings[spec.key]

    def mappings(self) -> tuple[MappingSpec, ...]:
        return tuple(
            mapping
            for mapping in self._mappings.values()
            if isinstance(mapping, MappingSpec)
        )

    def lookup(
        self, mode: ModeLike, trigger: str
    ) -> Union[MappingSpec, ForeignMapping, None]:
        """Mapping that fires for ``trigger`` when the editor is in ``mode``."""

        target = _mode(mode)
        for flag in _overlapping(target):
            found = self._mappings.get((flag, trigger))
            if found is not None:
                return found
        return None

    def press(
        self,
        trigger: str,
        *,
        mode: ModeLike = InputMode.NORMAL,
        count: int | None = None,
    ) -> str:
        """Type ``trigger`` in ``mode``, optionally preceded by a count.

        Returns the keys the mapping fed back to the editor.
        """

        target = _mode(mode)
        mapping = self.lookup(target, trigger)
        if mapping is None:
            raise KeyError(f"{trigger} is not mapped in mode {target.value!r}")
        if isinstance(mapping, ForeignMapping):
            return mapping.rhs
        if self._dispatcher is None:
            raise RuntimeError("SimulatedEditor has no dispatcher attached")

        self.logger.debug(f"press {trigger} mode={target.value} count={count}")
        self._count = count if count else None
        try:
            args = mapping.call.arguments(self.count, self.count1)
            result = self._dispatcher.call(mapping.call.shim, *args)
        finally:
            self._count = None

        if mapping.mechanism is Mechanism.EXPRESSION_REGISTER:
            self.expression_register = result
        else:
            self.last_change = Change(trigger, target, count)
        return result

    def repeat_last_change(self, count: int | None = None) -> bool:
        """Replay the last change; ``False`` when there is nothing to repeat."""

        change = self.last_change
        if change is None:
            return False
        self.press(
            change.trigger,
            mode=change.mode,
            count=change.count if count is None else count,
        )
        return True

    def _claim(self, mode: InputMode, trigger: str) -> None:
        for flag in _overlapping(mode):
            if (flag, trigger) in self._mappings:
                raise DuplicateTriggerError(
                    trigger, mode.value, f"E227: mapping already exists for {trigger}"
                )


__all__ = ["Change", "ForeignMapping", "SimulatedEditor"]
