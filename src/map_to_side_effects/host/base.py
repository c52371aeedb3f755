"""Interface every host editor adapter implements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from map_to_side_effects.mappings.models import MappingSpec

if TYPE_CHECKING:
    from map_to_side_effects.mappings.shims import Dispatcher


@runtime_checkable
class MappingHost(Protocol):
    """Installs and removes mappings and exposes the current count prefix.

    ``install`` must raise ``DuplicateTriggerError`` when the trigger is
    already mapped in that mode.
    """

    def attach(self, dispatcher: "Dispatcher") -> None: ...

    def install(self, spec: MappingSpec) -> None: ...

    def remove(self, spec: MappingSpec) -> None: ...

    @property
    def count(self) -> int: ...

    @property
    def count1(self) -> int: ...


__all__ = ["MappingHost"]
