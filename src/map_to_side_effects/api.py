"""Public entry point: register actions once, get ``<Plug>`` triggers back."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Union

from map_to_side_effects.errors import (
    NameNotAvailableError,
    UnknownIdError,
    UnknownNameError,
)
from map_to_side_effects.host.base import MappingHost
from map_to_side_effects.mappings import Dispatcher, MappingSpec, MappingSynthesizer
from map_to_side_effects.mappings.models import trigger_for
from map_to_side_effects.registry import (
    ActionKind,
    ActionRegistry,
    IdentifierStore,
    InputMode,
    NameValidator,
    RegisteredAction,
    SetUpOptions,
    generated_name,
    name_format_valid,
    parse_modes,
)
from map_to_side_effects.registry.models import Action, ActionId
from map_to_side_effects.runtime import telemetry
from map_to_side_effects.runtime.telemetry import span

Options = Union[SetUpOptions, Mapping[str, object], None]


@dataclass(slots=True)
class RegistryStats:
    """Lightweight snapshot describing registry state."""

    action_count: int
    binding_count: int
    names: tuple[str, ...]


class SideEffects:
    """Owns the id/name store, the actions and their installed mappings.

    One instance per host editor. Every operation is synchronous and either
    returns or raises; failed set-ups leave nothing behind.
    """

    def __init__(
        self, host: MappingHost, *, logger_name: str | None = None
    ) -> None:
        self.host = host
        self._logger_name = logger_name
        self.logger = telemetry.get_logger(logger_name)
        self.store = IdentifierStore()
        self.actions = ActionRegistry()
        self.validator = NameValidator(self.store)
        self.synthesizer = MappingSynthesizer(logger_name=logger_name)
        self.dispatcher = Dispatcher(self.actions)
        self._bindings: Dict[ActionId, tuple[MappingSpec, ...]] = {}
        host.attach(self.dispatcher)

    # -- registration -------------------------------------------------

    def set_up_idempotent(self, action: Action, options: Options = None) -> ActionId:
        """Register a zero-argument action the host must never repeat."""

        return self.set_up(ActionKind.IDEMPOTENT, action, options)

    def set_up_repeatable(self, action: Action, options: Options = None) -> ActionId:
        """Register a zero-argument action that runs once per count."""

        return self.set_up(ActionKind.REPEATABLE, action, options)

    def set_up_with_count(self, action: Action, options: Options = None) -> ActionId:
        """Register an action receiving the raw count (0 when none is typed)."""

        return self.set_up(ActionKind.WITH_COUNT, action, options)

    def set_up_with_count1(self, action: Action, options: Options = None) -> ActionId:
        """Register an action receiving the count, 1 when none is typed."""

        return self.set_up(ActionKind.WITH_COUNT1, action, options)

    def set_up(
        self, kind: ActionKind | str, action: Action, options: Options = None
    ) -> ActionId:
        kind = ActionKind(kind)
        opts = SetUpOptions.coerce(options)
        with span(
            "registry::set_up",
            logger_name=self._logger_name,
            component="registry",
            metadata={"kind": kind.value, "modes": opts.modes},
        ) as handle:
            modes = parse_modes(opts.modes)
            if not callable(action):
                raise TypeError(
                    f"action must be callable, got {type(action).__name__}"
                )
            if opts.name is not None:
                self.validator.validate(opts.name)

            action_id = self.store.allocate()
            name = opts.name if opts.name is not None else generated_name(action_id)
            if self.store.has_name(name):
                raise NameNotAvailableError(name, self.store.find(name))
            handle.add_metadata("action_id", action_id)
            handle.add_metadata("name", name)

            entry = RegisteredAction(
                id=action_id, kind=kind, handler=action, modes=modes
            )
            specs = self.synthesizer.synthesize(entry, name)
            self.actions.add(entry)
            self.store.bind_name(action_id, name)
            installed: list[MappingSpec] = []
            try:
                for spec in specs:
                    self.host.install(spec)
                    installed.append(spec)
            except Exception:
                # Removal failures are only logged; the install error wins.
                self.store.unbind(action_id)
                self.actions.remove(action_id)
                self._remove_mappings(installed)
                raise
            self._bindings[action_id] = specs

        telemetry.record_event(
            "action.set_up",
            data={"action_id": action_id, "name": name, "kind": kind.value},
            logger_name=self._logger_name,
        )
        return action_id

    # -- clearing -----------------------------------------------------

    def clear_one(self, action_id: ActionId) -> None:
        with span(
            "registry::clear_one",
            logger_name=self._logger_name,
            component="registry",
            metadata={"action_id": action_id},
        ):
            if not self.store.has_id(action_id):
                raise UnknownIdError(action_id)
            _raise_first(self._tear_down(action_id))

    def clear_one_by_name(self, name: str) -> None:
        self.clear_one(self.store.resolve(name))

    def clear_multiple(self, action_ids: Iterable[ActionId]) -> None:
        """Clear several actions; nothing is cleared if any id is unknown."""

        targets = tuple(dict.fromkeys(action_ids))
        with span(
            "registry::clear_multiple",
            logger_name=self._logger_name,
            component="registry",
            metadata={"action_ids": list(targets)},
        ):
            missing = [
                action_id for action_id in targets if not self.store.has_id(action_id)
            ]
            if missing:
                raise UnknownIdError(missing)
            failures: list[Exception] = []
            for action_id in targets:
                failures.extend(self._tear_down(action_id))
            _raise_first(failures)

    def clear_multiple_by_names(self, names: Iterable[str]) -> None:
        targets = tuple(dict.fromkeys(names))
        missing = [name for name in targets if not self.store.has_name(name)]
        if missing:
            raise UnknownNameError(missing)
        self.clear_multiple(self.store.resolve(name) for name in targets)

    def reset(self) -> None:
        """Clear every registration. Ids issued so far are never reused."""

        with span(
            "registry::reset",
            logger_name=self._logger_name,
            component="registry",
        ) as handle:
            snapshot = self.store.all_ids()
            handle.add_metadata("cleared", len(snapshot))
            failures: list[Exception] = []
            for action_id in snapshot:
                if self.store.has_id(action_id):
                    failures.extend(self._tear_down(action_id))
            self.store.reset()
            self.actions.clear()
            self._bindings.clear()
            telemetry.record_event(
                "registry.reset",
                data={"cleared": len(snapshot), "failures": len(failures)},
                logger_name=self._logger_name,
            )
            _raise_first(failures)

    # -- names and queries --------------------------------------------

    def name_format_valid(self, name: object) -> bool:
        return name_format_valid(name)

    def name_available(self, name: str) -> bool:
        return self.validator.available(name)

    def names(self) -> frozenset[str]:
        return self.store.all_names()

    def id_for_name(self, name: str) -> ActionId:
        return self.store.resolve(name)

    def name_for_id(self, action_id: ActionId) -> str:
        return self.store.name_of(action_id)

    def trigger_for(self, name: str) -> str:
        self.store.resolve(name)
        return trigger_for(name)

    def kind_of(self, action_id: ActionId) -> ActionKind:
        return self.actions.get(action_id).kind

    def modes_of(self, action_id: ActionId) -> tuple[InputMode, ...]:
        return self.actions.get(action_id).modes

    def bindings(self, action_id: ActionId) -> tuple[MappingSpec, ...]:
        if not self.store.has_id(action_id):
            raise UnknownIdError(action_id)
        return self._bindings.get(action_id, ())

    def stats(self) -> RegistryStats:
        return RegistryStats(
            action_count=len(self.actions),
            binding_count=sum(len(specs) for specs in self._bindings.values()),
            names=tuple(sorted(self.store.all_names())),
        )

    # -- internals ----------------------------------------------------

    def _tear_down(self, action_id: ActionId) -> list[Exception]:
        # Drop the registration first so nothing observes a half-removed
        # action, then take the mappings out of the host.
        name = self.store.unbind(action_id)
        entry = self.actions.remove(action_id)
        specs = self._bindings.pop(action_id, ())
        failures = self._remove_mappings(specs)
        telemetry.record_event(
            "action.cleared",
            data={"action_id": action_id, "name": name, "kind": entry.kind.value},
            logger_name=self._logger_name,
        )
        return failures

    def _remove_mappings(self, specs: Iterable[MappingSpec]) -> list[Exception]:
        """Remove every mapping, logging and returning the failures."""

        failures: list[Exception] = []
        for spec in specs:
            try:
                self.host.remove(spec)
            except Exception as exc:
                self.logger.error(
                    f"failed to remove {spec.trigger} in mode {spec.mode.value}: {exc}"
                )
                failures.append(exc)
        return failures


def _raise_first(failures: list[Exception]) -> None:
    if failures:
        raise failures[0]


__all__ = ["RegistryStats", "SideEffects"]
