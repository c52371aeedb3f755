"""Bidirectional id/name store with a monotonic id generator."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from map_to_side_effects.errors import UnknownIdError, UnknownNameError

from .models import ActionId


@dataclass(slots=True)
class IdentifierStoreStats:
    """Snapshot of the store, used in tests and diagnostics."""

    last_issued: ActionId
    names: frozenset[str]


class IdentifierStore:
    """Owns id allocation and the one-to-one id <-> name association.

    Ids are never handed out twice within the lifetime of a store, not even
    after ``reset``.
    """

    def __init__(self) -> None:
        self._last_issued: ActionId = 0
        self._names_by_id: Dict[ActionId, str] = {}
        self._ids_by_name: Dict[str, ActionId] = {}

    @property
    def last_issued(self) -> ActionId:
        return self._last_issued

    def allocate(self) -> ActionId:
        self._last_issued += 1
        return self._last_issued

    def bind_name(self, action_id: ActionId, name: str) -> None:
        """Associate ``name`` with ``action_id``; the name must be validated.

        Binding the same pair twice is a no-op. Rebinding a name that
        belongs to another id is a programming error.
        """

        if self._names_by_id.get(action_id) == name:
            return
        owner = self._ids_by_name.get(name)
        if owner is not None and owner != action_id:
            raise ValueError(f"Name {name!r} is bound to action {owner}")
        previous = self._names_by_id.get(action_id)
        if previous is not None:
            del self._ids_by_name[previous]
        self._names_by_id[action_id] = name
        self._ids_by_name[name] = action_id

    def unbind(self, action_id: ActionId) -> str:
        try:
            name = self._names_by_id.pop(action_id)
        except KeyError:
            raise UnknownIdError(action_id) from None
        del self._ids_by_name[name]
        return name

    def resolve(self, name: str) -> ActionId:
        try:
            return self._ids_by_name[name]
        except KeyError:
            raise UnknownNameError(name) from None

    def name_of(self, action_id: ActionId) -> str:
        try:
            return self._names_by_id[action_id]
        except KeyError:
            raise UnknownIdError(action_id) from None

    def find(self, name: str) -> Optional[ActionId]:
        return self._ids_by_name.get(name)

    def has_id(self, action_id: ActionId) -> bool:
        return action_id in self._names_by_id

    def has_name(self, name: str) -> bool:
        return name in self._ids_by_name

    def all_names(self) -> frozenset[str]:
        return frozenset(self._ids_by_name)

    def all_ids(self) -> tuple[ActionId, ...]:
        return tuple(self._names_by_id)

    def reset(self) -> None:
        # The counter stays where it is so ids issued before the reset
        # cannot be confused with new registrations.
        self._names_by_id.clear()
        self._ids_by_name.clear()

    def stats(self) -> IdentifierStoreStats:
        return IdentifierStoreStats(
            last_issued=self._last_issued, names=self.all_names()
        )


__all__ = ["IdentifierStore", "IdentifierStoreStats"]
