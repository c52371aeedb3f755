"""Registry of action callbacks keyed by numeric id."""

from __future__ import annotations

from typing import Dict, Iterator

from map_to_side_effects.errors import UnknownIdError

from .models import ActionId, RegisteredAction


class ActionRegistry:
    """Owns the callbacks; knows nothing about names or mappings."""

    def __init__(self) -> None:
        self._actions: Dict[ActionId, RegisteredAction] = {}

    def __len__(self) -> int:
        return len(self._actions)

    def __contains__(self, action_id: object) -> bool:
        return action_id in self._actions

    def __iter__(self) -> Iterator[RegisteredAction]:
        # Iterate over a copy: actions may clear registrations while we walk.
        return iter(tuple(self._actions.values()))

    def add(self, entry: RegisteredAction) -> RegisteredAction:
        if entry.id in self._actions:
            raise ValueError(f"Action {entry.id} already registered")
        self._actions[entry.id] = entry
        return entry

    def get(self, action_id: ActionId) -> RegisteredAction:
        try:
            return self._actions[action_id]
        except KeyError:
            raise UnknownIdError(action_id) from None

    def remove(self, action_id: ActionId) -> RegisteredAction:
        try:
            return self._actions.pop(action_id)
        except KeyError:
            raise UnknownIdError(action_id) from None

    def ids(self) -> tuple[ActionId, ...]:
        return tuple(self._actions)

    def clear(self) -> None:
        self._actions.clear()


__all__ = ["ActionRegistry"]
