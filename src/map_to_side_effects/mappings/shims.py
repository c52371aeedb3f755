"""Entry points the installed mappings call when a trigger fires.

These run on every keypress of every binding, so they only do a lookup and
the call; no spans are opened here.
"""

from __future__ import annotations

from typing import Callable, Dict

from map_to_side_effects.errors import UnknownIdError
from map_to_side_effects.registry.actions import ActionRegistry
from map_to_side_effects.registry.models import Action, ActionId
from map_to_side_effects.runtime import telemetry

from .models import Shim


class Dispatcher:
    """Looks actions up by id and calls them with zero or one argument.

    Every shim returns an empty string so it can be used as the value of an
    expression mapping without inserting anything.
    """

    def __init__(
        self, registry: ActionRegistry, *, logger_name: str | None = None
    ) -> None:
        self._registry = registry
        self.logger = telemetry.get_logger(logger_name or "map_to_side_effects.shims")
        self._routes: Dict[Shim, Callable[..., str]] = {
            Shim.INVOKE: self.invoke,
            Shim.INVOKE_REPEATED: self.invoke_repeated,
            Shim.INVOKE_WITH_COUNT: self.invoke_with_count,
        }

    def invoke(self, action_id: ActionId) -> str:
        self._lookup(action_id)()
        return ""

    def invoke_repeated(self, action_id: ActionId, count1: int) -> str:
        handler = self._lookup(action_id)
        remaining = int(count1)
        while remaining > 0:
            handler()
            remaining -= 1
        return ""

    def invoke_with_count(self, action_id: ActionId, count: int) -> str:
        self._lookup(action_id)(int(count))
        return ""

    def call(self, shim: Shim | str, action_id: ActionId, *args: int) -> str:
        """Route a call by shim name, as hosts receive it."""

        try:
            route = self._routes[Shim(shim)]
        except ValueError:
            raise LookupError(f"Unknown shim {shim!r}") from None
        return route(int(action_id), *args)

    def _lookup(self, action_id: ActionId) -> Action:
        # The handler is fetched once; an action that clears itself still
        # finishes the current invocation.
        try:
            return self._registry.get(action_id).handler
        except UnknownIdError:
            self.logger.error(
                f"stale binding: action {action_id} is no longer registered"
            )
            raise


__all__ = ["Dispatcher"]
