"""Neovim host driven over msgpack-RPC through pynvim."""

from __future__ import annotations

from functools import partial
from typing import Any, Optional, Sequence

from pynvim.api import NvimError

from map_to_side_effects.errors import DuplicateTriggerError
from map_to_side_effects.mappings.models import MappingSpec, Shim
from map_to_side_effects.mappings.shims import Dispatcher
from map_to_side_effects.runtime import telemetry

from .vimscript import VimscriptRenderer, vim_string

REQUEST_PREFIX = "map_to_side_effects:"


def rpc_call(channel_id: int, shim: Shim, args: Sequence[str]) -> str:
    method = vim_string(f"{REQUEST_PREFIX}{shim.value}")
    return f"rpcrequest({channel_id}, {', '.join([method, *args])})"


class NvimHost:
    """Installs mappings in a running Neovim and serves the shim requests.

    Mappings call back with ``rpcrequest`` on this client's channel, so the
    process must be inside ``serve()`` (or another request loop forwarding
    to ``handle_request``) for triggers to work.
    """

    def __init__(
        self,
        nvim: Any,
        *,
        channel_id: Optional[int] = None,
        logger_name: str | None = None,
    ) -> None:
        self.nvim = nvim
        channel = nvim.channel_id if channel_id is None else channel_id
        self.renderer = VimscriptRenderer(call_formatter=partial(rpc_call, channel))
        self.logger = telemetry.get_logger(logger_name or "map_to_side_effects.nvim")
        self._dispatcher: Optional[Dispatcher] = None

    def attach(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher

    def install(self, spec: MappingSpec) -> None:
        command = self.renderer.map_command(spec)
        try:
            self.nvim.command(command)
        except NvimError as exc:
            # E227: mapping already exists for {lhs}
            if "E227" in str(exc):
                raise DuplicateTriggerError(
                    spec.trigger, spec.mode.value, str(exc)
                ) from exc
            raise

    def remove(self, spec: MappingSpec) -> None:
        self.nvim.command(self.renderer.unmap_command(spec))

    @property
    def count(self) -> int:
        return int(self.nvim.vvars["count"])

    @property
    def count1(self) -> int:
        return int(self.nvim.vvars["count1"])

    def handle_request(self, name: str, args: Sequence[Any]) -> str:
        if self._dispatcher is None:
            raise RuntimeError("NvimHost has no dispatcher attached")
        if not name.startswith(REQUEST_PREFIX):
            raise LookupError(f"Unexpected request {name!r}")
        shim = name[len(REQUEST_PREFIX) :]
        return self._dispatcher.call(shim, *(int(arg) for arg in args))

    def handle_notification(self, name: str, args: Sequence[Any]) -> None:
        self.logger.debug(f"ignoring notification {name} {list(args)!r}")

    def serve(self) -> None:
        """Block in the pynvim event loop, answering shim requests."""

        self.nvim.run_loop(self.handle_request, self.handle_notification)


__all__ = ["NvimHost", "REQUEST_PREFIX", "rpc_call"]
