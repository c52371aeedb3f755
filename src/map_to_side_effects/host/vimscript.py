"""Render ``MappingSpec`` values as Vim mapping commands."""

from __future__ import annotations

from typing import Callable, Dict, Sequence

from map_to_side_effects.mappings.models import (
    CountSource,
    MappingSpec,
    Mechanism,
    Shim,
    ShimCall,
)
from map_to_side_effects.registry.models import InputMode

CallFormatter = Callable[[Shim, Sequence[str]], str]

AUTOLOAD_PREFIX = "map_to_side_effects#"

_MAP_COMMANDS: Dict[InputMode, str] = {
    InputMode.NORMAL: "nnoremap",
    InputMode.VISUAL_SELECT: "vnoremap",
    InputMode.VISUAL: "xnoremap",
    InputMode.SELECT: "snoremap",
    InputMode.OPERATOR_PENDING: "onoremap",
}

_COUNT_VARIABLES: Dict[CountSource, str] = {
    CountSource.COUNT: "v:count",
    CountSource.COUNT1: "v:count1",
}

# Stand-in for the count while the call text is split around it.
_COUNT_SLOT = "\x00count\x00"


def autoload_call(shim: Shim, args: Sequence[str]) -> str:
    """Default call text, naming a ``map_to_side_effects#<shim>`` function.

    No such Vim functions ship with this package. The text suits
    ``SimulatedEditor``, which never evaluates it, and hosts that define
    the autoload functions themselves. ``NvimHost`` renders ``rpcrequest``
    calls instead.
    """

    return f"{AUTOLOAD_PREFIX}{shim.value}({', '.join(args)})"


def vim_string(text: str) -> str:
    """Quote ``text`` as a single-quoted Vim string literal."""

    return "'" + text.replace("'", "''") + "'"


class VimscriptRenderer:
    """Turns host-neutral mapping specs into ``:map``/``:unmap`` commands.

    ``call_formatter`` decides how a shim call looks in Vim script, so the
    same renderer serves autoload functions and RPC-backed hosts.
    """

    def __init__(self, call_formatter: CallFormatter = autoload_call) -> None:
        self._format_call = call_formatter

    def call_expression(self, call: ShimCall) -> str:
        args = [str(call.action_id)]
        if call.count is not CountSource.NONE:
            args.append(_COUNT_VARIABLES[call.count])
        return self._format_call(call.shim, args)

    def rhs(self, spec: MappingSpec) -> tuple[bool, str]:
        """Return ``(is_expression_mapping, right_hand_side)``."""

        call = spec.call
        if spec.mechanism is Mechanism.COMMAND_LINE:
            prefix = ":<C-U>" if spec.cancel_range else ":"
            return False, f"{prefix}call {self.call_expression(call)}<CR>"
        if spec.mechanism is Mechanism.EXPRESSION:
            return True, self.call_expression(call)
        if not call.bake_count:
            return False, f'"={self.call_expression(call)}<CR>'
        return True, self._baked_register_expression(call)

    def map_command(self, spec: MappingSpec) -> str:
        is_expr, rhs = self.rhs(spec)
        flags = "<silent> <unique> <expr>" if is_expr else "<silent> <unique>"
        return f"{_MAP_COMMANDS[spec.mode]} {flags} {spec.trigger} {rhs}"

    def unmap_command(self, spec: MappingSpec) -> str:
        return f"{spec.mode.value}unmap {spec.trigger}"

    def _baked_register_expression(self, call: ShimCall) -> str:
        # The mapping evaluates to '"=f(id, <count>)<CR>' with the count
        # spliced in as a literal when the keys are produced.
        text = self._format_call(call.shim, [str(call.action_id), _COUNT_SLOT])
        before, after = text.split(_COUNT_SLOT)
        head = vim_string('"=' + before)
        tail = vim_string(after)
        variable = _COUNT_VARIABLES[call.count]
        return f'{head} . {variable} . {tail} . "\\<CR>"'


__all__ = [
    "AUTOLOAD_PREFIX",
    "CallFormatter",
    "VimscriptRenderer",
    "autoload_call",
    "vim_string",
]
