from __future__ import annotations

from typing import Any, Callable, Dict, List

import pytest
from pynvim.api import NvimError

from map_to_side_effects import SideEffects
from map_to_side_effects.errors import DuplicateTriggerError
from map_to_side_effects.host import NvimHost


class FakeNvim:
    """Records commands the way a pynvim ``Nvim`` would receive them."""

    def __init__(self, channel_id: int = 3) -> None:
        self.channel_id = channel_id
        self.commands: List[str] = []
        self.vvars: Dict[str, int] = {"count": 0, "count1": 1}
        self.fail_with: str | None = None
        self.loop: tuple[Callable[..., Any], Callable[..., Any]] | None = None

    def command(self, text: str) -> None:
        if self.fail_with is not None:
            raise NvimError(self.fail_with)
        self.commands.append(text)

    def run_loop(
        self, request_cb: Callable[..., Any], notification_cb: Callable[..., Any]
    ) -> None:
        self.loop = (request_cb, notification_cb)


def make_host() -> tuple[SideEffects, NvimHost, FakeNvim]:
    nvim = FakeNvim()
    host = NvimHost(nvim)
    return SideEffects(host), host, nvim


def test_install_renders_rpc_mappings() -> None:
    side_effects, _host, nvim = make_host()

    side_effects.set_up_repeatable(lambda: None, {"modes": "n", "name": "step"})

    assert nvim.commands == [
        "nnoremap <silent> <unique> <expr> <Plug>(step) "
        "rpcrequest(3, 'map_to_side_effects:invoke_repeated', 1, v:count1)"
    ]


def test_requests_reach_the_action() -> None:
    side_effects, host, _nvim = make_host()
    received: list[int] = []
    action_id = side_effects.set_up_with_count(received.append, {"modes": "no"})

    result = host.handle_request(
        "map_to_side_effects:invoke_with_count", [action_id, 4]
    )

    assert result == ""
    assert received == [4]


def test_unexpected_request_name_is_rejected() -> None:
    _side_effects, host, _nvim = make_host()

    with pytest.raises(LookupError):
        host.handle_request("other_plugin:thing", [1])


def test_e227_becomes_duplicate_trigger_and_rolls_back() -> None:
    side_effects, _host, nvim = make_host()
    nvim.fail_with = "Vim(nnoremap):E227: mapping already exists for <Plug>(dup)"

    with pytest.raises(DuplicateTriggerError) as excinfo:
        side_effects.set_up_idempotent(lambda: None, {"modes": "n", "name": "dup"})

    assert excinfo.value.trigger == "<Plug>(dup)"
    assert side_effects.name_available("dup")
    assert side_effects.stats().action_count == 0


def test_other_nvim_errors_propagate_unchanged() -> None:
    side_effects, _host, nvim = make_host()
    nvim.fail_with = "E492: Not an editor command"

    with pytest.raises(NvimError):
        side_effects.set_up_idempotent(lambda: None, {"modes": "n"})


def test_clear_unmaps_every_mode() -> None:
    side_effects, _host, nvim = make_host()
    action_id = side_effects.set_up_idempotent(lambda: None, {"name": "gone"})

    side_effects.clear_one(action_id)

    assert nvim.commands[-3:] == [
        "nunmap <Plug>(gone)",
        "vunmap <Plug>(gone)",
        "ounmap <Plug>(gone)",
    ]


def test_counts_are_read_from_vvars() -> None:
    _side_effects, host, nvim = make_host()
    nvim.vvars.update(count=6, count1=6)

    assert (host.count, host.count1) == (6, 6)


def test_serve_hands_callbacks_to_run_loop() -> None:
    _side_effects, host, nvim = make_host()

    host.serve()

    assert nvim.loop == (host.handle_request, host.handle_notification)


def test_installed_mappings_only_call_back_over_rpc() -> None:
    side_effects, _host, nvim = make_host()

    side_effects.set_up_idempotent(lambda: None)
    side_effects.set_up_with_count1(lambda n: None)

    assert nvim.commands
    assert all("rpcrequest(3, " in command for command in nvim.commands)
    assert not any("map_to_side_effects#" in command for command in nvim.commands)
