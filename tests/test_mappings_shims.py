from __future__ import annotations

import pytest

from map_to_side_effects.errors import UnknownIdError
from map_to_side_effects.mappings import Dispatcher, Shim
from map_to_side_effects.registry import ActionKind, ActionRegistry, RegisteredAction


def make_dispatcher(*entries: RegisteredAction) -> Dispatcher:
    registry = ActionRegistry()
    for entry in entries:
        registry.add(entry)
    return Dispatcher(registry)


def test_invoke_calls_without_arguments() -> None:
    calls: list[str] = []
    dispatcher = make_dispatcher(
        RegisteredAction(1, ActionKind.IDEMPOTENT, lambda: calls.append("hit"))
    )

    assert dispatcher.invoke(1) == ""
    assert calls == ["hit"]


def test_invoke_repeated_loops_count1_times() -> None:
    calls: list[int] = []
    dispatcher = make_dispatcher(
        RegisteredAction(1, ActionKind.REPEATABLE, lambda: calls.append(len(calls)))
    )

    dispatcher.invoke_repeated(1, 3)

    assert calls == [0, 1, 2]


@pytest.mark.parametrize("count1", [0, -2])
def test_invoke_repeated_skips_non_positive_counts(count1: int) -> None:
    calls: list[int] = []
    dispatcher = make_dispatcher(
        RegisteredAction(1, ActionKind.REPEATABLE, lambda: calls.append(1))
    )

    dispatcher.invoke_repeated(1, count1)

    assert calls == []


def test_invoke_with_count_passes_integer() -> None:
    received: list[int] = []
    dispatcher = make_dispatcher(
        RegisteredAction(4, ActionKind.WITH_COUNT, received.append)
    )

    dispatcher.invoke_with_count(4, "7")  # type: ignore[arg-type]

    assert received == [7]


def test_call_routes_by_shim_name() -> None:
    received: list[int] = []
    dispatcher = make_dispatcher(
        RegisteredAction(2, ActionKind.WITH_COUNT1, received.append)
    )

    dispatcher.call("invoke_with_count", 2, 1)
    dispatcher.call(Shim.INVOKE_WITH_COUNT, 2, 5)

    assert received == [1, 5]


def test_call_rejects_unknown_shim() -> None:
    dispatcher = make_dispatcher()

    with pytest.raises(LookupError):
        dispatcher.call("explode", 1)


def test_stale_id_is_reported() -> None:
    dispatcher = make_dispatcher()

    with pytest.raises(UnknownIdError) as excinfo:
        dispatcher.invoke(99)

    assert excinfo.value.action_id == 99


def test_loop_finishes_when_action_removes_itself() -> None:
    registry = ActionRegistry()
    calls: list[int] = []

    def action() -> None:
        calls.append(1)
        if 5 in registry:
            registry.remove(5)

    registry.add(RegisteredAction(5, ActionKind.REPEATABLE, action))
    dispatcher = Dispatcher(registry)

    dispatcher.invoke_repeated(5, 3)

    assert calls == [1, 1, 1]
    with pytest.raises(UnknownIdError):
        dispatcher.invoke_repeated(5, 1)
