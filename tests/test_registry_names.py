import pytest

from map_to_side_effects.errors import (
    InvalidNameFormatError,
    NameNotAvailableError,
    UnknownIdError,
    UnknownNameError,
    UnsupportedModeError,
)
from map_to_side_effects.registry import (
    ActionKind,
    ActionRegistry,
    IdentifierStore,
    InputMode,
    NameValidator,
    RegisteredAction,
    SetUpOptions,
    format_problem,
    generated_name,
    name_format_valid,
    parse_modes,
)


def make_entry(action_id: int = 1, kind: ActionKind = ActionKind.IDEMPOTENT):
    return RegisteredAction(id=action_id, kind=kind, handler=lambda: None)


@pytest.mark.parametrize(
    "name",
    [
        "a" * 46,
        "",
        "foo bar",
        "MapToSideEffects-x",
        "maptosideeffects-x",
        "MAPTOSIDEEFFECTS-x",
        "mapToSideEffects",
        "tab\there",
        "umlaut-ü",
        None,
        42,
    ],
)
def test_invalid_names(name: object) -> None:
    assert name_format_valid(name) is False
    assert format_problem(name)


@pytest.mark.parametrize("name", ["foo.bar-1:2", "a", "a" * 45, "x_Side-Effects"])
def test_valid_names(name: str) -> None:
    assert name_format_valid(name) is True
    assert format_problem(name) is None


def test_format_problem_names_the_broken_rule() -> None:
    assert "1-45" in format_problem("a" * 46)
    assert "allowed characters" in format_problem("foo bar")
    assert "MapToSideEffects" in format_problem("mapTOsideEFFECTS.thing")


def test_generated_names_use_reserved_prefix() -> None:
    assert generated_name(7) == "MapToSideEffects-7"
    assert name_format_valid(generated_name(7)) is False


def test_validator_reports_format_before_availability() -> None:
    store = IdentifierStore()
    validator = NameValidator(store)

    with pytest.raises(InvalidNameFormatError) as excinfo:
        validator.validate("foo bar")

    assert excinfo.value.name == "foo bar"
    assert "allowed characters" in str(excinfo.value)


def test_validator_rejects_claimed_names() -> None:
    store = IdentifierStore()
    validator = NameValidator(store)
    action_id = store.allocate()
    store.bind_name(action_id, "taken")

    assert validator.available("taken") is False
    assert validator.available("free") is True
    with pytest.raises(NameNotAvailableError) as excinfo:
        validator.validate("taken")

    assert excinfo.value.owner_id == action_id
    assert validator.validate("free") == "free"


def test_store_ids_are_monotonic_across_reset() -> None:
    store = IdentifierStore()
    first = store.allocate()
    store.bind_name(first, "one")
    second = store.allocate()

    store.reset()

    assert store.all_names() == frozenset()
    assert store.allocate() > second > first


def test_store_bidirectional_lookup_and_unbind() -> None:
    store = IdentifierStore()
    action_id = store.allocate()
    store.bind_name(action_id, "alpha")
    store.bind_name(action_id, "alpha")

    assert store.resolve("alpha") == action_id
    assert store.name_of(action_id) == "alpha"
    assert store.unbind(action_id) == "alpha"
    assert not store.has_name("alpha")
    assert not store.has_id(action_id)

    with pytest.raises(UnknownIdError):
        store.unbind(action_id)
    with pytest.raises(UnknownNameError):
        store.resolve("alpha")


def test_store_refuses_to_steal_a_name() -> None:
    store = IdentifierStore()
    first = store.allocate()
    second = store.allocate()
    store.bind_name(first, "shared")

    with pytest.raises(ValueError):
        store.bind_name(second, "shared")

    assert store.resolve("shared") == first


def test_action_registry_lifecycle() -> None:
    registry = ActionRegistry()
    entry = registry.add(make_entry(3, ActionKind.REPEATABLE))

    assert 3 in registry
    assert registry.get(3) is entry
    assert list(registry) == [entry]

    with pytest.raises(ValueError):
        registry.add(make_entry(3))

    assert registry.remove(3) is entry
    assert len(registry) == 0
    with pytest.raises(UnknownIdError):
        registry.get(3)


def test_registered_action_requires_callable() -> None:
    with pytest.raises(TypeError):
        RegisteredAction(
            id=1, kind=ActionKind.IDEMPOTENT, handler="nope"  # type: ignore[arg-type]
        )


def test_parse_modes_keeps_order_and_collapses_visual() -> None:
    assert parse_modes("nvo") == (
        InputMode.NORMAL,
        InputMode.VISUAL_SELECT,
        InputMode.OPERATOR_PENDING,
    )
    assert parse_modes("onn") == (InputMode.OPERATOR_PENDING, InputMode.NORMAL)
    assert parse_modes("xvs") == (InputMode.VISUAL_SELECT,)
    assert parse_modes("xs") == (InputMode.VISUAL, InputMode.SELECT)


@pytest.mark.parametrize("modes", ["", "nq", "i", "N"])
def test_parse_modes_rejects_unknown_flags(modes: str) -> None:
    with pytest.raises(UnsupportedModeError):
        parse_modes(modes)


def test_set_up_options_from_mapping() -> None:
    assert SetUpOptions.coerce(None) == SetUpOptions(modes="nvo", name=None)
    assert SetUpOptions.coerce({"name": "foo"}) == SetUpOptions(name="foo")

    with pytest.raises(ValueError, match="mode"):
        SetUpOptions.coerce({"mode": "n"})
