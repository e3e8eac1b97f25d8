from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from factories import FakeSessionClient, drive, make_root, wizard_state
from pewcraft_client.api.models import CellId, CharacterId, ClassId, NewCharacterRequest, TeamId
from pewcraft_client.core.context import RootContext
from pewcraft_client.core.events import (
    BACKSPACE,
    CANCEL,
    CONFIRM,
    DOWN,
    LEFT,
    OTHER,
    RIGHT,
    TIMEOUT,
    UP,
    Event,
    ExpectedEvent,
)
from pewcraft_client.core.machine import expected_event, next_state, positions_for
from pewcraft_client.core.states import (
    CreateCharacterData,
    CreateCharacterState,
    SelectMapData,
    SessionErrorState,
    WaitForGameCreationState,
    WizardStep,
)

NON_CONFIRM_EVENTS = [LEFT, RIGHT, UP, DOWN, BACKSPACE, CANCEL, TIMEOUT, OTHER, Event.printable("a")]


def test_steps_advance_in_order_on_confirm(root: RootContext) -> None:
    state = wizard_state(root)
    steps = []
    for _ in range(4):
        steps.append(state.step)
        state = next_state(state, CONFIRM)

    assert steps == [WizardStep.team, WizardStep.class_, WizardStep.position, WizardStep.name]


@pytest.mark.parametrize(
    ("confirms", "expected"),
    [
        (0, ExpectedEvent.horizontal_choice),
        (1, ExpectedEvent.horizontal_choice),
        (2, ExpectedEvent.generic_choice),
        (3, ExpectedEvent.free_text),
    ],
)
def test_expected_event_per_step(root: RootContext, confirms: int, expected: ExpectedEvent) -> None:
    assert expected_event(wizard_state(root, confirms=confirms)) is expected


def test_team_and_class_cycle_with_wraparound(root: RootContext) -> None:
    team = wizard_state(root)
    assert drive(team, LEFT).data.curr.team_index == 2
    assert drive(team, RIGHT, RIGHT, RIGHT).data.curr.team_index == 0

    klass = drive(team, CONFIRM)
    assert drive(klass, RIGHT).data.curr.class_index == 1
    assert drive(klass, RIGHT, RIGHT).data.curr.class_index == 0
    assert drive(klass, LEFT).data.curr.class_index == 1


def test_positions_follow_the_chosen_team(root: RootContext) -> None:
    north = drive(wizard_state(root), CONFIRM, CONFIRM)
    south = drive(wizard_state(make_root()), RIGHT, RIGHT, CONFIRM, CONFIRM)

    assert positions_for(north) == [CellId(0), CellId(1)]
    assert positions_for(south) == [CellId(16), CellId(17), CellId(18)]
    assert drive(south, LEFT).data.curr.position_index == 2
    assert drive(south, RIGHT, RIGHT, RIGHT).data.curr.position_index == 0


@given(event=st.sampled_from(NON_CONFIRM_EVENTS), presses=st.integers(min_value=0, max_value=5))
def test_position_step_only_advances_on_confirm(event: Event, presses: int) -> None:
    position = drive(wizard_state(confirms=2), *([RIGHT] * presses))

    after = next_state(position, event)

    assert isinstance(after, CreateCharacterState)
    assert after.step is WizardStep.position
    assert 0 <= after.data.curr.position_index < len(positions_for(after))


@pytest.mark.parametrize("confirms", [0, 1, 2, 3])
def test_cancel_never_goes_back_a_step(root: RootContext, confirms: int) -> None:
    state = wizard_state(root, confirms=confirms)
    assert next_state(state, CANCEL) == state


def test_name_typing_and_backspace(root: RootContext) -> None:
    name = wizard_state(root, confirms=3)

    assert drive(name, BACKSPACE).data.curr.name == ""
    typed = drive(name, Event.printable("Ze"), Event.printable("d"), Event.printable("x"), BACKSPACE)
    assert typed.data.curr.name == "Zed"
    assert typed.step is WizardStep.name
    # Navigation does not touch the buffer.
    assert drive(typed, LEFT, RIGHT).data.curr.name == "Zed"


def test_empty_name_is_not_submitted(root: RootContext, fake_client: FakeSessionClient) -> None:
    name = drive(wizard_state(root, confirms=3), Event.printable("  "))

    assert next_state(name, CONFIRM) == name
    assert "create_character" not in fake_client.names()


def test_confirm_name_creates_character(root: RootContext, fake_client: FakeSessionClient) -> None:
    name = drive(wizard_state(root), LEFT, CONFIRM, RIGHT, CONFIRM, RIGHT, CONFIRM, Event.printable("Zed"))

    waiting = next_state(name, CONFIRM)

    assert fake_client.calls[-1] == (
        "create_character",
        ("G1", NewCharacterRequest(name="Zed", class_id=ClassId(1), team=TeamId(2), position=CellId(17))),
    )
    assert isinstance(waiting, WaitForGameCreationState)
    data = waiting.data.curr
    assert (data.game_id, data.login, data.character_id, data.map_id) == ("G1", "L1", CharacterId(7), 1)
    assert waiting.data.prev is name.data
    # Every ancestor is still reachable through the chain.
    assert waiting.data.ancestor(CreateCharacterData).name == "Zed"
    assert waiting.data.ancestor(SelectMapData).curr_index == 1
    assert waiting.data.root is root


def test_failed_character_creation_keeps_the_wizard(root: RootContext, fake_client: FakeSessionClient) -> None:
    fake_client.fail_on.add("create_character")
    name = drive(wizard_state(root, confirms=3), Event.printable("Zed"))

    failed = next_state(name, CONFIRM)

    assert isinstance(failed, SessionErrorState)
    assert failed.resume == name
    assert next_state(failed, CONFIRM).data.curr.name == "Zed"
