from __future__ import annotations

import pytest

from factories import FakeSessionClient, drive, make_root
from pewcraft_client.api.models import CharacterId, JoinedGame, MapId, RejoinedCharacter
from pewcraft_client.core.context import RootContext
from pewcraft_client.core.events import BACKSPACE, CANCEL, CONFIRM, DOWN, LEFT, RIGHT, TIMEOUT, UP, Event, ExpectedEvent
from pewcraft_client.core.machine import expected_event, next_state, start
from pewcraft_client.core.states import (
    CreateCharacterState,
    CreateOrJoinData,
    CreateOrJoinState,
    JoinMode,
    Phase,
    SelectMapState,
    SessionErrorState,
    WaitForGameCreationState,
    WizardStep,
)

GAME_CODE = "ABCDEFGHIJ"


def _menu(root: RootContext) -> CreateOrJoinState:
    state = start(root, offer_join=True)
    assert isinstance(state, CreateOrJoinState)
    return state


def _typed(root: RootContext, code: str) -> CreateOrJoinState:
    return drive(_menu(root), DOWN, Event.printable(code))


def test_menu_starts_in_create_mode(root: RootContext) -> None:
    state = _menu(root)

    assert state.mode is JoinMode.create
    assert state.data.curr == CreateOrJoinData(code="")
    assert expected_event(state) is ExpectedEvent.none


@pytest.mark.parametrize("event", [LEFT, RIGHT, UP, DOWN])
def test_navigation_toggles_mode(root: RootContext, event: Event) -> None:
    joining = next_state(_menu(root), event)

    assert joining.mode is JoinMode.join
    assert expected_event(joining) is ExpectedEvent.free_text
    assert next_state(joining, event).mode is JoinMode.create


def test_cancel_returns_to_create_mode(root: RootContext) -> None:
    joining = _typed(root, "ABC")

    back = next_state(joining, CANCEL)

    assert back.mode is JoinMode.create
    assert back.data.curr.code == "ABC"
    # Create mode ignores text and cancel.
    assert next_state(back, Event.printable("x")) == back
    assert next_state(back, CANCEL) == back


def test_code_typing_and_backspace(root: RootContext) -> None:
    joining = drive(_typed(root, "AB"), Event.printable("C"), BACKSPACE, BACKSPACE)

    assert joining.data.curr.code == "A"
    assert drive(joining, BACKSPACE, BACKSPACE).data.curr.code == ""
    assert next_state(joining, TIMEOUT) == joining


def test_create_confirm_goes_to_select_map(root: RootContext, fake_client: FakeSessionClient) -> None:
    menu = _menu(root)

    selecting = next_state(menu, CONFIRM)

    assert isinstance(selecting, SelectMapState)
    assert selecting.data.prev is menu.data
    assert selecting.data.ancestor(CreateOrJoinData) == CreateOrJoinData()
    assert fake_client.calls == []

    created = next_state(selecting, CONFIRM)
    assert isinstance(created, CreateCharacterState)
    assert created.data.depth() == 3


def test_join_known_game_enters_character_wizard(root: RootContext, fake_client: FakeSessionClient) -> None:
    fake_client.joinable[GAME_CODE] = JoinedGame(game_id=GAME_CODE, map=MapId(0))
    joining = _typed(root, GAME_CODE)

    joined = next_state(joining, CONFIRM)

    assert fake_client.calls == [("join_game", GAME_CODE)]
    assert isinstance(joined, CreateCharacterState)
    assert joined.step is WizardStep.team
    assert joined.data.curr.game_id == GAME_CODE
    assert joined.data.curr.map_id == MapId(0)
    assert len(joined.data.curr.teams) == 2
    assert joined.data.prev is joining.data


def test_join_unknown_game_returns_to_menu(root: RootContext, fake_client: FakeSessionClient) -> None:
    joining = _typed(root, GAME_CODE)

    back = next_state(joining, CONFIRM)

    assert fake_client.names() == ["join_game"]
    assert isinstance(back, CreateOrJoinState)
    assert back.mode is JoinMode.create
    assert back.data.curr.code == GAME_CODE


def test_rejoin_with_character_code_waits_for_game(root: RootContext, fake_client: FakeSessionClient) -> None:
    fake_client.rejoinable[(GAME_CODE, "LOGIN12345")] = RejoinedCharacter(
        game_id=GAME_CODE, map=MapId(1), login="LOGIN12345", id=CharacterId(3)
    )
    joining = _typed(root, f"{GAME_CODE}/LOGIN12345")

    waiting = next_state(joining, CONFIRM)

    assert fake_client.calls == [("rejoin_game", (GAME_CODE, "LOGIN12345"))]
    assert isinstance(waiting, WaitForGameCreationState)
    data = waiting.data.curr
    assert (data.game_id, data.login, data.character_id, data.map_id) == (GAME_CODE, "LOGIN12345", 3, 1)


def test_rejoin_unknown_character_returns_to_menu(root: RootContext, fake_client: FakeSessionClient) -> None:
    back = next_state(_typed(root, f"{GAME_CODE}/LOGIN12345"), CONFIRM)

    assert fake_client.names() == ["rejoin_game"]
    assert back.mode is JoinMode.create


@pytest.mark.parametrize("code", ["", "SHORT", "ABCDEFGHIJK", f"{GAME_CODE}-LOGIN12345", f"{GAME_CODE}/LOGIN"])
def test_malformed_code_never_reaches_backend(root: RootContext, fake_client: FakeSessionClient, code: str) -> None:
    joining = _typed(root, code) if code else next_state(_menu(root), DOWN)

    back = next_state(joining, CONFIRM)

    assert back.mode is JoinMode.create
    assert fake_client.calls == []


def test_join_failure_parks_menu() -> None:
    client = FakeSessionClient(fail_on={"join_game"})
    joining = _typed(make_root(client), GAME_CODE)

    failed = next_state(joining, CONFIRM)

    assert isinstance(failed, SessionErrorState)
    assert failed.resume == joining
    assert next_state(failed, CONFIRM) == joining


def test_join_with_unknown_map_parks_menu(root: RootContext, fake_client: FakeSessionClient) -> None:
    fake_client.joinable[GAME_CODE] = JoinedGame(game_id=GAME_CODE, map=MapId(9))
    joining = _typed(root, GAME_CODE)

    failed = next_state(joining, CONFIRM)

    assert isinstance(failed, SessionErrorState)
    assert "unknown map 9" in failed.message
    assert failed.resume == joining


def test_rejoin_with_unknown_map_never_reaches_waiting(root: RootContext, fake_client: FakeSessionClient) -> None:
    fake_client.rejoinable[(GAME_CODE, "LOGIN12345")] = RejoinedCharacter(
        game_id=GAME_CODE, map=MapId(9), login="LOGIN12345", id=CharacterId(3)
    )
    joining = _typed(root, f"{GAME_CODE}/LOGIN12345")

    failed = next_state(joining, CONFIRM)

    assert isinstance(failed, SessionErrorState)
    assert failed.resume == joining
    # Cancel from the error screen still leaves cleanly.
    assert next_state(failed, CANCEL).phase is Phase.exit
