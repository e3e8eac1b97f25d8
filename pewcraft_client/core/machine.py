"""Session-setup workflow: `expected_event` and the `next_state` transition function.

Both are total over (state, event). The only side effects are the synchronous backend
calls made through the root context's client while leaving a step.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, assert_never

from pewcraft_client.api.client import RemoteSessionError
from pewcraft_client.api.models import CellId, MapId, NewCharacterRequest
from pewcraft_client.core.context import RootContext, StateData
from pewcraft_client.core.events import Event, EventKind, ExpectedEvent
from pewcraft_client.core.play import RefreshGameState, SubmitMove, default_play_step, with_game_state
from pewcraft_client.core.states import (
    CreateCharacterData,
    CreateCharacterState,
    CreateOrJoinData,
    CreateOrJoinState,
    ExitState,
    GlobalState,
    JoinMode,
    PlayGameData,
    PlayGameState,
    SelectMapData,
    SelectMapState,
    SessionErrorState,
    Turn,
    WaitForGameCreationState,
    WaitForGameData,
    WizardStep,
)

logger = logging.getLogger(__name__)

GAME_CODE_LENGTH = 10
CHARACTER_CODE_LENGTH = 21
CODE_SEPARATOR = "/"

_NAVIGATION = frozenset({EventKind.left, EventKind.right, EventKind.up, EventKind.down})


class WorkflowFinishedError(RuntimeError):
    """An event was fed to the workflow after it reached Exit."""


def start(root: RootContext, *, offer_join: bool = False) -> GlobalState:
    """Seed the workflow: the Create/Join menu, or straight to map selection."""

    if offer_join:
        return CreateOrJoinState(data=StateData(prev=root, curr=CreateOrJoinData()))
    return SelectMapState(data=StateData(prev=root, curr=SelectMapData(map_ids=tuple(root.catalog.map_ids()))))


def expected_event(state: GlobalState) -> ExpectedEvent:
    match state:
        case CreateOrJoinState(mode=JoinMode.join):
            return ExpectedEvent.free_text
        case CreateOrJoinState():
            return ExpectedEvent.none
        case SelectMapState():
            return ExpectedEvent.horizontal_choice
        case CreateCharacterState(step=WizardStep.position):
            return ExpectedEvent.generic_choice
        case CreateCharacterState(step=WizardStep.name):
            return ExpectedEvent.free_text
        case CreateCharacterState():
            return ExpectedEvent.horizontal_choice
        case WaitForGameCreationState():
            return ExpectedEvent.none
        case PlayGameState(turn=Turn.our_turn):
            return ExpectedEvent.generic_choice
        case PlayGameState():
            return ExpectedEvent.none
        case SessionErrorState():
            return ExpectedEvent.generic_choice
        case ExitState():
            return ExpectedEvent.none
        case _:
            assert_never(state)


def next_state(state: GlobalState, event: Event) -> GlobalState:
    if isinstance(state, ExitState):
        raise WorkflowFinishedError(
            f"Should not call next_state once the workflow reached Exit (got {event!r})"
        )

    match event.kind:
        case EventKind.exit:
            return ExitState()
        case EventKind.other:
            return state

    match state:
        case CreateOrJoinState():
            return _create_or_join(state, event)
        case SelectMapState():
            return _select_map(state, event)
        case CreateCharacterState():
            return _create_character(state, event)
        case WaitForGameCreationState():
            return _wait_for_game(state, event)
        case PlayGameState():
            return _play_game(state, event)
        case SessionErrorState():
            return _session_error(state, event)
        case _:
            assert_never(state)


def _cycle(index: int, length: int, kind: EventKind) -> int:
    if length <= 0:
        raise IndexError("Cannot cycle over an empty option list")
    step = -1 if kind is EventKind.left else 1
    return (index + step) % length


def _remote(state: GlobalState, call: Callable[[], GlobalState]) -> GlobalState:
    """Run a transition that talks to the backend; a failed call parks the issuing state."""

    try:
        return call()
    except RemoteSessionError as e:
        logger.warning("Remote call failed during %s: %s", state.phase, e)
        return SessionErrorState(message=str(e), resume=state)


def _known_map(root: RootContext, map_id: MapId) -> MapId:
    """Reject a map id from a backend response that the local catalog does not know."""

    if map_id not in root.catalog.map_ids():
        raise RemoteSessionError(f"Backend answered with unknown map {map_id}")
    return map_id


def _enter_create_character(prev: StateData[Any, Any], root: RootContext, map_id: MapId, game_id: str) -> GlobalState:
    game_map = root.catalog.get_map(map_id)
    data = CreateCharacterData(
        map_id=map_id,
        game_id=game_id,
        classes=tuple(root.catalog.class_ids()),
        teams=tuple(game_map.team_ids()),
    )
    return CreateCharacterState(data=StateData(prev=prev, curr=data), step=WizardStep.team)


# CreateOrJoin


def _create_or_join(state: CreateOrJoinState, event: Event) -> GlobalState:
    code = state.data.curr.code
    match state.mode, event.kind:
        case JoinMode.create, kind if kind in _NAVIGATION:
            return replace(state, mode=JoinMode.join)
        case JoinMode.create, EventKind.confirm:
            root = state.data.root
            select = SelectMapData(map_ids=tuple(root.catalog.map_ids()))
            return SelectMapState(data=StateData(prev=state.data, curr=select))
        case JoinMode.join, kind if kind in _NAVIGATION or kind is EventKind.cancel:
            return replace(state, mode=JoinMode.create)
        case JoinMode.join, EventKind.printable_text:
            return replace(state, data=state.data.update(code=code + event.text))
        case JoinMode.join, EventKind.backspace:
            return replace(state, data=state.data.update(code=code[:-1]))
        case JoinMode.join, EventKind.confirm:
            return _join(state)
        case _:
            return state


def _join(state: CreateOrJoinState) -> GlobalState:
    code = state.data.curr.code
    back_to_menu = replace(state, mode=JoinMode.create)
    root = state.data.root

    if len(code) == GAME_CODE_LENGTH:

        def join() -> GlobalState:
            joined = root.client.join_game(code)
            if joined is None:
                logger.info("No game found for code %s", code)
                return back_to_menu
            return _enter_create_character(state.data, root, _known_map(root, joined.map), joined.game_id)

        return _remote(state, join)

    if len(code) == CHARACTER_CODE_LENGTH and code[GAME_CODE_LENGTH] == CODE_SEPARATOR:
        game_id, login = code[:GAME_CODE_LENGTH], code[GAME_CODE_LENGTH + 1 :]

        def rejoin() -> GlobalState:
            rejoined = root.client.rejoin_game(game_id, login)
            if rejoined is None:
                logger.info("No character %s in game %s", login, game_id)
                return back_to_menu
            wait = WaitForGameData(
                map_id=_known_map(root, rejoined.map),
                game_id=rejoined.game_id,
                login=rejoined.login,
                character_id=rejoined.id,
            )
            return WaitForGameCreationState(data=StateData(prev=state.data, curr=wait))

        return _remote(state, rejoin)

    logger.debug("Ignoring malformed game code %r", code)
    return back_to_menu


# SelectMap


def _select_map(state: SelectMapState, event: Event) -> GlobalState:
    data = state.data.curr
    match event.kind:
        case EventKind.left | EventKind.right:
            index = _cycle(data.curr_index, len(data.map_ids), event.kind)
            return replace(state, data=state.data.update(curr_index=index))
        case EventKind.confirm:
            root = state.data.root
            map_id = data.selected

            def create() -> GlobalState:
                created = root.client.create_game(map_id, root.team_size)
                logger.info("Created game %s on map %s", created.game_id, map_id)
                return _enter_create_character(state.data, root, map_id, created.game_id)

            return _remote(state, create)
        case _:
            return state


# CreateCharacter wizard: Team -> Class -> Position -> Name


def positions_for(state: CreateCharacterState) -> list[CellId]:
    """Spawn cells of the chosen team on the chosen map."""

    data = state.data.curr
    return state.data.root.catalog.get_map(data.map_id).spawns_for(data.team)


def _create_character(state: CreateCharacterState, event: Event) -> GlobalState:
    data = state.data.curr
    horizontal = event.kind in (EventKind.left, EventKind.right)

    match state.step, event.kind:
        case WizardStep.team, _ if horizontal:
            index = _cycle(data.team_index, len(data.teams), event.kind)
            return replace(state, data=state.data.update(team_index=index))
        case WizardStep.team, EventKind.confirm:
            return replace(state, step=WizardStep.class_)

        case WizardStep.class_, _ if horizontal:
            index = _cycle(data.class_index, len(data.classes), event.kind)
            return replace(state, data=state.data.update(class_index=index))
        case WizardStep.class_, EventKind.confirm:
            return replace(state, step=WizardStep.position)

        case WizardStep.position, _ if horizontal:
            index = _cycle(data.position_index, len(positions_for(state)), event.kind)
            return replace(state, data=state.data.update(position_index=index))
        case WizardStep.position, EventKind.confirm:
            return replace(state, step=WizardStep.name)

        case WizardStep.name, EventKind.printable_text:
            return replace(state, data=state.data.update(name=data.name + event.text))
        case WizardStep.name, EventKind.backspace:
            return replace(state, data=state.data.update(name=data.name[:-1]))
        case WizardStep.name, EventKind.confirm:
            if not data.name.strip():
                return state
            return _remote(state, lambda: _submit_character(state))

        case _:
            return state


def _submit_character(state: CreateCharacterState) -> GlobalState:
    data = state.data.curr
    root = state.data.root
    logger.debug("Creating character with name %s", data.name)

    request = NewCharacterRequest(
        name=data.name,
        class_id=data.class_id,
        team=data.team,
        position=positions_for(state)[data.position_index],
    )
    created = root.client.create_character(data.game_id, request)
    logger.info("Created character %s (%s) in game %s", created.login, created.id, data.game_id)

    wait = WaitForGameData(
        map_id=data.map_id,
        game_id=data.game_id,
        login=created.login,
        character_id=created.id,
    )
    return WaitForGameCreationState(data=StateData(prev=state.data, curr=wait))


# WaitForGameCreation


def _wait_for_game(state: WaitForGameCreationState, event: Event) -> GlobalState:
    if event.kind is not EventKind.timeout:
        return state

    data = state.data.curr
    root = state.data.root

    def poll() -> GlobalState:
        game_state = root.client.poll_game_state(data.game_id)
        if game_state is None:
            return state
        logger.info("Game %s started", data.game_id)
        play = PlayGameData(
            map_id=data.map_id,
            game_id=data.game_id,
            login=data.login,
            character_id=data.character_id,
            game_state=game_state,
            cell=CellId(0),
        )
        return PlayGameState(data=StateData(prev=state.data, curr=play), turn=Turn.not_our_turn)

    return _remote(state, poll)


# PlayGame


def _play_game(state: PlayGameState, event: Event) -> GlobalState:
    root = state.data.root
    data = state.data.curr
    step = root.play_step or default_play_step
    outcome = step(state, event)

    match outcome:
        case PlayGameState():
            return outcome
        case RefreshGameState():

            def refresh() -> GlobalState:
                fetched = root.client.poll_game_state(data.game_id)
                return state if fetched is None else with_game_state(state, fetched)

            return _remote(state, refresh)
        case SubmitMove(cell=cell):
            return _remote(state, lambda: with_game_state(state, root.client.submit_move(data.game_id, data.login, cell)))
        case _:
            raise TypeError(f"Play step returned {outcome!r}")


# SessionError


def _session_error(state: SessionErrorState, event: Event) -> GlobalState:
    match event.kind:
        case EventKind.confirm:
            return state.resume
        case EventKind.cancel:
            return ExitState()
        case _:
            return state
