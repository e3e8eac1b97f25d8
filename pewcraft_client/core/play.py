"""PlayGame extension point.

The setup workflow ends when the backend reports the game as started. What happens
afterwards is delegated to a `PlayStep`: a function receiving the PlayGame state and an
event and returning either an updated PlayGame state or a request for the backend. The
workflow executes requests and feeds the fresh remote game state back into the state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable

from pewcraft_client.api.models import CellId, GameMap, RemoteGameState
from pewcraft_client.core.events import Event, EventKind
from pewcraft_client.core.states import PlayGameState, Turn


@dataclass(frozen=True, slots=True)
class RefreshGameState:
    pass


@dataclass(frozen=True, slots=True)
class SubmitMove:
    cell: CellId


RemoteRequest = RefreshGameState | SubmitMove
PlayStep = Callable[[PlayGameState, Event], "PlayGameState | RemoteRequest"]

_MOVES = {
    EventKind.left: (-1, 0),
    EventKind.right: (1, 0),
    EventKind.up: (0, -1),
    EventKind.down: (0, 1),
}


def move_cursor(game_map: GameMap, cell: CellId, direction: EventKind) -> CellId:
    """Move the cell cursor one step, staying inside the map."""

    dx, dy = _MOVES[direction]
    x, y = game_map.id_to_xy(cell)
    x = min(max(x + dx, 0), game_map.width - 1)
    y = min(max(y + dy, 0), game_map.height - 1)
    return game_map.xy_to_id(x, y)


def turn_for(game_state: RemoteGameState, state: PlayGameState) -> Turn:
    if game_state.current_character == state.data.curr.character_id:
        return Turn.our_turn
    return Turn.not_our_turn


def with_game_state(state: PlayGameState, game_state: RemoteGameState) -> PlayGameState:
    return replace(
        state,
        data=state.data.update(game_state=game_state),
        turn=turn_for(game_state, state),
    )


def default_play_step(state: PlayGameState, event: Event) -> PlayGameState | RemoteRequest:
    data = state.data.curr
    match event.kind:
        case EventKind.left | EventKind.right | EventKind.up | EventKind.down:
            game_map = state.data.root.catalog.get_map(data.map_id)
            return replace(state, data=state.data.update(cell=move_cursor(game_map, data.cell, event.kind)))
        case EventKind.timeout:
            return RefreshGameState()
        case EventKind.confirm if state.turn is Turn.our_turn:
            return SubmitMove(cell=data.cell)
        case _:
            return state
