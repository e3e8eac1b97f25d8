from __future__ import annotations

import curses
from dataclasses import dataclass
from typing import Any

from pewcraft_client.api.models import CellId, Character, CharacterId, GameDefinition, GameMap
from pewcraft_client.core.machine import positions_for
from pewcraft_client.core.states import (
    CreateCharacterState,
    CreateOrJoinState,
    ExitState,
    GlobalState,
    JoinMode,
    PlayGameState,
    SelectMapState,
    SessionErrorState,
    Turn,
    WaitForGameCreationState,
    WizardStep,
    session_label,
)

SELECT_MAP_BLOCK_TITLE = "Select map"
CREATE_CHAR_BLOCK_TITLE = "Create your character"
CREATE_OR_JOIN_BLOCK_TITLE = "Create or join a game"
WAITING_BLOCK_TITLE = "Waiting for other players"
ERROR_BLOCK_TITLE = "Something went wrong"
NAME_REQUIRED_HINT = "A name is required before pressing Enter."


@dataclass(frozen=True, slots=True)
class Panel:
    title: str
    lines: tuple[str, ...]
    # Index into `lines` drawn in reverse video.
    highlight: int | None = None


@dataclass(frozen=True, slots=True)
class MapView:
    game_map: GameMap
    cursor: CellId | None = None
    characters: dict[CharacterId, Character] | None = None


def _counter(index: int, total: int) -> str:
    return f"{index + 1} / {total}"


def describe(state: GlobalState, catalog: GameDefinition) -> Panel:
    """Text panel for the current state. Pure; never mutates the state."""

    match state:
        case CreateOrJoinState():
            create, join = ("> CREATE", "  JOIN") if state.mode is JoinMode.create else ("  CREATE", "> JOIN")
            return Panel(
                title=CREATE_OR_JOIN_BLOCK_TITLE,
                lines=(create, join, f"Game code: {state.data.curr.code}"),
                highlight=0 if state.mode is JoinMode.create else 1,
            )
        case SelectMapState():
            data = state.data.curr
            game_map = catalog.get_map(data.selected)
            return Panel(
                title=SELECT_MAP_BLOCK_TITLE,
                lines=(
                    _counter(data.curr_index, len(data.map_ids)),
                    f"Name:      {game_map.name}",
                    f"Width:     {game_map.width}",
                    f"Height:    {game_map.height}",
                    f"Max teams: {len(game_map.teams)}",
                ),
                highlight=0,
            )
        case CreateCharacterState():
            return _describe_create_character(state, catalog)
        case WaitForGameCreationState():
            game_map = catalog.get_map(state.data.curr.map_id)
            return Panel(
                title=f"{WAITING_BLOCK_TITLE} | Character login: {session_label(state)}",
                lines=(f"Map: {game_map.name}", "Press y to copy your login, q to quit."),
            )
        case PlayGameState():
            data = state.data.curr
            game_map = catalog.get_map(data.map_id)
            x, y = game_map.id_to_xy(data.cell)
            turn = "Your turn" if state.turn is Turn.our_turn else "Waiting for your turn"
            return Panel(
                title=f"{turn} | Character login: {session_label(state)}",
                lines=(
                    f"Selected cell: X: {x} Y: {y}",
                    f"Characters in game: {len(data.game_state.characters)}",
                ),
            )
        case SessionErrorState():
            return Panel(
                title=ERROR_BLOCK_TITLE,
                lines=(state.message, "Enter: try again    Esc: quit"),
            )
        case ExitState():
            raise ValueError("Should not try to render when in the 'Exit' state")


def _describe_create_character(state: CreateCharacterState, catalog: GameDefinition) -> Panel:
    data = state.data.curr
    game_map = catalog.get_map(data.map_id)
    title = f"{CREATE_CHAR_BLOCK_TITLE} | Game: {data.game_id}"

    match state.step:
        case WizardStep.team:
            team = game_map.get_team(data.team)
            lines: tuple[str, ...] = (
                _counter(data.team_index, len(data.teams)),
                f"Team:         {team.name}",
                f"Spawn cells:  {len(team.spawns)}",
            )
        case WizardStep.class_:
            cls = catalog.get_class(data.class_id)
            lines = (
                _counter(data.class_index, len(data.classes)),
                f"Class:        {cls.name}",
                "Description:",
                cls.description,
            )
        case WizardStep.position:
            positions = positions_for(state)
            x, y = game_map.id_to_xy(positions[data.position_index])
            lines = (
                _counter(data.position_index, len(positions)),
                f"Initial position:  X: {x} Y: {y}",
            )
        case WizardStep.name:
            prompt = f"Now type your name: {data.name}"
            if not data.name.strip():
                # Enter is ignored until the name has a visible character.
                return Panel(title=title, lines=(prompt, NAME_REQUIRED_HINT))
            return Panel(title=title, lines=(prompt,))

    return Panel(title=title, lines=lines, highlight=0)


def map_view(state: GlobalState, catalog: GameDefinition) -> MapView | None:
    match state:
        case SelectMapState():
            return MapView(catalog.get_map(state.data.curr.selected))
        case CreateCharacterState():
            data = state.data.curr
            cursor = positions_for(state)[data.position_index] if state.step is WizardStep.position else None
            return MapView(catalog.get_map(data.map_id), cursor=cursor)
        case WaitForGameCreationState():
            return MapView(catalog.get_map(state.data.curr.map_id))
        case PlayGameState():
            data = state.data.curr
            return MapView(catalog.get_map(data.map_id), cursor=data.cell, characters=data.game_state.characters)
        case SessionErrorState():
            return map_view(state.resume, catalog)
        case _:
            return None


def _border(row: int, width: int, height: int) -> str:
    if row == 0:
        left, mid, right = "╔", "╦", "╗"
    elif row == height:
        left, mid, right = "╚", "╩", "╝"
    else:
        left, mid, right = "╠", "╬", "╣"
    return left + mid.join(["═══"] * width) + right


def _cell_glyph(view: MapView, cell: CellId) -> str:
    occupant = None
    if view.characters:
        occupant = next((c for c in view.characters.values() if c.position == cell), None)

    if occupant is not None:
        mark = occupant.name[:1] or "@"
    elif view.game_map.cells and view.game_map.cells[cell].kind == "wall":
        mark = "#"
    else:
        mark = "."

    if cell == view.cursor:
        return f"[{mark}]"
    return f" {mark} "


def format_map(view: MapView) -> list[str]:
    """Draw the map as a grid of 3-character cells framed with box-drawing characters."""

    game_map = view.game_map
    out = [_border(0, game_map.width, game_map.height)]
    for y in range(game_map.height):
        cells = [_cell_glyph(view, game_map.xy_to_id(x, y)) for x in range(game_map.width)]
        out.append("║" + "║".join(cells) + "║")
        out.append(_border(y + 1, game_map.width, game_map.height))
    return out


class CursesPresenter:
    """Draws the map on top and the state panel below (80/20 split)."""

    def __init__(self, window: Any, catalog: GameDefinition) -> None:
        self._window = window
        self._catalog = catalog

    def _put(self, y: int, x: int, text: str, attr: int = curses.A_NORMAL) -> None:
        rows, cols = self._window.getmaxyx()
        # The last column stays empty: writing the bottom-right cell makes curses raise.
        if not 0 <= y < rows or x >= cols - 1:
            return
        self._window.addnstr(y, x, text, cols - x - 1, attr)

    def render(self, state: GlobalState) -> None:
        panel = describe(state, self._catalog)
        view = map_view(state, self._catalog)

        self._window.erase()
        rows, _ = self._window.getmaxyx()
        panel_top = max(rows - len(panel.lines) - 3, (rows * 4) // 5)

        if view is not None:
            for i, line in enumerate(format_map(view)[: max(panel_top - 1, 0)]):
                self._put(i + 1, 1, line)

        self._put(panel_top, 1, f"┤ {panel.title} ├", curses.A_BOLD)
        for i, line in enumerate(panel.lines):
            attr = curses.A_REVERSE if i == panel.highlight else curses.A_NORMAL
            self._put(panel_top + 1 + i, 4, line, attr)
        self._window.refresh()
