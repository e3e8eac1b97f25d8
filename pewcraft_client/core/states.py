from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, ClassVar

from pewcraft_client.api.models import CellId, CharacterId, ClassId, MapId, RemoteGameState, TeamId
from pewcraft_client.core.context import StateData


class Phase(StrEnum):
    create_or_join = "create_or_join"
    select_map = "select_map"
    create_character = "create_character"
    wait_for_game = "wait_for_game"
    play_game = "play_game"
    failed = "failed"
    exit = "exit"


class JoinMode(StrEnum):
    create = "create"
    join = "join"


class WizardStep(StrEnum):
    team = "team"
    class_ = "class"
    position = "position"
    name = "name"


class Turn(StrEnum):
    our_turn = "our_turn"
    not_our_turn = "not_our_turn"


# Per-step data (the `curr` half of each StateData link).


@dataclass(frozen=True, slots=True)
class CreateOrJoinData:
    # Game code typed in Join mode: GAMEID or GAMEID/LOGIN.
    code: str = ""


@dataclass(frozen=True, slots=True)
class SelectMapData:
    map_ids: tuple[MapId, ...]
    curr_index: int = 0

    def __post_init__(self) -> None:
        if not self.map_ids:
            raise ValueError("SelectMap needs at least one map")
        if not 0 <= self.curr_index < len(self.map_ids):
            raise IndexError(f"Map index {self.curr_index} out of range for {len(self.map_ids)} maps")

    @property
    def selected(self) -> MapId:
        return self.map_ids[self.curr_index]


@dataclass(frozen=True, slots=True)
class CreateCharacterData:
    map_id: MapId
    game_id: str
    classes: tuple[ClassId, ...]
    teams: tuple[TeamId, ...]
    name: str = ""
    class_index: int = 0
    team_index: int = 0
    position_index: int = 0

    @property
    def team(self) -> TeamId:
        return self.teams[self.team_index]

    @property
    def class_id(self) -> ClassId:
        return self.classes[self.class_index]


@dataclass(frozen=True, slots=True)
class WaitForGameData:
    map_id: MapId
    game_id: str
    login: str
    character_id: CharacterId


@dataclass(frozen=True, slots=True)
class PlayGameData:
    map_id: MapId
    game_id: str
    login: str
    character_id: CharacterId
    game_state: RemoteGameState
    cell: CellId = CellId(0)


# Workflow state variants. Exactly one of these is alive at a time.


@dataclass(frozen=True, slots=True)
class CreateOrJoinState:
    data: StateData[Any, CreateOrJoinData]
    mode: JoinMode = JoinMode.create
    phase: ClassVar[Phase] = Phase.create_or_join


@dataclass(frozen=True, slots=True)
class SelectMapState:
    data: StateData[Any, SelectMapData]
    phase: ClassVar[Phase] = Phase.select_map


@dataclass(frozen=True, slots=True)
class CreateCharacterState:
    data: StateData[Any, CreateCharacterData]
    step: WizardStep = WizardStep.team
    phase: ClassVar[Phase] = Phase.create_character


@dataclass(frozen=True, slots=True)
class WaitForGameCreationState:
    data: StateData[Any, WaitForGameData]
    phase: ClassVar[Phase] = Phase.wait_for_game


@dataclass(frozen=True, slots=True)
class PlayGameState:
    data: StateData[Any, PlayGameData]
    turn: Turn = Turn.not_our_turn
    phase: ClassVar[Phase] = Phase.play_game


@dataclass(frozen=True, slots=True)
class SessionErrorState:
    """A remote call failed; `resume` is the state that issued it, untouched."""

    message: str
    resume: "GlobalState" = field(repr=False)
    phase: ClassVar[Phase] = Phase.failed


@dataclass(frozen=True, slots=True)
class ExitState:
    phase: ClassVar[Phase] = Phase.exit


GlobalState = (
    CreateOrJoinState
    | SelectMapState
    | CreateCharacterState
    | WaitForGameCreationState
    | PlayGameState
    | SessionErrorState
    | ExitState
)


def session_label(state: GlobalState) -> str | None:
    """What identifies our session to the operator (shown and copied to the clipboard)."""

    match state:
        case CreateCharacterState():
            return state.data.curr.game_id
        case WaitForGameCreationState() | PlayGameState():
            return f"{state.data.curr.game_id}/{state.data.curr.login}"
        case SessionErrorState():
            return session_label(state.resume)
        case _:
            return None
