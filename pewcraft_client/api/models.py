from __future__ import annotations

from typing import NewType

from pydantic import BaseModel, Field

# Opaque handles over the dense lists of the catalog. Compared and copied by value.
MapId = NewType("MapId", int)
ClassId = NewType("ClassId", int)
TeamId = NewType("TeamId", int)
CellId = NewType("CellId", int)
CharacterId = NewType("CharacterId", int)


class CharacterClass(BaseModel):
    name: str
    description: str = ""


class Team(BaseModel):
    name: str
    # Spawn cells available to this team, in display order.
    spawns: list[CellId] = Field(default_factory=list)


class Cell(BaseModel):
    kind: str = "floor"


class GameMap(BaseModel):
    name: str
    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    teams: list[Team] = Field(default_factory=list)
    # Row-major, len(cells) == width * height.
    cells: list[Cell] = Field(default_factory=list)

    def team_ids(self) -> list[TeamId]:
        return [TeamId(i) for i in range(len(self.teams))]

    def get_team(self, team: TeamId) -> Team:
        if not 0 <= team < len(self.teams):
            raise KeyError(f"Unknown team id {team} on map {self.name!r}")
        return self.teams[team]

    def spawns_for(self, team: TeamId) -> list[CellId]:
        return list(self.get_team(team).spawns)

    def cell_ids(self) -> list[CellId]:
        return [CellId(i) for i in range(self.width * self.height)]

    def id_to_xy(self, cell: CellId) -> tuple[int, int]:
        return cell % self.width, cell // self.width

    def xy_to_id(self, x: int, y: int) -> CellId:
        return CellId(y * self.width + x)


class GameDefinition(BaseModel):
    """The static game catalog served by the backend.

    Maps and classes are addressed by their index; the definition is loaded once
    at startup and never mutated.
    """

    maps: list[GameMap] = Field(..., min_length=1)
    classes: list[CharacterClass] = Field(..., min_length=1)

    def map_ids(self) -> list[MapId]:
        return [MapId(i) for i in range(len(self.maps))]

    def class_ids(self) -> list[ClassId]:
        return [ClassId(i) for i in range(len(self.classes))]

    def get_map(self, map_id: MapId) -> GameMap:
        if not 0 <= map_id < len(self.maps):
            raise KeyError(f"Unknown map id {map_id}")
        return self.maps[map_id]

    def get_class(self, class_id: ClassId) -> CharacterClass:
        if not 0 <= class_id < len(self.classes):
            raise KeyError(f"Unknown class id {class_id}")
        return self.classes[class_id]


class NewGameRequest(BaseModel):
    map: MapId
    team_size: int = Field(..., ge=1)


class CreatedGame(BaseModel):
    game_id: str


class NewCharacterRequest(BaseModel):
    name: str
    class_id: ClassId
    team: TeamId
    position: CellId


class CreatedCharacter(BaseModel):
    login: str
    id: CharacterId


class JoinedGame(BaseModel):
    game_id: str
    map: MapId


class RejoinedCharacter(BaseModel):
    game_id: str
    map: MapId
    login: str
    id: CharacterId


class MoveRequest(BaseModel):
    cell: CellId


class Character(BaseModel):
    name: str
    class_id: ClassId
    team: TeamId
    position: CellId


class RemoteGameState(BaseModel):
    map: MapId
    characters: dict[CharacterId, Character] = Field(default_factory=dict)
    # None until every team is full and the first turn starts.
    current_character: CharacterId | None = None
