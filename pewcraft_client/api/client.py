from __future__ import annotations

import logging
from typing import Protocol, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from pewcraft_client.api.models import (
    CellId,
    CreatedCharacter,
    CreatedGame,
    GameDefinition,
    JoinedGame,
    MapId,
    MoveRequest,
    NewCharacterRequest,
    NewGameRequest,
    RejoinedCharacter,
    RemoteGameState,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Statuses the backend uses to say "nothing there (yet)".
_ABSENT_STATUSES = frozenset({httpx.codes.NOT_FOUND, httpx.codes.NO_CONTENT})


class RemoteSessionError(RuntimeError):
    """A remote call failed: transport error, unexpected status, or malformed body."""


class RemoteSessionClient(Protocol):
    """Operations the workflow performs against the game backend."""

    def create_game(self, map_id: MapId, team_size: int) -> CreatedGame:  # pragma: no cover
        ...

    def create_character(self, game_id: str, request: NewCharacterRequest) -> CreatedCharacter:  # pragma: no cover
        ...

    def join_game(self, code: str) -> JoinedGame | None:  # pragma: no cover
        ...

    def rejoin_game(self, game_id: str, login: str) -> RejoinedCharacter | None:  # pragma: no cover
        ...

    def poll_game_state(self, game_id: str) -> RemoteGameState | None:  # pragma: no cover
        ...

    def submit_move(self, game_id: str, login: str, cell: CellId) -> RemoteGameState:  # pragma: no cover
        ...


class HttpSessionClient:
    """`RemoteSessionClient` over a synchronous httpx client.

    Calls block until the backend answers or the client timeout elapses. They are
    never retried here; failures surface as `RemoteSessionError`.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @classmethod
    def from_url(cls, base_url: str, *, timeout: float = 10.0) -> "HttpSessionClient":
        logger.info("API endpoint: %s", base_url)
        return cls(httpx.Client(base_url=base_url, timeout=timeout))

    def close(self) -> None:
        self._client.close()

    def __repr__(self) -> str:
        return f"HttpSessionClient(base_url={str(self._client.base_url)!r})"

    def _request(self, method: str, url: str, *, body: BaseModel | None = None) -> httpx.Response:
        logger.debug("%s %s %s", method, url, body.model_dump() if body is not None else "")
        try:
            return self._client.request(
                method,
                url,
                json=body.model_dump(mode="json") if body is not None else None,
            )
        except httpx.HTTPError as e:
            raise RemoteSessionError(f"{method} {url} failed: {e}") from e

    def _parse(self, response: httpx.Response, model: type[ModelT]) -> ModelT:
        if response.is_error:
            raise RemoteSessionError(
                f"{response.request.method} {response.request.url.path} returned {response.status_code}"
            )
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise RemoteSessionError(f"Malformed {model.__name__} from {response.request.url.path}: {e}") from e

    def _parse_optional(self, response: httpx.Response, model: type[ModelT]) -> ModelT | None:
        if response.status_code in _ABSENT_STATUSES:
            return None
        return self._parse(response, model)

    def load_catalog(self) -> GameDefinition:
        return self._parse(self._request("GET", "/game"), GameDefinition)

    def create_game(self, map_id: MapId, team_size: int) -> CreatedGame:
        request = NewGameRequest(map=map_id, team_size=team_size)
        logger.debug("Creating game with request: %r", request)
        return self._parse(self._request("POST", "/new_game", body=request), CreatedGame)

    def create_character(self, game_id: str, request: NewCharacterRequest) -> CreatedCharacter:
        return self._parse(self._request("POST", f"/game/{game_id}/character", body=request), CreatedCharacter)

    def join_game(self, code: str) -> JoinedGame | None:
        return self._parse_optional(self._request("GET", f"/game/{code}"), JoinedGame)

    def rejoin_game(self, game_id: str, login: str) -> RejoinedCharacter | None:
        return self._parse_optional(
            self._request("GET", f"/game/{game_id}/character/{login}"),
            RejoinedCharacter,
        )

    def poll_game_state(self, game_id: str) -> RemoteGameState | None:
        return self._parse_optional(self._request("GET", f"/game/{game_id}/state"), RemoteGameState)

    def submit_move(self, game_id: str, login: str, cell: CellId) -> RemoteGameState:
        return self._parse(
            self._request("POST", f"/game/{game_id}/character/{login}/move", body=MoveRequest(cell=cell)),
            RemoteGameState,
        )
