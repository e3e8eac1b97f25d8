from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from pewcraft_client.api.models import GameDefinition


class CatalogLoadError(RuntimeError):
    pass


def validate_catalog(game: GameDefinition) -> GameDefinition:
    """Check the invariants the workflow relies on.

    Every option list a selection step cycles over must be non-empty, and every
    spawn cell must exist on its map.
    """

    for map_id in game.map_ids():
        game_map = game.get_map(map_id)
        if len(game_map.cells) not in (0, game_map.width * game_map.height):
            raise CatalogLoadError(
                f"Map {game_map.name!r} has {len(game_map.cells)} cells, expected {game_map.width * game_map.height}"
            )
        if not game_map.teams:
            raise CatalogLoadError(f"Map {game_map.name!r} has no teams")
        for team in game_map.teams:
            if not team.spawns:
                raise CatalogLoadError(f"Team {team.name!r} on map {game_map.name!r} has no spawn cells")
            out_of_bounds = [c for c in team.spawns if not 0 <= c < game_map.width * game_map.height]
            if out_of_bounds:
                raise CatalogLoadError(f"Team {team.name!r} on map {game_map.name!r} spawns outside the map: {out_of_bounds}")
    return game


def load_catalog_file(path: Path) -> GameDefinition:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise CatalogLoadError(f"Catalog file not found: {path}") from e

    try:
        game = GameDefinition.model_validate_json(raw)
    except ValidationError as e:
        raise CatalogLoadError(f"Invalid catalog in {path}: {e}") from e
    return validate_catalog(game)
