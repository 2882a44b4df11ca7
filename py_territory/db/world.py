"""World lifecycle: first-time generation, reset and faction founding."""

from typing import Optional

import structlog
from sqlalchemy.orm import Session

from ..core.terrain import SEA_TERRAIN
from ..core.world_generator import (
    DEFAULT_BATCH_SIZE,
    GenerationOptions,
    GenerationResult,
    WorldConfig,
    WorldGenerator,
)
from .models import Faction, Tile
from .queries import TileRepository

logger = structlog.get_logger()


class FactionError(Exception):
    """Faction request rejected; ``code`` is returned to the client."""

    def __init__(self, code: str, status_code: int = 400):
        super().__init__(code)
        self.code = code
        self.status_code = status_code


def initialize_world(
    session: Session,
    config: WorldConfig,
    batch_size: int = DEFAULT_BATCH_SIZE,
    options: Optional[GenerationOptions] = None,
) -> GenerationResult:
    """Generate the world unless the tiles table already has rows."""
    repo = TileRepository(session)
    generator = WorldGenerator(config, options)
    return generator.materialize(repo, batch_size=batch_size)


def reset_world(
    session: Session,
    config: WorldConfig,
    batch_size: int = DEFAULT_BATCH_SIZE,
    options: Optional[GenerationOptions] = None,
) -> GenerationResult:
    """
    Drop every tile and faction and regenerate.

    Clearing and regeneration share the session transaction, so a failed
    regeneration also restores the old world.
    """
    logger.info("Resetting world", width=config.width, height=config.height, seed=config.seed)
    # Validate before anything is deleted
    generator = WorldGenerator(config, options)
    repo = TileRepository(session)
    repo.clear_world()
    return generator.materialize(repo, batch_size=batch_size)


def create_faction(
    session: Session,
    name: Optional[str],
    color: Optional[str],
    flag_url: Optional[str],
    tile_id: Optional[int],
) -> tuple:
    """
    Found a faction on an unowned land tile.

    Returns:
        (faction, tile)

    Raises:
        FactionError: missing_fields, tile_not_found, sea_not_allowed,
            tile_already_owned or name_taken
    """
    if not name or not color or not tile_id:
        raise FactionError("missing_fields")

    repo = TileRepository(session)
    tile: Optional[Tile] = repo.get_tile(tile_id)
    if tile is None:
        raise FactionError("tile_not_found", status_code=404)
    if tile.terrain == SEA_TERRAIN:
        raise FactionError("sea_not_allowed")
    if tile.owner_faction_id:
        raise FactionError("tile_already_owned")
    if repo.get_faction_by_name(name) is not None:
        raise FactionError("name_taken")

    faction: Faction = repo.create_faction_at(name, color, flag_url or None, tile)
    return faction, tile
