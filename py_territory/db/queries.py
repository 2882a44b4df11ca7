"""
Query utilities for the tile world.

``TileRepository`` is the storage interface the world generator writes
through, plus the read and claim helpers used by the API.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import func, text
from sqlalchemy.orm import Session

from .models import Faction, Tile

logger = structlog.get_logger()

CAPITAL_CAPTURE = 100
CAPITAL_POPULATION = 10


class TileRepository:
    """
    Tile and faction access over one SQLAlchemy session.

    Provides:
    - Tile count and bulk insert for world generation
    - World state snapshots for viewers
    - Faction lookup and capital claims
    - Full world clearing for resets
    """

    def __init__(self, session: Session):
        """Initialize with database session."""
        self.session = session

    # Generation storage interface

    def count_tiles(self) -> int:
        """Number of tiles currently stored."""
        return int(self.session.query(func.count(Tile.id)).scalar() or 0)

    def bulk_insert_tiles(self, rows: List[Dict[str, Any]]) -> None:
        """Append a batch of tile records in one statement."""
        if not rows:
            return
        self.session.bulk_insert_mappings(Tile, rows)
        self.session.flush()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    # Reads

    def list_tiles(self) -> List[Tile]:
        return self.session.query(Tile).order_by(Tile.id).all()

    def list_factions(self) -> List[Faction]:
        return self.session.query(Faction).order_by(Faction.id).all()

    def get_tile(self, tile_id: int) -> Optional[Tile]:
        return self.session.query(Tile).filter(Tile.id == tile_id).first()

    def get_tile_at(self, x: int, y: int) -> Optional[Tile]:
        return self.session.query(Tile).filter(Tile.x == x, Tile.y == y).first()

    def get_faction_by_name(self, name: str) -> Optional[Faction]:
        return self.session.query(Faction).filter(Faction.name == name).first()

    def world_meta(self) -> Dict[str, int]:
        """
        World size as stored.

        Width and height are derived from the largest coordinates, so an
        empty table reports ``{"w": 0, "h": 0, "n": 0}``.
        """
        w, h, n = self.session.query(
            func.coalesce(func.max(Tile.x), -1) + 1,
            func.coalesce(func.max(Tile.y), -1) + 1,
            func.count(Tile.id),
        ).one()
        return {"w": int(w), "h": int(h), "n": int(n)}

    # Writes

    def create_faction_at(
        self, name: str, color: str, flag_url: Optional[str], tile: Tile
    ) -> Faction:
        """Create a faction and claim ``tile`` as its capital."""
        faction = Faction(name=name, color=color, flag_url=flag_url, capital_tile_id=tile.id)
        self.session.add(faction)
        self.session.flush()  # Get the ID

        tile.owner_faction_id = faction.id
        tile.capture = CAPITAL_CAPTURE
        tile.population = CAPITAL_POPULATION
        self.session.flush()

        logger.info("Faction created", faction_id=faction.id, name=name, tile_id=tile.id)
        return faction

    def clear_world(self) -> None:
        """Delete every tile and faction."""
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            self.session.execute(text("TRUNCATE TABLE tiles RESTART IDENTITY CASCADE"))
            self.session.execute(text("TRUNCATE TABLE factions RESTART IDENTITY CASCADE"))
        else:
            self.session.query(Tile).delete(synchronize_session=False)
            self.session.query(Faction).delete(synchronize_session=False)
        self.session.flush()
        logger.info("World cleared", dialect=dialect)
