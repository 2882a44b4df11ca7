"""
Database utilities and models.

This package provides:
- SQLAlchemy models for tiles and factions
- Database connection management
- The tile repository used by world generation
- World initialisation, reset and faction founding
"""

from .connection import Database, db
from .models import Base, Faction, Tile
from .queries import TileRepository
from .world import FactionError, create_faction, initialize_world, reset_world

__all__ = [
    # Connection management
    'Database', 'db',

    # Models
    'Base', 'Faction', 'Tile',

    # Queries
    'TileRepository',

    # World lifecycle
    'FactionError', 'create_faction', 'initialize_world', 'reset_world',
]
