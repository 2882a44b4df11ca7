"""Database models for world storage."""

from sqlalchemy import Column, Integer, SmallInteger, String, Float, ForeignKey, DateTime, UniqueConstraint, Index
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()


class Faction(Base):
    """Player-created faction."""

    __tablename__ = "factions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    color = Column(String(7), nullable=False)  # Hex color code
    flag_url = Column(String(1024))
    # Plain integer to avoid a tiles <-> factions foreign key cycle
    capital_tile_id = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "flag_url": self.flag_url,
            "capital_tile_id": self.capital_tile_id,
        }


class Tile(Base):
    """One grid cell of the world."""

    __tablename__ = "tiles"
    __table_args__ = (
        UniqueConstraint("x", "y", name="uq_tiles_xy"),
        Index("ix_tiles_owner", "owner_faction_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    x = Column(Integer, nullable=False)
    y = Column(Integer, nullable=False)

    # Immutable after generation
    terrain = Column(SmallInteger, nullable=False)  # 1-6 land, 7 sea
    resource = Column(Float, nullable=False)  # 2 decimal places

    # Mutated by faction claims
    owner_faction_id = Column(Integer, ForeignKey("factions.id"), nullable=True)
    population = Column(Integer, nullable=False, default=0)
    capture = Column(Integer, nullable=False, default=0)  # 0-100

    def to_dict(self):
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "terrain": self.terrain,
            "resource": self.resource,
            "owner_faction_id": self.owner_faction_id,
            "population": self.population,
            "capture": self.capture,
        }
