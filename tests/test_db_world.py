"""Tests for tile storage, world initialisation and faction founding on SQLite."""

import pytest

from py_territory.config import settings
from py_territory.core.errors import InvalidDimensionsError
from py_territory.core.terrain import SEA_TERRAIN
from py_territory.core.world_generator import WorldConfig, generate_world, iter_tile_rows
from py_territory.db.connection import Database
from py_territory.db.models import Faction, Tile
from py_territory.db.queries import TileRepository
from py_territory.db.world import FactionError, create_faction, initialize_world, reset_world

SMALL_WORLD = WorldConfig(width=30, height=20, seed=1337)


@pytest.fixture
def session(sqlite_db):
    session = sqlite_db.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def populated(session):
    initialize_world(session, SMALL_WORLD, batch_size=128)
    return session


def first_land_tile(session):
    return session.query(Tile).filter(Tile.terrain != SEA_TERRAIN).order_by(Tile.id).first()


def first_sea_tile(session):
    return session.query(Tile).filter(Tile.terrain == SEA_TERRAIN).order_by(Tile.id).first()


class TestTileRepository:
    """Test the storage interface used by the generator."""

    def test_empty_world(self, session):
        repo = TileRepository(session)
        assert repo.count_tiles() == 0
        assert repo.world_meta() == {"w": 0, "h": 0, "n": 0}
        assert repo.list_tiles() == []

    def test_bulk_insert(self, session):
        repo = TileRepository(session)
        repo.bulk_insert_tiles([
            {"x": 0, "y": 0, "terrain": 7, "resource": 0.04, "owner_faction_id": None, "population": 0, "capture": 0},
            {"x": 1, "y": 0, "terrain": 2, "resource": 1.31, "owner_faction_id": None, "population": 0, "capture": 0},
        ])
        repo.commit()

        assert repo.count_tiles() == 2
        assert repo.world_meta() == {"w": 2, "h": 1, "n": 2}
        assert repo.get_tile_at(1, 0).resource == pytest.approx(1.31)

    def test_empty_batch_is_noop(self, session):
        repo = TileRepository(session)
        repo.bulk_insert_tiles([])
        assert repo.count_tiles() == 0


class TestInitializeWorld:
    """Test first-time world generation into the database."""

    def test_populates_every_tile(self, populated):
        repo = TileRepository(populated)
        assert repo.count_tiles() == SMALL_WORLD.cells
        assert repo.world_meta() == {"w": 30, "h": 20, "n": 600}

    def test_matches_generated_grid(self, populated):
        expected = {(r["x"], r["y"]): r for r in iter_tile_rows(generate_world(SMALL_WORLD))}
        for tile in TileRepository(populated).list_tiles():
            row = expected[(tile.x, tile.y)]
            assert tile.terrain == row["terrain"]
            assert tile.resource == pytest.approx(row["resource"])
            assert tile.owner_faction_id is None
            assert tile.population == 0
            assert tile.capture == 0

    def test_second_run_skips(self, populated):
        result = initialize_world(populated, SMALL_WORLD)
        assert result.skipped
        assert TileRepository(populated).count_tiles() == SMALL_WORLD.cells

    def test_any_existing_row_blocks_generation(self, session):
        repo = TileRepository(session)
        repo.bulk_insert_tiles([
            {"x": 0, "y": 0, "terrain": 1, "resource": 1.6, "owner_faction_id": None, "population": 0, "capture": 0}
        ])
        repo.commit()

        result = initialize_world(session, SMALL_WORLD)

        assert result.skipped
        assert repo.count_tiles() == 1

    def test_invalid_dimensions(self, session):
        with pytest.raises(InvalidDimensionsError):
            initialize_world(session, WorldConfig(0, 10))
        assert TileRepository(session).count_tiles() == 0


class TestResetWorld:
    """Test truncate-and-regenerate."""

    def test_reset_clears_factions_and_regenerates(self, populated):
        tile = first_land_tile(populated)
        create_faction(populated, "Azure", "#0000ff", None, tile.id)
        populated.commit()

        result = reset_world(populated, WorldConfig(width=12, height=8, seed=3))

        repo = TileRepository(populated)
        assert not result.skipped
        assert repo.count_tiles() == 96
        assert repo.list_factions() == []
        assert populated.query(Tile).filter(Tile.owner_faction_id.isnot(None)).count() == 0

    def test_invalid_reset_keeps_world(self, populated):
        with pytest.raises(InvalidDimensionsError):
            reset_world(populated, WorldConfig(width=-1, height=8))
        assert TileRepository(populated).count_tiles() == SMALL_WORLD.cells


class TestCreateFaction:
    """Test faction founding rules."""

    def test_claims_capital(self, populated):
        tile = first_land_tile(populated)

        faction, claimed = create_faction(populated, "Crimson", "#ff0000", "http://flags/c.png", tile.id)
        populated.commit()

        assert faction.id is not None
        assert faction.capital_tile_id == tile.id
        refreshed = TileRepository(populated).get_tile(tile.id)
        assert refreshed.owner_faction_id == faction.id
        assert refreshed.capture == 100
        assert refreshed.population == 10

    @pytest.mark.parametrize(
        "name,color,tile_id",
        [(None, "#fff", 1), ("A", None, 1), ("A", "#fff", None), ("", "#fff", 1)],
    )
    def test_missing_fields(self, populated, name, color, tile_id):
        with pytest.raises(FactionError) as exc:
            create_faction(populated, name, color, None, tile_id)
        assert exc.value.code == "missing_fields"
        assert exc.value.status_code == 400

    def test_tile_not_found(self, populated):
        with pytest.raises(FactionError) as exc:
            create_faction(populated, "Ghost", "#123456", None, 999999)
        assert exc.value.code == "tile_not_found"
        assert exc.value.status_code == 404

    def test_sea_not_allowed(self, populated):
        tile = first_sea_tile(populated)
        with pytest.raises(FactionError) as exc:
            create_faction(populated, "Fish", "#00ffff", None, tile.id)
        assert exc.value.code == "sea_not_allowed"

    def test_tile_already_owned(self, populated):
        tile = first_land_tile(populated)
        create_faction(populated, "First", "#111111", None, tile.id)
        with pytest.raises(FactionError) as exc:
            create_faction(populated, "Second", "#222222", None, tile.id)
        assert exc.value.code == "tile_already_owned"

    def test_name_taken(self, populated):
        land = (
            populated.query(Tile)
            .filter(Tile.terrain != SEA_TERRAIN)
            .order_by(Tile.id)
            .limit(2)
            .all()
        )
        create_faction(populated, "Twin", "#111111", None, land[0].id)
        with pytest.raises(FactionError) as exc:
            create_faction(populated, "Twin", "#222222", None, land[1].id)
        assert exc.value.code == "name_taken"
        assert populated.query(Faction).count() == 1


class TestDatabase:
    """Test connection setup."""

    @pytest.mark.parametrize("debug", [False, True])
    def test_debug_controls_sql_echo(self, monkeypatch, debug):
        monkeypatch.setattr(settings, "debug", debug)
        database = Database()
        database.initialize("sqlite://")
        try:
            assert database.engine.echo is debug
            with database.get_session() as session:
                assert TileRepository(session).count_tiles() == 0
        finally:
            database.engine.dispose()
