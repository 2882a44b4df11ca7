"""Tests for the world generation pipeline and batch materializer."""

import numpy as np
import pytest

from py_territory.core.elevation import ElevationOptions
from py_territory.core.errors import InvalidDimensionsError, NoSeaError, WorldPersistenceError
from py_territory.core.resources import base_resource
from py_territory.core.terrain import SEA_TERRAIN
from py_territory.core.world_generator import (
    GenerationOptions,
    WorldConfig,
    WorldGenerator,
    generate_world,
    iter_tile_batches,
    iter_tile_rows,
)


class TestWorldConfig:
    """Test world configuration validation."""

    @pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (-1, 3), (3, -1)])
    def test_rejects_non_positive(self, width, height):
        with pytest.raises(InvalidDimensionsError):
            WorldConfig(width, height).validate()

    def test_rejects_non_integer(self):
        with pytest.raises(InvalidDimensionsError):
            WorldConfig(10.5, 4).validate()

    def test_generator_fails_fast(self):
        with pytest.raises(InvalidDimensionsError):
            WorldGenerator(WorldConfig(0, 10))

    def test_cells(self):
        assert WorldConfig(20, 10).cells == 200


class TestGenerateWorld:
    """Test full-grid generation."""

    def test_deterministic(self, world_config, textured_options):
        a = generate_world(world_config, textured_options)
        b = generate_world(world_config, textured_options)
        assert np.array_equal(a.terrain, b.terrain)
        assert np.array_equal(a.resource, b.resource)
        assert np.array_equal(a.elevation, b.elevation)

    def test_seed_changes_world(self, textured_options):
        a = generate_world(WorldConfig(48, 32, seed=1), textured_options)
        b = generate_world(WorldConfig(48, 32, seed=2), textured_options)
        assert not np.array_equal(a.terrain, b.terrain)

    def test_shapes(self, world_config, textured_options):
        grid = generate_world(world_config, textured_options)
        assert grid.terrain.shape == (world_config.height, world_config.width)
        assert grid.resource.shape == (world_config.height, world_config.width)

    def test_tier_bounds(self, world_config, textured_options):
        grid = generate_world(world_config, textured_options)
        assert grid.terrain.min() >= 1
        assert grid.terrain.max() <= 7

    def test_sea_iff_below_threshold(self, world_config, textured_options):
        grid = generate_world(world_config, textured_options)
        below = grid.elevation < textured_options.elevation.sea_threshold
        assert np.array_equal(grid.terrain == SEA_TERRAIN, below)

    def test_default_options_produce_sea_and_land(self):
        grid = generate_world(WorldConfig(200, 120))
        counts = grid.terrain_counts()
        assert counts.get(SEA_TERRAIN, 0) > 0
        assert 0.0 < grid.land_fraction() < 1.0
        assert grid.max_distance >= 1

    def test_resource_tracks_tier(self, textured_options):
        grid = generate_world(WorldConfig(160, 120, seed=5), textured_options)
        land = grid.terrain != SEA_TERRAIN
        for tier in np.unique(grid.terrain[land]):
            values = grid.resource[grid.terrain == tier]
            base = base_resource(int(tier))
            assert values.min() >= base * 0.90 - 0.005
            assert values.max() <= base * 1.10 + 0.005

    def test_no_sea_fails_fast(self, world_config):
        options = GenerationOptions(elevation=ElevationOptions(sea_threshold=0.0))
        with pytest.raises(NoSeaError):
            generate_world(world_config, options)


class TestTileRows:
    """Test row-major materialization."""

    def test_coverage(self, world_config, textured_options):
        grid = generate_world(world_config, textured_options)
        rows = list(iter_tile_rows(grid))

        assert len(rows) == world_config.width * world_config.height
        coords = {(r["x"], r["y"]) for r in rows}
        assert len(coords) == len(rows)
        assert coords == {
            (x, y) for y in range(world_config.height) for x in range(world_config.width)
        }

    def test_row_major_order(self, textured_options):
        grid = generate_world(WorldConfig(3, 2), textured_options)
        coords = [(r["x"], r["y"]) for r in iter_tile_rows(grid)]
        assert coords == [(0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)]

    def test_record_shape(self, world_config, textured_options):
        grid = generate_world(world_config, textured_options)
        row = next(iter_tile_rows(grid))
        assert set(row) == {"x", "y", "terrain", "resource", "owner_faction_id", "population", "capture"}
        assert row["owner_faction_id"] is None
        assert row["population"] == 0
        assert row["capture"] == 0
        assert isinstance(row["terrain"], int)
        assert isinstance(row["resource"], float)

    def test_batches(self, textured_options):
        grid = generate_world(WorldConfig(30, 20), textured_options)
        sizes = [len(b) for b in iter_tile_batches(grid, batch_size=250)]
        assert sizes == [250, 250, 100]

    def test_exact_multiple_has_no_empty_batch(self, textured_options):
        grid = generate_world(WorldConfig(10, 10), textured_options)
        sizes = [len(b) for b in iter_tile_batches(grid, batch_size=50)]
        assert sizes == [50, 50]

    def test_invalid_batch_size(self, world_config, textured_options):
        grid = generate_world(world_config, textured_options)
        with pytest.raises(ValueError):
            list(iter_tile_batches(grid, batch_size=0))


class TestMaterialize:
    """Test writing a world into a tile store."""

    def test_writes_every_tile(self, world_config, textured_options, fake_store):
        result = WorldGenerator(world_config, textured_options).materialize(fake_store, batch_size=500)

        assert not result.skipped
        assert result.tiles_written == world_config.cells
        assert result.batches == len(fake_store.batches)
        assert all(len(b) <= 500 for b in fake_store.batches)
        assert len(fake_store.rows) == world_config.cells
        assert fake_store.committed

    def test_idempotent(self, world_config, textured_options, fake_store):
        generator = WorldGenerator(world_config, textured_options)
        generator.materialize(fake_store)
        written = len(fake_store.rows)

        second = generator.materialize(fake_store)

        assert second.skipped
        assert second.tiles_written == 0
        assert len(fake_store.rows) == written

    def test_existing_world_untouched(self, world_config, textured_options, make_store):
        store = make_store(existing=1)
        result = WorldGenerator(world_config, textured_options).materialize(store)
        assert result.skipped
        assert store.batches == []
        assert not store.committed

    def test_failed_write_rolls_back(self, world_config, textured_options, make_store):
        store = make_store(fail_on_batch=1)
        with pytest.raises(WorldPersistenceError):
            WorldGenerator(world_config, textured_options).materialize(store, batch_size=100)
        assert store.rolled_back
        assert not store.committed
        assert store.rows == []

    def test_same_rows_as_rerun(self, world_config, textured_options, make_store):
        first = make_store()
        second = make_store()
        WorldGenerator(world_config, textured_options).materialize(first)
        WorldGenerator(world_config, textured_options).materialize(second)
        assert first.rows == second.rows
