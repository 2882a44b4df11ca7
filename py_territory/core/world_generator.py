"""
World generation pipeline.

Runs the generation stages in order over an explicit :class:`WorldConfig`:

1. elevation and sea mask
2. coastal distance transform
3. terrain tiers
4. resource yields

and then materialises the grid as tile rows, flushed to storage in fixed
size batches.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

import numpy as np
import structlog

from .distance import DistanceField, distance_to_sea
from .elevation import ElevationOptions, elevation_map
from .errors import InvalidDimensionsError, WorldPersistenceError
from .hashing import DEFAULT_SEED
from .resources import ResourceOptions, resource
from .terrain import SEA_TERRAIN, TerrainOptions, classify_grid

logger = structlog.get_logger()

DEFAULT_BATCH_SIZE = 2000
PROGRESS_LOG_EVERY = 10000


@dataclass(frozen=True)
class WorldConfig:
    """The only inputs that affect generated output."""

    width: int
    height: int
    seed: int = DEFAULT_SEED

    def validate(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
                raise InvalidDimensionsError(f"World {name} must be a positive integer, got {value!r}")

    @property
    def cells(self) -> int:
        return self.width * self.height


@dataclass
class GenerationOptions:
    """Tunable constants for every stage."""

    elevation: ElevationOptions = field(default_factory=ElevationOptions)
    terrain: TerrainOptions = field(default_factory=TerrainOptions)
    resources: ResourceOptions = field(default_factory=ResourceOptions)


@dataclass
class WorldGrid:
    """Fully computed world, all arrays indexed ``[y, x]``."""

    config: WorldConfig
    elevation: np.ndarray
    sea_mask: np.ndarray
    distance: DistanceField
    terrain: np.ndarray
    resource: np.ndarray

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def max_distance(self) -> int:
        return self.distance.max_distance

    def land_fraction(self) -> float:
        return float((~self.sea_mask).mean())

    def terrain_counts(self) -> Dict[int, int]:
        tiers, counts = np.unique(self.terrain, return_counts=True)
        return {int(t): int(c) for t, c in zip(tiers, counts)}


@dataclass
class GenerationResult:
    """Outcome of a materialise call."""

    skipped: bool
    tiles_written: int = 0
    batches: int = 0
    elapsed_seconds: float = 0.0


def generate_world(config: WorldConfig, options: GenerationOptions = None) -> WorldGrid:
    """
    Compute every tile of the world in memory.

    Args:
        config: World size and seed
        options: Stage constants, defaults to :class:`GenerationOptions`

    Returns:
        WorldGrid with elevation, sea mask, distance, terrain and resource

    Raises:
        InvalidDimensionsError: non-positive width or height
        NoSeaError: the seed produced a world without sea
    """
    config.validate()
    options = options or GenerationOptions()

    logger.info("Generating world", width=config.width, height=config.height, seed=config.seed)

    # Stage 1: elevation & sea
    elevation, sea_mask = elevation_map(config.width, config.height, options.elevation, config.seed)

    # Stage 2: distance to sea (needs the complete mask)
    field_ = distance_to_sea(sea_mask)

    # Stage 3: terrain tiers
    terrain = classify_grid(elevation, sea_mask, field_, options.terrain, config.seed)

    # Stage 4: resources
    ys, xs = np.mgrid[0 : config.height, 0 : config.width]
    resources = resource(terrain, xs, ys, options.resources, config.seed)

    grid = WorldGrid(
        config=config,
        elevation=elevation,
        sea_mask=sea_mask,
        distance=field_,
        terrain=terrain,
        resource=np.asarray(resources, dtype=np.float64),
    )
    logger.info(
        "World computed",
        land_fraction=round(grid.land_fraction(), 4),
        max_distance=grid.max_distance,
    )
    return grid


def iter_tile_rows(grid: WorldGrid) -> Iterator[Dict[str, Any]]:
    """Yield one tile record per cell in row-major order."""
    for y in range(grid.height):
        terrain_row = grid.terrain[y].tolist()
        resource_row = grid.resource[y].tolist()
        for x in range(grid.width):
            yield {
                "x": x,
                "y": y,
                "terrain": terrain_row[x],
                "resource": resource_row[x],
                "owner_faction_id": None,
                "population": 0,
                "capture": 0,
            }


def iter_tile_batches(grid: WorldGrid, batch_size: int = DEFAULT_BATCH_SIZE) -> Iterator[List[Dict[str, Any]]]:
    """Group :func:`iter_tile_rows` into lists of at most ``batch_size`` rows."""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")

    batch: List[Dict[str, Any]] = []
    for row in iter_tile_rows(grid):
        batch.append(row)
        if len(batch) >= batch_size:
            yield batch
            batch = []
    if batch:
        yield batch


class WorldGenerator:
    """
    Generates a world and writes it to a tile store.

    The store must provide ``count_tiles()``, ``bulk_insert_tiles(rows)``,
    ``commit()`` and ``rollback()``; see
    :class:`py_territory.db.queries.TileRepository`.
    """

    def __init__(self, config: WorldConfig, options: GenerationOptions = None):
        config.validate()
        self.config = config
        self.options = options or GenerationOptions()

    def generate(self) -> WorldGrid:
        return generate_world(self.config, self.options)

    def materialize(self, store, batch_size: int = DEFAULT_BATCH_SIZE) -> GenerationResult:
        """
        Populate an empty store with the generated world.

        A store that already holds any tile is left alone. Otherwise the
        whole grid is computed before the first write, every batch goes
        out in one transaction, and a failed write rolls all of them back.

        Raises:
            WorldPersistenceError: a batch write or the commit failed
        """
        existing = store.count_tiles()
        if existing > 0:
            logger.info("Tiles already exist, skipping world generation", existing=existing)
            return GenerationResult(skipped=True)

        started = time.perf_counter()
        grid = self.generate()

        inserted = 0
        batches = 0
        try:
            for batch in iter_tile_batches(grid, batch_size):
                store.bulk_insert_tiles(batch)
                batches += 1
                previous = inserted
                inserted += len(batch)
                if inserted // PROGRESS_LOG_EVERY > previous // PROGRESS_LOG_EVERY:
                    logger.info("Tiles inserted", inserted=inserted, total=self.config.cells)
            store.commit()
        except Exception as e:
            logger.error("World persistence failed", inserted=inserted, error=str(e))
            store.rollback()
            raise WorldPersistenceError(f"Failed after {inserted} tiles: {e}") from e

        elapsed = time.perf_counter() - started
        logger.info(
            "World generation complete",
            tiles=inserted,
            batches=batches,
            sea_tiles=int((grid.terrain == SEA_TERRAIN).sum()),
            elapsed_seconds=round(elapsed, 3),
        )
        return GenerationResult(skipped=False, tiles_written=inserted, batches=batches, elapsed_seconds=elapsed)
