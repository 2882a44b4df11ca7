"""
Terrain tier classification.

Land tiers run from 1 (best) to 6 (worst); 7 is sea. A cell's tier comes
from a harshness score that grows with continentality and latitude,
shrinks towards the equator, and carries a small hashed jitter.
"""

from dataclasses import dataclass

import numpy as np

from .distance import DistanceField
from .elevation import latitude
from .hashing import DEFAULT_SEED, coord_hash

SEA_TERRAIN = 7
LAND_TIERS = range(1, 7)
N_LAND_TIERS = len(LAND_TIERS)

TERRAIN_JITTER_OFFSET = (7, 9)


@dataclass
class TerrainOptions:
    """Harshness weights."""

    continental_weight: float = 0.60
    latitude_weight: float = 0.15
    elevation_weight: float = 0.10
    # Equator favour, 0.25-0.40
    equator_favor: float = 0.30
    equator_exponent: float = 1.0
    jitter: float = 0.05


def harshness(continental, lat, elevation, jitter_sample, options: TerrainOptions = None):
    """Blend the classifier inputs into a clamped [0, 1] harshness score."""
    options = options or TerrainOptions()
    h = (
        np.multiply(continental, options.continental_weight)
        + np.multiply(lat, options.latitude_weight)
        + np.multiply(elevation, options.elevation_weight)
    )
    h = h - options.equator_favor * np.power(np.subtract(1.0, lat), options.equator_exponent)
    h = h + (np.subtract(jitter_sample, 0.5)) * options.jitter
    return np.clip(h, 0.0, 1.0)


def tier_from_harshness(harsh):
    """Quantise harshness into 6 equal buckets; 1.0 stays in tier 6."""
    level = 1 + np.floor(np.multiply(harsh, N_LAND_TIERS)).astype(np.int64)
    level = np.clip(level, LAND_TIERS[0], LAND_TIERS[-1])
    if np.ndim(level) == 0:
        return int(level)
    return level


def classify(
    x: int,
    y: int,
    elevation: float,
    is_sea: bool,
    dist: int,
    max_dist: int,
    height: int,
    options: TerrainOptions = None,
    seed: int = DEFAULT_SEED,
) -> int:
    """
    Terrain tier for one cell.

    Args:
        x, y: Cell coordinates
        elevation: Clamped elevation of the cell
        is_sea: Sea flag from the elevation pass
        dist: Distance to the nearest sea cell
        max_dist: Largest land distance in the world
        height: World height, for latitude
        options: Harshness weights
        seed: World seed

    Returns:
        Tier in 1..6, or 7 for sea
    """
    if is_sea:
        return SEA_TERRAIN

    continental = min(1.0, dist / max_dist) if max_dist > 0 else 0.0
    jx, jy = TERRAIN_JITTER_OFFSET
    harsh = harshness(
        continental,
        latitude(y, height),
        elevation,
        coord_hash(x + jx, y + jy, seed),
        options,
    )
    return tier_from_harshness(float(harsh))


def classify_grid(
    elevation: np.ndarray,
    sea_mask: np.ndarray,
    field: DistanceField,
    options: TerrainOptions = None,
    seed: int = DEFAULT_SEED,
) -> np.ndarray:
    """Vectorised :func:`classify` over a whole ``[H, W]`` grid."""
    height, width = elevation.shape
    ys, xs = np.mgrid[0:height, 0:width]
    jx, jy = TERRAIN_JITTER_OFFSET

    harsh = harshness(
        field.continentality(),
        latitude(ys, height),
        elevation,
        coord_hash(xs + jx, ys + jy, seed),
        options,
    )
    terrain = tier_from_harshness(harsh).astype(np.int8)
    terrain[sea_mask] = SEA_TERRAIN
    return terrain
