"""Per-tile resource yield."""

from dataclasses import dataclass

import numpy as np

from .hashing import DEFAULT_SEED, coord_hash

RESOURCE_JITTER_OFFSET = (17, 23)


@dataclass
class ResourceOptions:
    max_yield: float = 1.6
    min_yield: float = 0.30
    # Multiplier is spread_low + hash * spread, i.e. 0.90..1.10
    spread_low: float = 0.90
    spread: float = 0.20


def round2(value):
    """Round half-up to 2 decimals."""
    rounded = np.floor(np.multiply(value, 100.0) + 0.5) / 100.0
    if np.ndim(rounded) == 0:
        return float(rounded)
    return rounded


def base_resource(terrain, options: ResourceOptions = None):
    """Linear yield from ``max_yield`` at tier 1 down to ``min_yield`` at tier 6."""
    options = options or ResourceOptions()
    rank = np.subtract(terrain, 1)
    base = options.max_yield - (options.max_yield - options.min_yield) * (rank / 5.0)
    if np.ndim(base) == 0:
        return float(base)
    return base


def resource(terrain, x, y, options: ResourceOptions = None, seed: int = DEFAULT_SEED):
    """
    Jittered resource yield, rounded to 2 decimals.

    Sea tiles (7) get a nominal value too; callers must not reward them.
    """
    options = options or ResourceOptions()
    jx, jy = RESOURCE_JITTER_OFFSET
    noise = coord_hash(np.add(x, jx), np.add(y, jy), seed)
    return round2(base_resource(terrain, options) * (options.spread_low + noise * options.spread))
