"""
Coastal distance transform.

Multi-source breadth-first search from every sea cell at once over the
4-neighbourhood. The search runs level by level: each wavefront is a
NumPy index array, so the inner loop is vectorised while each cell is
still assigned exactly once, on its first visit.
"""

from dataclasses import dataclass

import numpy as np
import structlog

from .errors import InvalidDimensionsError, NoSeaError

logger = structlog.get_logger()

UNREACHED = -1


@dataclass
class DistanceField:
    """Grid distance from each cell to the nearest sea cell."""

    distance: np.ndarray  # int32 [H, W], 0 on sea
    max_distance: int  # max over land cells, 0 if there is no land

    def continentality(self) -> np.ndarray:
        """Distance normalised to [0, 1] (0 on the coast, 1 most inland)."""
        if self.max_distance <= 0:
            return np.zeros(self.distance.shape, dtype=np.float64)
        return np.minimum(1.0, self.distance / float(self.max_distance))


def _neighbours(frontier: np.ndarray, width: int, height: int) -> np.ndarray:
    """Flat indices of the in-bounds N/S/E/W neighbours of ``frontier``."""
    fx = frontier % width
    fy = frontier // width
    return np.concatenate(
        (
            frontier[fx > 0] - 1,
            frontier[fx < width - 1] + 1,
            frontier[fy > 0] - width,
            frontier[fy < height - 1] + width,
        )
    )


def distance_to_sea(sea_mask: np.ndarray) -> DistanceField:
    """
    Compute the 4-neighbour distance from every cell to the nearest sea.

    Args:
        sea_mask: Boolean array ``[H, W]``, True for sea

    Returns:
        DistanceField with the distance grid and the land maximum

    Raises:
        InvalidDimensionsError: mask is not a non-empty 2D grid
        NoSeaError: mask has no sea cell to start from
    """
    sea_mask = np.asarray(sea_mask, dtype=bool)
    if sea_mask.ndim != 2 or sea_mask.size == 0:
        raise InvalidDimensionsError(f"Sea mask must be a non-empty 2D grid, got shape {sea_mask.shape}")

    height, width = sea_mask.shape
    flat_sea = sea_mask.ravel()

    frontier = np.flatnonzero(flat_sea)
    if frontier.size == 0:
        raise NoSeaError("World has no sea cells; continentality is undefined")

    dist = np.full(width * height, UNREACHED, dtype=np.int32)
    dist[frontier] = 0
    # Scratch slot per cell, used to pick one copy of each repeated candidate
    slot = np.empty(width * height, dtype=np.int64)

    depth = 0
    while frontier.size:
        depth += 1
        candidates = _neighbours(frontier, width, height)
        candidates = candidates[dist[candidates] == UNREACHED]
        # A cell may be adjacent to several frontier cells; the last write wins
        order = np.arange(candidates.size)
        slot[candidates] = order
        frontier = candidates[slot[candidates] == order]
        dist[frontier] = depth

    land = ~flat_sea
    max_distance = int(dist[land].max()) if land.any() else 0

    logger.debug("Distance transform complete", width=width, height=height, max_distance=max_distance)
    return DistanceField(distance=dist.reshape(height, width), max_distance=max_distance)
