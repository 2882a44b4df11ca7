"""
Core world generation functionality.
"""

from .hashing import coord_hash, DEFAULT_SEED
from .noise import NoiseOptions, fbm_perlin, perlin2
from .elevation import ElevationOptions, classify_elevation, elevation_map, latitude
from .distance import DistanceField, distance_to_sea
from .terrain import SEA_TERRAIN, TerrainOptions, classify, classify_grid
from .resources import ResourceOptions, base_resource, resource, round2
from .world_generator import (
    GenerationOptions, GenerationResult, WorldConfig, WorldGenerator, WorldGrid,
    generate_world, iter_tile_batches, iter_tile_rows,
)
from .errors import InvalidDimensionsError, NoSeaError, WorldGenerationError, WorldPersistenceError

__all__ = ['coord_hash', 'DEFAULT_SEED', 'NoiseOptions', 'fbm_perlin', 'perlin2',
           'ElevationOptions', 'classify_elevation', 'elevation_map', 'latitude',
           'DistanceField', 'distance_to_sea', 'SEA_TERRAIN', 'TerrainOptions', 'classify',
           'classify_grid', 'ResourceOptions', 'base_resource', 'resource', 'round2',
           'GenerationOptions', 'GenerationResult', 'WorldConfig', 'WorldGenerator', 'WorldGrid',
           'generate_world', 'iter_tile_batches', 'iter_tile_rows',
           'InvalidDimensionsError', 'NoSeaError', 'WorldGenerationError', 'WorldPersistenceError']
