"""
Deterministic coordinate hashing.

Every random-looking quantity in world generation (noise gradients,
coastline dithering, terrain and resource jitter) is a pure function of
an integer coordinate pair and the world seed. Nothing here keeps state,
so the same ``(x, y, seed)`` always gives the same value on any machine.
"""

import math
from typing import Union

import numpy as np

DEFAULT_SEED = 1337

_MASK32 = 0xFFFFFFFF
_PRIME_X = np.uint32(374761393)
_PRIME_Y = np.uint32(668265263)
_PRIME_SEED = 0x27D4EB2F

# murmur3 fmix32 constants
_FMIX_1 = np.uint32(0x85EBCA6B)
_FMIX_2 = np.uint32(0xC2B2AE35)
_SHIFT_16 = np.uint32(16)
_SHIFT_13 = np.uint32(13)

_INV_2_32 = 1.0 / 4294967296.0

IntLike = Union[int, np.ndarray]


def _wrap_object(value) -> int:
    return math.floor(value) & _MASK32


def _to_uint32(values) -> np.ndarray:
    """Wrap arbitrary integers (negatives included) to unsigned 32-bit lanes."""
    arr = np.asarray(values)
    if arr.dtype.kind == "O":
        # Python ints beyond 64 bits; reduce exactly before numpy sees them
        arr = np.vectorize(_wrap_object, otypes=[np.int64])(arr)
    arr = np.atleast_1d(arr)
    if arr.dtype.kind == "f":
        arr = np.floor(arr)
    return (arr.astype(np.int64) & _MASK32).astype(np.uint32)


def hash_uint32(x: IntLike, y: IntLike, seed: int = DEFAULT_SEED) -> np.ndarray:
    """
    Hash coordinates to unsigned 32-bit integers.

    Always returns a 1-d (or broadcast-shaped) ``uint32`` array; see
    :func:`coord_hash` for the unit-interval form.
    """
    xs, ys = np.broadcast_arrays(_to_uint32(x), _to_uint32(y))
    seed_lane = np.uint32((int(seed) * _PRIME_SEED) & _MASK32)

    h = xs * _PRIME_X + ys * _PRIME_Y + seed_lane

    # Two multiply/xor-shift rounds (fmix32)
    h = h ^ (h >> _SHIFT_16)
    h = h * _FMIX_1
    h = h ^ (h >> _SHIFT_13)
    h = h * _FMIX_2
    h = h ^ (h >> _SHIFT_16)
    return h


def coord_hash(x: IntLike, y: IntLike, seed: int = DEFAULT_SEED):
    """
    Map an integer coordinate pair to a reproducible value in [0, 1).

    Args:
        x: Column (int or integer array, may be negative)
        y: Row (int or integer array, may be negative)
        seed: World seed

    Returns:
        Python float for scalar input, float64 array otherwise
    """
    shape = np.broadcast(np.asarray(x), np.asarray(y)).shape
    values = hash_uint32(x, y, seed).astype(np.float64) * _INV_2_32
    if shape == ():
        return float(values[0])
    return values.reshape(shape)
