"""
Coherent noise for world generation.

Implements 2D gradient (Perlin-style) noise on top of the coordinate hash
and layers it into fractal Brownian motion. Everything is vectorised with
NumPy so the whole grid is sampled in one call per octave.
"""

from dataclasses import dataclass

import numpy as np

from .hashing import DEFAULT_SEED, coord_hash


@dataclass
class NoiseOptions:
    """fBm parameters."""

    # Smaller scale => larger, more continental blobs (0.008-0.012 reads as continents)
    scale: float = 0.008
    octaves: int = 5
    lacunarity: float = 2.0
    gain: float = 0.5


def fade(t):
    """Quintic smoothstep 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6 - 15) + 10)


def lerp(a, b, t):
    return a + (b - a) * t


def _gradient(ix: np.ndarray, iy: np.ndarray, seed: int):
    """Unit gradient vector per lattice point, from a hashed angle."""
    angle = coord_hash(ix, iy, seed) * (2.0 * np.pi)
    return np.cos(angle), np.sin(angle)


def perlin2(x, y, seed: int = DEFAULT_SEED):
    """
    Single octave of gradient noise.

    Returns values in roughly [-sqrt(0.5), sqrt(0.5)], close enough to
    [-1, 1] for fBm normalisation.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    scalar = x.ndim == 0 and y.ndim == 0
    x, y = np.broadcast_arrays(np.atleast_1d(x), np.atleast_1d(y))

    x0 = np.floor(x)
    y0 = np.floor(y)
    x1 = x0 + 1
    y1 = y0 + 1

    sx = fade(x - x0)
    sy = fade(y - y0)

    ix0 = x0.astype(np.int64)
    iy0 = y0.astype(np.int64)
    ix1 = ix0 + 1
    iy1 = iy0 + 1

    g00x, g00y = _gradient(ix0, iy0, seed)
    g10x, g10y = _gradient(ix1, iy0, seed)
    g01x, g01y = _gradient(ix0, iy1, seed)
    g11x, g11y = _gradient(ix1, iy1, seed)

    dx0, dy0 = x - x0, y - y0
    dx1, dy1 = x - x1, y - y1

    n00 = g00x * dx0 + g00y * dy0
    n10 = g10x * dx1 + g10y * dy0
    n01 = g01x * dx0 + g01y * dy1
    n11 = g11x * dx1 + g11y * dy1

    value = lerp(lerp(n00, n10, sx), lerp(n01, n11, sx), sy)
    if scalar:
        return float(value[0])
    return value


def fbm_perlin(x, y, options: NoiseOptions = None, seed: int = DEFAULT_SEED):
    """
    Fractal Brownian motion over :func:`perlin2`.

    Each octave doubles (``lacunarity``) the frequency and halves
    (``gain``) the amplitude, so the first octave sets the continents and
    later ones add coastline texture. The weighted sum is divided by the
    total amplitude and shifted to centre on 0.5. It is not clamped.

    Args:
        x: Column coordinate(s)
        y: Row coordinate(s)
        options: Noise parameters, defaults to :class:`NoiseOptions`
        seed: World seed

    Returns:
        Float for scalar input, array otherwise
    """
    options = options or NoiseOptions()

    amp = 1.0
    freq = 1.0
    total = 0.0
    norm = 0.0
    for _ in range(options.octaves):
        total = total + amp * perlin2(
            np.multiply(x, options.scale * freq),
            np.multiply(y, options.scale * freq),
            seed,
        )
        norm += amp
        amp *= options.gain
        freq *= options.lacunarity

    value = np.divide(total, norm or 1.0)
    value = (value + 1.0) * 0.5
    if np.ndim(value) == 0:
        return float(value)
    return value
