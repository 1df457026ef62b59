# terrain_generator/noise.py

"""
================================================================================
SEEDED HASH & NOISE UTILITIES
================================================================================
This module provides the deterministic hash and the value-noise family every
other layer is built on. It is designed to be a pure, stateless utility.

Data Contract:
---------------
- Inputs:
    - x, z: World coordinates (scalars, or 2-D NumPy arrays for *_grid kernels).
    - seed: A 32-bit integer. Derived seeds come from derive_seed().
    - octaves, frequency, persistence, lacunarity: Standard noise parameters.
- Outputs:
    - hash_2d: a float in [0, 1).
    - noise_2d / octave_noise_2d / ridged_noise_2d / warped_noise_2d: floats in
      [0, 1]. fBm output centres on 0.5 and rarely leaves [0.25, 0.75].
- Side Effects: None.
- Invariants: hash_2d is a pure 32-bit integer mix, so identical integer inputs
  give bit-identical output on every platform. The grid kernels return exactly
  the values of their scalar counterparts.
================================================================================
"""

from functools import lru_cache

import numpy as np
from numba import njit

from . import config as DEFAULTS

MASK_32 = 0xFFFFFFFF

@njit
def lerp(a, b, t):
    "Linear interpolation."
    return a + (b - a) * t

@njit
def clamp(value, lo, hi):
    "Clamp value to [lo, hi]."
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value

@njit
def smoothstep(t):
    "Clamped 3t^2 - 2t^3."
    if t <= 0.0:
        return 0.0
    if t >= 1.0:
        return 1.0
    return t * t * (3.0 - 2.0 * t)

@njit
def smoothstep_edges(edge0, edge1, x):
    "Smoothstep of x between edge0 and edge1."
    return smoothstep((x - edge0) / (edge1 - edge0))

@njit
def hash_2d(x, z, seed):
    """
    Maps an integer lattice point and seed to [0, 1).
    Every intermediate is masked to 32 bits, so results do not depend on
    integer width or floating point behaviour.
    """
    h = (seed + x * 374761393 + z * 668265263) & 0xFFFFFFFF
    h = ((h ^ (h >> 13)) * 1274126177) & 0xFFFFFFFF
    h = h ^ (h >> 16)
    return h / 4294967296.0

@njit
def noise_2d(x, z, seed):
    """
    Bilinear value noise. Corner hashes are blended with smoothstep weights
    rather than linear ones to avoid axis-aligned creases.
    """
    x_floor = np.floor(x)
    z_floor = np.floor(z)
    xi = int(x_floor)
    zi = int(z_floor)

    fx = x - x_floor
    fz = z - z_floor

    u = fx * fx * (3.0 - 2.0 * fx)
    v = fz * fz * (3.0 - 2.0 * fz)

    a = hash_2d(xi, zi, seed)
    b = hash_2d(xi + 1, zi, seed)
    c = hash_2d(xi, zi + 1, seed)
    d = hash_2d(xi + 1, zi + 1, seed)

    return (a * (1.0 - u) * (1.0 - v) +
            b * u * (1.0 - v) +
            c * (1.0 - u) * v +
            d * u * v)

@njit
def octave_noise_2d(x, z, octaves=4, base_freq=0.05, seed=12345):
    """
    Fractal (fBm) value noise: frequency doubles and amplitude halves every
    octave, and the sum is divided by the total amplitude.
    """
    total = 0.0
    frequency = base_freq
    amplitude = 1.0
    max_value = 0.0

    for _ in range(octaves):
        total += noise_2d(x * frequency, z * frequency, seed) * amplitude
        max_value += amplitude
        amplitude *= 0.5
        frequency *= 2.0

    if max_value == 0.0:
        return 0.0
    return total / max_value

@njit
def ridged_noise_2d(x, z, octaves, frequency, persistence, lacunarity, seed):
    """
    Ridged multifractal noise. Each octave is folded around 0.5 and inverted,
    then weighted by the previous octave's ridge so ridgelines stay connected.
    """
    total = 0.0
    amplitude = 1.0
    weight = 1.0
    max_value = 0.0

    for _ in range(octaves):
        n = noise_2d(x * frequency, z * frequency, seed)
        ridge = 1.0 - abs(n * 2.0 - 1.0)
        ridge *= weight

        total += ridge * amplitude
        max_value += amplitude

        weight = min(ridge * 2.0, 1.0)
        amplitude *= persistence
        frequency *= lacunarity

    if max_value == 0.0:
        return 0.0
    return total / max_value

@njit
def warped_noise_2d(x, z, octaves, frequency, warp_strength, seed):
    """
    Domain-warped fBm. Two offset low-frequency fields displace the sample
    point before the main lookup, which produces organic, non-axis-aligned
    shapes (used for coastlines).
    """
    warp_x = octave_noise_2d(x + 500.0, z, 2, frequency * 0.5, seed)
    warp_z = octave_noise_2d(x, z + 500.0, 2, frequency * 0.5, seed)

    new_x = x + (warp_x - 0.5) * 2.0 * warp_strength
    new_z = z + (warp_z - 0.5) * 2.0 * warp_strength

    return octave_noise_2d(new_x, new_z, octaves, frequency, seed)

@njit
def normalize_noise(value, low=0.06, high=0.45):
    """
    Remaps [low, high] to [0, 1], clamps, then applies smoothstep to spread
    values away from the middle. The endpoints map to exactly 0.0 and 1.0.
    """
    return smoothstep((value - low) / (high - low))

@njit
def remap_noise(value, low, high):
    "Linear remap of [low, high] to [0, 1] with clamping."
    return clamp((value - low) / (high - low), 0.0, 1.0)

@njit
def octave_noise_grid(x, z, octaves, base_freq, seed):
    "octave_noise_2d over 2-D coordinate arrays."
    rows, cols = x.shape
    out = np.empty((rows, cols))
    for i in range(rows):
        for j in range(cols):
            out[i, j] = octave_noise_2d(x[i, j], z[i, j], octaves, base_freq, seed)
    return out

@njit
def warped_noise_grid(x, z, octaves, frequency, warp_strength, seed):
    "warped_noise_2d over 2-D coordinate arrays."
    rows, cols = x.shape
    out = np.empty((rows, cols))
    for i in range(rows):
        for j in range(cols):
            out[i, j] = warped_noise_2d(x[i, j], z[i, j], octaves, frequency, warp_strength, seed)
    return out

@lru_cache(maxsize=1024)
def derive_seed(seed: int, salt: str) -> int:
    """
    Derives an independent unsigned 32-bit seed from a world seed and a
    per-purpose string salt (djb2 salt hash, then two multiply/xor-shift
    rounds). Layers salted differently never share noise.
    """
    salt_hash = 5381
    for char in salt:
        salt_hash = ((salt_hash << 5) + salt_hash + ord(char)) & MASK_32

    h = (seed ^ salt_hash) & MASK_32
    h = ((h ^ (h >> 16)) * 2246822507) & MASK_32
    h = ((h ^ (h >> 13)) * 3266489909) & MASK_32
    return (h ^ (h >> 16)) & MASK_32

def sub_seed(seed: int, salt: int) -> int:
    """Integer-salted sub-seed in the positive signed 32-bit range."""
    return int(np.floor(hash_2d(0, 0, seed + salt) * DEFAULTS.SUB_SEED_SCALE))
