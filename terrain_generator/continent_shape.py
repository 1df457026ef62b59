# terrain_generator/continent_shape.py

"""
================================================================================
CONTINENTAL SHAPE
================================================================================
This module defines the island silhouette and the signed distance from any
world point to its coastline, at two resolutions:

1. A coarse grid of *nominal-only* signed distances (low-frequency silhouette,
   no detail noise), built once per world and queried with bilinear
   interpolation.
2. A detailed per-point distance that layers high-frequency fBm onto the
   nominal silhouette.

Data Contract:
---------------
- Inputs:
    - shape_seed, coast_seed, start_seed: Integer sub-seeds of the world seed.
    - base_radius: Mean continent radius in blocks.
    - x, z: World coordinates relative to the continent centre (0, 0).
- Outputs:
    - Signed distances in blocks (positive = inland, negative = ocean).
    - CoastZone classifications and a deterministic start position.
- Side Effects: None. CoarseCoastlineGrid arrays are read-only after build.
- Invariants: The nominal radius is exactly periodic in angle. Queries
  outside the coarse grid return a documented crude estimate, never raise.
================================================================================
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import NamedTuple

import numpy as np
from numba import njit
from scipy.ndimage import map_coordinates

from . import config as DEFAULTS
from .noise import hash_2d, normalize_noise, octave_noise_2d

class CoastZone(IntEnum):
    """Ordered from furthest inland to furthest offshore."""
    DEEP_INLAND = 0
    COASTAL_TAPER = 1
    BEACH = 2
    SHALLOW = 3
    DEEP_OCEAN = 4

class StartPosition(NamedTuple):
    x: float
    z: float
    angle: float

@njit
def _nominal_radius(angle, shape_seed, base_radius, octaves, lobes, amplitude):
    "Low-frequency silhouette radius sampled on a circle in noise space."
    total = 0.0
    amp = base_radius * amplitude
    freq = float(lobes)

    for o in range(octaves):
        sample_x = math.cos(angle * freq) * 100.0 + o * 1000.0
        sample_z = math.sin(angle * freq) * 100.0
        n = octave_noise_2d(sample_x, sample_z, 1, 0.01, shape_seed + o * 7777)
        total += (n - 0.5) * 2.0 * amp
        amp *= 0.5
        freq *= 2.0

    return base_radius + total

@njit
def _coarse_sdf_kernel(shape_seed, base_radius, resolution, cell_size, octaves, lobes, amplitude):
    "Fills a resolution x resolution grid of nominal signed distances, indexed [z, x]."
    grid = np.empty((resolution, resolution))
    half = resolution / 2.0
    for gz in range(resolution):
        wz = (gz - half) * cell_size
        for gx in range(resolution):
            wx = (gx - half) * cell_size
            angle = math.atan2(wz, wx)
            radius = _nominal_radius(angle, shape_seed, base_radius, octaves, lobes, amplitude)
            grid[gz, gx] = radius - math.sqrt(wx * wx + wz * wz)
    return grid

def get_nominal_radius(angle: float, shape_seed: int, base_radius: float) -> float:
    """
    The island's low-frequency silhouette radius at `angle` (radians).
    Octave frequencies are integer multiples of the lobe count, so the result
    wraps exactly at 0 / 2*pi.
    """
    return _nominal_radius(
        angle, shape_seed, base_radius,
        DEFAULTS.SILHOUETTE_OCTAVES,
        DEFAULTS.SILHOUETTE_LOBES,
        DEFAULTS.SILHOUETTE_AMPLITUDE
    )

def get_detailed_coast_distance(x: float, z: float, coast_seed: int, shape_seed: int,
                                base_radius: float, remap_range: tuple = DEFAULTS.NOISE_REMAP_RANGE) -> float:
    """
    Signed distance from (x, z) to the true coastline: nominal radius at this
    angle plus centred high-frequency detail, minus the distance to the centre.
    The detail term never exceeds COAST_DETAIL_AMPLITUDE in magnitude.
    """
    angle = math.atan2(z, x)
    distance = math.hypot(x, z)
    nominal = get_nominal_radius(angle, shape_seed, base_radius)

    raw = octave_noise_2d(
        x, z,
        DEFAULTS.COAST_DETAIL_OCTAVES,
        DEFAULTS.COAST_DETAIL_FREQUENCY,
        coast_seed
    )
    detail = (normalize_noise(raw, remap_range[0], remap_range[1]) - 0.5) * 2.0 * DEFAULTS.COAST_DETAIL_AMPLITUDE

    return nominal + detail - distance

def max_silhouette_radius(base_radius: float) -> float:
    """Largest radius the silhouette plus coast detail can reach, in blocks."""
    octave_sum = 2.0 - 0.5 ** (DEFAULTS.SILHOUETTE_OCTAVES - 1)
    return base_radius * (1.0 + DEFAULTS.SILHOUETTE_AMPLITUDE * octave_sum) + DEFAULTS.COAST_DETAIL_AMPLITUDE

def coarse_cell_size_for(base_radius: float, resolution: int,
                         min_cell_size: float = DEFAULTS.SDF_CELL_SIZE) -> float:
    """
    Smallest cell size (at least `min_cell_size`) whose grid covers every
    possible coastline plus BOUNDS_MARGIN, so the crude fallback only ever
    answers open ocean.
    """
    usable_cells = resolution / 2.0 - 1.0
    if usable_cells <= 0:
        return float(min_cell_size)
    half_extent = max_silhouette_radius(base_radius) + DEFAULTS.BOUNDS_MARGIN
    return max(float(min_cell_size), half_extent / usable_cells)

def grid_covers(base_radius: float, resolution: int, cell_size: float) -> bool:
    return (resolution / 2.0 - 1.0) * cell_size >= max_silhouette_radius(base_radius) + DEFAULTS.BOUNDS_MARGIN

def coarse_fallback_distance(x: float, z: float, resolution: int, cell_size: float) -> float:
    """Crude radius estimate used for points outside the coarse grid."""
    return resolution * cell_size / 2.0 * DEFAULTS.SDF_FALLBACK_RADIUS_FACTOR - math.hypot(x, z)

@dataclass(frozen=True)
class CoarseCoastlineGrid:
    """A write-once grid of nominal signed distances centred on the continent."""
    distances: np.ndarray
    resolution: int
    cell_size: float
    shape_seed: int
    base_radius: float

    def query(self, x: float, z: float) -> float:
        """Bilinear lookup; falls back to a crude estimate outside the grid."""
        half = self.resolution / 2.0
        gx = x / self.cell_size + half
        gz = z / self.cell_size + half

        if gx < 0 or gz < 0 or gx >= self.resolution - 1 or gz >= self.resolution - 1:
            return coarse_fallback_distance(x, z, self.resolution, self.cell_size)

        x0 = int(math.floor(gx))
        z0 = int(math.floor(gz))
        fx = gx - x0
        fz = gz - z0

        d = self.distances
        top = d[z0, x0] * (1.0 - fx) + d[z0, x0 + 1] * fx
        bottom = d[z0 + 1, x0] * (1.0 - fx) + d[z0 + 1, x0 + 1] * fx
        return float(top * (1.0 - fz) + bottom * fz)

    def sample_many(self, x_coords: np.ndarray, z_coords: np.ndarray) -> np.ndarray:
        """
        Vectorised query() for coordinate arrays of any matching shape, using
        scipy's order-1 spline (bilinear) sampler inside the grid.
        """
        x_coords = np.asarray(x_coords, dtype=float)
        z_coords = np.asarray(z_coords, dtype=float)
        half = self.resolution / 2.0
        gx = x_coords / self.cell_size + half
        gz = z_coords / self.cell_size + half

        inside = (gx >= 0) & (gz >= 0) & (gx < self.resolution - 1) & (gz < self.resolution - 1)
        coords = np.array([gz.ravel(), gx.ravel()])
        sampled = map_coordinates(self.distances, coords, order=1, mode='nearest').reshape(x_coords.shape)

        fallback = (self.resolution * self.cell_size / 2.0 * DEFAULTS.SDF_FALLBACK_RADIUS_FACTOR
                    - np.hypot(x_coords, z_coords))
        return np.where(inside, sampled, fallback)

def generate_coarse_sdf(shape_seed: int, base_radius: float,
                        resolution: int = DEFAULTS.SDF_RESOLUTION,
                        cell_size: float = DEFAULTS.SDF_CELL_SIZE) -> CoarseCoastlineGrid:
    """Precomputes the nominal-only signed distance grid."""
    if resolution < 2:
        raise ValueError(f"SDF resolution must be at least 2, got {resolution}")
    if cell_size <= 0:
        raise ValueError(f"SDF cell size must be positive, got {cell_size}")

    distances = _coarse_sdf_kernel(
        shape_seed, float(base_radius), int(resolution), float(cell_size),
        DEFAULTS.SILHOUETTE_OCTAVES,
        DEFAULTS.SILHOUETTE_LOBES,
        DEFAULTS.SILHOUETTE_AMPLITUDE
    )
    distances.setflags(write=False)
    return CoarseCoastlineGrid(distances, int(resolution), float(cell_size), shape_seed, float(base_radius))

def query_coarse_sdf(grid: CoarseCoastlineGrid, x: float, z: float) -> float:
    return grid.query(x, z)

def validate_zone_thresholds(thresholds: dict) -> None:
    """Raises ValueError unless the zone thresholds are strictly decreasing."""
    ordered = [
        thresholds["deep_inland"],
        thresholds["coastal_taper"],
        thresholds["beach"],
        thresholds["shallow"],
    ]
    for upper, lower in zip(ordered, ordered[1:]):
        if not upper > lower:
            raise ValueError(f"Coast zone thresholds must be strictly decreasing, got {ordered}")

def get_coast_zone(signed_distance: float, thresholds: dict = None) -> CoastZone:
    """Classifies a signed coastline distance into one of the five zones."""
    if thresholds is None:
        thresholds = DEFAULTS.COAST_ZONE_THRESHOLDS
    else:
        validate_zone_thresholds(thresholds)

    if signed_distance > thresholds["deep_inland"]:
        return CoastZone.DEEP_INLAND
    if signed_distance > thresholds["coastal_taper"]:
        return CoastZone.COASTAL_TAPER
    if signed_distance > thresholds["beach"]:
        return CoastZone.BEACH
    if signed_distance > thresholds["shallow"]:
        return CoastZone.SHALLOW
    return CoastZone.DEEP_OCEAN

def compute_start_position(start_seed: int, shape_seed: int, base_radius: float) -> StartPosition:
    """
    Deterministic spawn point: a seeded angle on the nominal coast, moved a
    seeded 30-45 blocks inland.
    """
    angle = hash_2d(0, 0, start_seed) * 2.0 * math.pi
    coast_radius = get_nominal_radius(angle, shape_seed, base_radius)

    inland_offset = DEFAULTS.START_INLAND_BASE + hash_2d(1, 0, start_seed) * DEFAULTS.START_INLAND_RANGE
    radius = coast_radius - inland_offset

    return StartPosition(math.cos(angle) * radius, math.sin(angle) * radius, angle)
