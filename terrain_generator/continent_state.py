# terrain_generator/continent_state.py

"""
================================================================================
CONTINENT STATE
================================================================================
Per-world continental state: sub-seeds, the precomputed coarse coastline grid,
the start position, and the envelope and climate parameters. One instance is
built per world (per worker process) and then serves coastline queries.

Coastline queries are two-tier. The coarse grid answers points far from the
coast directly; only points inside the margin band pay for the detailed fBm
coastline, and those results are memoised in a bounded DetailCache.

Data Contract:
---------------
- Inputs (on initialization):
    - seed (int), base_radius (float), template_name (str or None): the
      envelope preset, and the climate preset unless climate_preset is given.
    - config (dict): Optional overrides ('sdf_resolution', 'sdf_cell_size',
      'detail_cache_size', 'coarse_inland_margin', 'coarse_ocean_margin',
      'coast_zone_thresholds', 'noise_remap_range').
    - logger: A configured Python logging object.
- Outputs: Signed distances, coast zones, envelope and climate samples.
- Side Effects: Logs initialisation summaries. The DetailCache is the only
  mutable state and never changes results.
- Invariants: Both coarse margins exceed the coast detail amplitude, so the
  early-out never contradicts the detailed coastline.
================================================================================
"""

import logging
import math
import time
from typing import NamedTuple

from . import config as DEFAULTS
from .climate import evaluate_climate, generate_climate_params
from .continent_shape import (
    CoastZone, coarse_cell_size_for, compute_start_position, generate_coarse_sdf, get_coast_zone,
    get_detailed_coast_distance, grid_covers, max_silhouette_radius, validate_zone_thresholds
)
from .envelope import evaluate_envelope, generate_envelope_params
from .noise import sub_seed

class CacheStats(NamedTuple):
    size: int
    hits: int
    misses: int
    hit_rate: float

class Bounds(NamedTuple):
    min_x: float
    max_x: float
    min_z: float
    max_z: float

class DetailCache:
    """
    Bounded map from integer block cells (floor(x), floor(z)) to detailed
    signed distances. When full, the oldest half of the entries is evicted.
    """
    def __init__(self, max_size: int = DEFAULTS.DETAIL_CACHE_SIZE):
        if max_size < 1:
            raise ValueError(f"Detail cache size must be at least 1, got {max_size}")
        self.max_size = max_size
        self._entries = {}
        self.hits = 0
        self.misses = 0

    def __len__(self):
        return len(self._entries)

    def get(self, key):
        value = self._entries.get(key)
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def put(self, key, value):
        if len(self._entries) >= self.max_size:
            # dicts keep insertion order, so the first keys are the oldest
            evict = len(self._entries) // 2
            for old_key in list(self._entries)[:evict]:
                del self._entries[old_key]
        self._entries[key] = value

    def clear(self):
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def stats(self) -> CacheStats:
        total = self.hits + self.misses
        return CacheStats(len(self._entries), self.hits, self.misses, self.hits / total if total else 0.0)

class ContinentState:
    """
    Holds the precomputed continental layers for one world and answers
    coastline, envelope and climate queries against them.
    """
    def __init__(self, seed: int, base_radius: float = DEFAULTS.DEFAULT_BASE_RADIUS,
                 template_name: str = None, config: dict = None, logger: logging.Logger = None,
                 climate_preset: str = None):
        self.logger = logger or logging.getLogger(__name__)
        self.user_config = config or {}

        self.seed = seed
        self.base_radius = float(base_radius)
        self.template_name = template_name
        self.climate_preset = climate_preset if climate_preset is not None else template_name

        # --- Consolidate Configuration ---
        self.settings = {
            'sdf_resolution': self.user_config.get('sdf_resolution', DEFAULTS.SDF_RESOLUTION),
            'sdf_cell_size': self.user_config.get('sdf_cell_size'),
            'detail_cache_size': self.user_config.get('detail_cache_size', DEFAULTS.DETAIL_CACHE_SIZE),
            'coarse_inland_margin': self.user_config.get('coarse_inland_margin', DEFAULTS.COARSE_INLAND_MARGIN),
            'coarse_ocean_margin': self.user_config.get('coarse_ocean_margin', DEFAULTS.COARSE_OCEAN_MARGIN),
            'coast_zone_thresholds': self.user_config.get('coast_zone_thresholds', DEFAULTS.COAST_ZONE_THRESHOLDS),
            'noise_remap_range': tuple(self.user_config.get('noise_remap_range', DEFAULTS.NOISE_REMAP_RANGE)),
        }
        self._validate_settings()
        if self.settings['sdf_cell_size'] is None:
            self.settings['sdf_cell_size'] = coarse_cell_size_for(self.base_radius, self.settings['sdf_resolution'])
        elif not grid_covers(self.base_radius, self.settings['sdf_resolution'], self.settings['sdf_cell_size']):
            self.logger.warning(
                f"ContinentState: coarse grid ({self.settings['sdf_resolution']} x {self.settings['sdf_cell_size']} blocks) "
                f"does not cover the largest possible coastline ({max_silhouette_radius(self.base_radius):.0f} blocks); "
                f"points beyond it use the crude fallback"
            )

        # --- Sub-seeds ---
        self.shape_seed = sub_seed(seed, DEFAULTS.SHAPE_SEED_SALT)
        self.coast_seed = sub_seed(seed, DEFAULTS.COAST_SEED_SALT)
        self.start_seed = sub_seed(seed, DEFAULTS.START_SEED_SALT)
        self.envelope_seed = sub_seed(seed, DEFAULTS.ENVELOPE_SEED_SALT)
        self.climate_seed = sub_seed(seed, DEFAULTS.CLIMATE_SEED_SALT)

        # --- Pre-computation ---
        res = self.settings['sdf_resolution']
        self.logger.info(f"ContinentState: generating coarse coastline grid ({res}x{res})...")
        start_time = time.time()
        self.coarse_grid = generate_coarse_sdf(
            self.shape_seed, self.base_radius, res, self.settings['sdf_cell_size']
        )
        self.logger.info(f"ContinentState: coarse grid ready in {time.time() - start_time:.2f}s")

        self.start_position = compute_start_position(self.start_seed, self.shape_seed, self.base_radius)
        self.logger.info(
            f"ContinentState: start position ({self.start_position.x:.0f}, {self.start_position.z:.0f}) "
            f"at {math.degrees(self.start_position.angle):.0f} deg"
        )

        self.envelope_params = generate_envelope_params(
            self.envelope_seed, self.base_radius, template_name, self.start_position.angle
        )
        self.logger.debug(
            f"ContinentState: envelope ({len(self.envelope_params.control_points)} control points, "
            f"{len(self.envelope_params.lobes)} lobes, spine={'yes' if self.envelope_params.spine_strength > 0 else 'no'})"
        )

        self.climate_params = generate_climate_params(self.climate_seed, self.base_radius, self.climate_preset)
        self.logger.debug(
            f"ContinentState: climate (wind {math.degrees(self.climate_params.wind_angle):.0f} deg, "
            f"warm {math.degrees(self.climate_params.warm_angle):.0f} deg)"
        )

        self.detail_cache = DetailCache(self.settings['detail_cache_size'])

    def _validate_settings(self):
        amplitude = DEFAULTS.COAST_DETAIL_AMPLITUDE
        inland = self.settings['coarse_inland_margin']
        ocean = self.settings['coarse_ocean_margin']
        if inland <= amplitude:
            raise ValueError(f"Coarse inland margin ({inland}) must exceed the coast detail amplitude ({amplitude})")
        if -ocean <= amplitude:
            raise ValueError(f"Coarse ocean margin ({ocean}) must be below -{amplitude}")
        validate_zone_thresholds(self.settings['coast_zone_thresholds'])

    # --- Coastline queries ---

    def query_coarse(self, x: float, z: float) -> float:
        return self.coarse_grid.query(x, z)

    def get_signed_distance(self, x: float, z: float) -> float:
        """
        Signed distance to the coastline (positive inland). Far from the coast
        the coarse value is returned as-is. Inside the margin band the detailed
        distance is resolved per block, at the block corner, so a cached value
        is the value any point of that block would compute.
        """
        coarse = self.coarse_grid.query(x, z)
        if coarse > self.settings['coarse_inland_margin'] or coarse < self.settings['coarse_ocean_margin']:
            return coarse

        key = (math.floor(x), math.floor(z))
        cached = self.detail_cache.get(key)
        if cached is not None:
            return cached

        detailed = get_detailed_coast_distance(
            key[0], key[1], self.coast_seed, self.shape_seed, self.base_radius,
            self.settings['noise_remap_range']
        )
        self.detail_cache.put(key, detailed)
        return detailed

    def get_coast_zone(self, x: float, z: float) -> CoastZone:
        return get_coast_zone(self.get_signed_distance(x, z), self.settings['coast_zone_thresholds'])

    def is_land(self, x: float, z: float) -> bool:
        return self.get_coast_zone(x, z) < CoastZone.SHALLOW

    def is_ocean(self, x: float, z: float) -> bool:
        return not self.is_land(x, z)

    # --- Envelope & climate ---

    def get_envelope(self, x: float, z: float):
        return evaluate_envelope(x, z, self.envelope_params)

    def get_climate(self, x: float, z: float, raw_temperature: float, raw_humidity: float, elevation: float):
        return evaluate_climate(x, z, raw_temperature, raw_humidity, self.climate_params, elevation)

    # --- Housekeeping ---

    def clear_caches(self):
        self.detail_cache.clear()
        self.logger.debug("ContinentState: detail cache cleared")

    def cache_stats(self) -> CacheStats:
        return self.detail_cache.stats()

    def get_bounds(self) -> Bounds:
        """Square half-extent that contains the whole island plus a margin."""
        max_radius = max_silhouette_radius(self.base_radius) + DEFAULTS.BOUNDS_MARGIN
        return Bounds(-max_radius, max_radius, -max_radius, max_radius)
