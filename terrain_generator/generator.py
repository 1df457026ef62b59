# terrain_generator/generator.py

"""
================================================================================
CORE WORLD GENERATOR
================================================================================
This module contains the main WorldGenerator class, the world-generation
context that combines continentalness, biome height bands, spine boosts, river
carving and edge falloff into a final per-block height and biome.

The generator owns everything a world needs to answer point queries: the seed,
the continent template, the river and spine feature indices and, for the
continental strategy, a ContinentState. Nothing is held at module level, so
several worlds can coexist in one process.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): Parameters that override the internal defaults. Expected
      keys include 'seed', 'template', 'base_radius', 'max_height',
      'sea_level', 'world_bounds' and the ContinentState keys.
    - logger: A configured Python logging object for runtime messages.
    - river_index / spine_index (optional): Pre-built feature indices.
- Outputs (from methods):
    - Normalised heights in [0, 1], heights in blocks, biome names, climate
      values, water classification, TerrainSample bundles and numpy arrays for
      whole regions.
- Side Effects: Logs initialisation summaries using the provided logger.
- Invariants: Given the same seed, template and feature indices, every output
  is deterministic.
================================================================================
"""

import dataclasses
import logging
import math
import time
from typing import NamedTuple, Optional

import numpy as np

from . import config as DEFAULTS
from .biomes import (
    BIOME_IDS, classify_biome, get_height_band, is_water_biome,
    land_biome_for_continentalness, apply_sub_biome_variation
)
from .climate import ClimateSample
from .continent_shape import CoastZone, get_coast_zone
from .continent_state import ContinentState
from .features import LinearFeatureIndex, SpineFeatureIndex
from .noise import (
    clamp, derive_seed, octave_noise_2d, remap_noise, ridged_noise_2d,
    smoothstep, warped_noise_2d
)
from .templates import (
    ContinentTemplate, GenerationStrategy, TemplateModifiers, get_normalized_position,
    get_spine_info, get_template, get_template_for_seed, get_template_modifiers,
    to_bounds_space
)

NEUTRAL_MODIFIERS = TemplateModifiers(1.0, 1.0, 0.0, 0.0)

class TerrainSample(NamedTuple):
    continental: float
    effective_continental: float
    temperature: float
    humidity: float
    erosion: float
    ridgeness: float
    biome: str
    height_normalized: float
    height: int
    water_type: str
    ocean_depth: Optional[int]
    coast_zone: CoastZone

def apply_river_carving(height: float, influence, river_bed: float = DEFAULTS.RIVER_BED_HEIGHT) -> float:
    """
    Carves a V-shaped valley toward the river bed. The carve profile is
    smoothstep(1 - center_distance) scaled by the river's influence, so the
    height is untouched at and beyond the channel edge. Carving never digs
    below the bed and never raises terrain that already sits below it.
    """
    strength = smoothstep(max(0.0, 1.0 - influence.center_distance)) * influence.influence * DEFAULTS.RIVER_CARVE_STRENGTH
    if strength <= 0.0 or height <= river_bed:
        return height

    carved = height + (river_bed - height) * strength
    return max(river_bed, carved)

class WorldGenerator:
    """
    Generates height, biome and climate for any world position. This class is
    backend-only and does not handle any visualization.
    """
    def __init__(self, config: dict, logger: logging.Logger,
                 river_index: LinearFeatureIndex = None, spine_index: SpineFeatureIndex = None):
        """
        Initializes the world generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
            river_index (LinearFeatureIndex, optional): Rivers to carve.
            spine_index (SpineFeatureIndex, optional): Procedural ridges to boost.
        """
        self.logger = logger
        self.user_config = config or {}
        self.logger.info("WorldGenerator initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),
            'template': self.user_config.get('template', DEFAULTS.DEFAULT_TEMPLATE),
            'base_radius': self.user_config.get('base_radius', DEFAULTS.DEFAULT_BASE_RADIUS),
            'max_height': self.user_config.get('max_height', DEFAULTS.MAX_HEIGHT),
            'sea_level': self.user_config.get('sea_level', DEFAULTS.HEIGHT_BANDS['sea_level']),
            'world_bounds': self.user_config.get('world_bounds'),

            # ContinentState pass-through
            'detail_cache_size': self.user_config.get('detail_cache_size', DEFAULTS.DETAIL_CACHE_SIZE),
            'sdf_resolution': self.user_config.get('sdf_resolution', DEFAULTS.SDF_RESOLUTION),
            'sdf_cell_size': self.user_config.get('sdf_cell_size'),
            'noise_remap_range': tuple(self.user_config.get('noise_remap_range', DEFAULTS.NOISE_REMAP_RANGE)),
            'coast_zone_thresholds': self.user_config.get('coast_zone_thresholds', DEFAULTS.COAST_ZONE_THRESHOLDS),
        }

        # --- Public Properties for easy access ---
        self.seed = int(self.settings['seed'])
        self.base_radius = float(self.settings['base_radius'])
        self.max_height = int(self.settings['max_height'])
        self.sea_level = float(self.settings['sea_level'])
        self.template = self._resolve_template(self.settings['template'], self.settings['world_bounds'])
        self.strategy = self.template.strategy

        # --- Feature indices (owned, never shared through module state) ---
        self.river_index = river_index
        self.spine_index = spine_index

        # --- Derived seeds ---
        self.seeds = {
            salt: derive_seed(self.seed, salt)
            for salt in ('continentalness', 'islands', 'temperature', 'humidity', 'erosion',
                         'ridgeness', 'ridge', 'floor', 'terrain_warp', 'terrain_height', 'terrain_detail')
        }

        self.logger.info(
            f"WorldGenerator initialized with seed: {self.seed}, template: '{self.template.name}' "
            f"({self.strategy.value})"
        )

        # --- Pre-computation Steps ---
        self.continent_state = None
        if self.strategy is GenerationStrategy.CONTINENTAL:
            start_time = time.time()
            self.continent_state = ContinentState(
                self.seed, self.base_radius, self.template.envelope_preset,
                config={key: self.settings[key] for key in (
                    'detail_cache_size', 'sdf_resolution', 'sdf_cell_size',
                    'noise_remap_range', 'coast_zone_thresholds')},
                logger=self.logger,
                climate_preset=self.template.climate_preset,
            )
            self.logger.info(f"Continental layers ready in {time.time() - start_time:.2f}s")

        rivers = len(river_index) if river_index is not None else 0
        spines = len(spine_index) if spine_index is not None else 0
        self.logger.debug(f"Feature indices: {rivers} rivers, {spines} spines")

    def _resolve_template(self, template, world_bounds) -> ContinentTemplate:
        """A template instance, a preset name, or None / 'auto' for a seed-chosen archetype."""
        if isinstance(template, ContinentTemplate):
            resolved = template
        elif template in (None, 'auto'):
            resolved = get_template_for_seed(self.seed)
        else:
            resolved = get_template(template)

        if world_bounds is not None:
            resolved = dataclasses.replace(resolved, world_bounds=tuple(world_bounds))
        return resolved

    # --- Noise layers ---

    def _remap(self, value: float) -> float:
        lo, hi = self.settings['noise_remap_range']
        return remap_noise(value, lo, hi)

    def _modifiers(self, x: float, z: float) -> TemplateModifiers:
        if self.strategy is GenerationStrategy.CONTINENTAL:
            return NEUTRAL_MODIFIERS
        return get_template_modifiers(x, z, self.template)

    def _base_continentalness(self, x: float, z: float) -> float:
        params = DEFAULTS.WORLD_PARAMS['continental']
        return warped_noise_2d(x, z, params['octaves'], params['frequency'], params['warp_strength'],
                               self.seeds['continentalness'])

    def _base_terrain_noise(self, x: float, z: float) -> float:
        """Domain-warped terrain noise plus micro detail, in [0, 1]."""
        p = DEFAULTS.BASE_TERRAIN_NOISE
        warp_seed = self.seeds['terrain_warp']
        warp_x = (octave_noise_2d(x + 500.0, z, 2, p['warp_frequency'], warp_seed) - 0.5) * 2.0 * p['warp_strength']
        warp_z = (octave_noise_2d(x, z + 500.0, 2, p['warp_frequency'], warp_seed) - 0.5) * 2.0 * p['warp_strength']

        height_noise = octave_noise_2d(x + warp_x, z + warp_z, p['height_octaves'], p['height_frequency'],
                                       self.seeds['terrain_height'])
        micro = (octave_noise_2d(x, z, p['detail_octaves'], p['detail_frequency'], self.seeds['terrain_detail'])
                 - 0.5) * p['detail_weight']
        return clamp(self._remap(height_noise) + micro, 0.0, 1.0)

    def _spine_first_continentalness(self, x: float, z: float, spine_distance: float) -> float:
        size = self.template.world_size
        sp = DEFAULTS.SPINE_INFLUENCE
        sigma = sp['continent_sigma'] / size
        boost = math.exp(-(spine_distance * spine_distance) / (2.0 * sigma * sigma)) * sp['continent_boost_strength']
        return min(1.0, self._base_continentalness(x, z) + boost)

    def sample_continentalness(self, x: float, z: float) -> float:
        """How land-like a position is, before island perturbation."""
        if self.strategy is GenerationStrategy.CONTINENTAL:
            distance = self.continent_state.get_signed_distance(x, z)
            return clamp(DEFAULTS.CONTINENT_THRESHOLDS['land'] + distance / self.base_radius, 0.0, 1.0)

        if self.strategy is GenerationStrategy.SPINE_FIRST:
            nx, nz = to_bounds_space(x, z, self.template)
            return self._spine_first_continentalness(x, z, get_spine_info(nx, nz, self.template).distance)

        return self._base_continentalness(x, z) * self._modifiers(x, z).continentalness_multiplier

    def get_island_noise(self, x: float, z: float) -> float:
        params = DEFAULTS.WORLD_PARAMS['islands']
        return octave_noise_2d(x, z, params['octaves'], params['frequency'], self.seeds['islands'])

    def get_effective_continentalness(self, x: float, z: float) -> float:
        """Continentalness with offshore islands perturbing the coastal band."""
        c = self.sample_continentalness(x, z)
        lo, hi = DEFAULTS.ISLAND_BAND
        if lo < c < hi:
            c += (self.get_island_noise(x, z) - 0.5) * DEFAULTS.ISLAND_STRENGTH
        return clamp(c, 0.0, 1.0)

    def get_coast_proximity(self, x: float, z: float) -> float:
        """0 far from any coast, 1 right at it."""
        if self.strategy is GenerationStrategy.CONTINENTAL:
            distance = self.continent_state.get_signed_distance(x, z)
            taper = self.settings['coast_zone_thresholds']['coastal_taper']
            return clamp(1.0 - abs(distance) / taper, 0.0, 1.0)

        s = DEFAULTS.COAST_SAMPLE_DISTANCE
        dx = self.get_effective_continentalness(x + s, z) - self.get_effective_continentalness(x - s, z)
        dz = self.get_effective_continentalness(x, z + s) - self.get_effective_continentalness(x, z - s)
        return min(1.0, math.sqrt(dx * dx + dz * dz) * DEFAULTS.COAST_GRADIENT_SCALE)

    def sample_temperature(self, x: float, z: float) -> float:
        params = DEFAULTS.WORLD_PARAMS['temperature']
        return self._remap(octave_noise_2d(x, z, params['octaves'], params['frequency'], self.seeds['temperature']))

    def sample_humidity(self, x: float, z: float) -> float:
        params = DEFAULTS.WORLD_PARAMS['humidity']
        return self._remap(octave_noise_2d(x, z, params['octaves'], params['frequency'], self.seeds['humidity']))

    def sample_erosion(self, x: float, z: float) -> float:
        params = DEFAULTS.WORLD_PARAMS['erosion']
        erosion = octave_noise_2d(x, z, params['octaves'], params['frequency'], self.seeds['erosion'])
        return erosion * self._modifiers(x, z).elevation_multiplier

    def sample_ridgeness(self, x: float, z: float) -> float:
        p = DEFAULTS.WORLD_PARAMS['ridgeness']
        return ridged_noise_2d(x, z, p['octaves'], p['frequency'], p['persistence'], p['lacunarity'],
                               self.seeds['ridgeness'])

    def sample_mountain_height(self, x: float, z: float) -> float:
        mods = self._modifiers(x, z)
        return self.sample_ridgeness(x, z) * mods.ridge_weight * mods.mountain_boost

    def get_climate(self, x: float, z: float, height_normalized: float = None) -> ClimateSample:
        """
        Temperature and humidity at a point. The continental strategy runs the
        raw noise through the climate geography; the others use it directly.
        """
        temperature = self.sample_temperature(x, z)
        humidity = self.sample_humidity(x, z)
        if self.strategy is not GenerationStrategy.CONTINENTAL:
            return ClimateSample(temperature, humidity)

        if height_normalized is None:
            height_normalized = self.get_height_normalized(x, z)
        return self.continent_state.get_climate(x, z, temperature, humidity, height_normalized)

    # --- Feature lookups ---

    def _spine_boost_at(self, x: float, z: float) -> float:
        if self.spine_index is None:
            return 0.0
        return self.spine_index.get_elevation_boost_at(x, z)

    def _carve_rivers(self, x: float, z: float, height: float) -> float:
        if self.river_index is None:
            return height
        hit = self.river_index.get_influence_at(x, z)
        if hit is None:
            return height
        return apply_river_carving(height, hit.influence)

    # --- Height composition ---

    def get_height_normalized(self, x: float, z: float) -> float:
        """Final normalised height in [0, 1]."""
        return self._compose_height(x, z, carve_rivers=True)

    def get_height_for_river_gen(self, x: float, z: float) -> float:
        """Height without river carving, for tracing rivers without feedback."""
        return self._compose_height(x, z, carve_rivers=False)

    def _compose_height(self, x: float, z: float, carve_rivers: bool) -> float:
        if self.strategy is GenerationStrategy.SPINE_FIRST:
            return self._height_spine_first(x, z, carve_rivers)
        if self.strategy is GenerationStrategy.CONTINENTAL:
            return self._height_continental(x, z, carve_rivers)
        return self._height_legacy(x, z, carve_rivers)

    def _land_band_height(self, x: float, z: float, continentalness: float) -> float:
        """Noise mapped into the band of the biome chosen from continentalness and climate."""
        biome = land_biome_for_continentalness(self.sample_temperature(x, z), self.sample_humidity(x, z),
                                               continentalness)
        band_min, band_max = get_height_band(biome)
        return band_min + self._base_terrain_noise(x, z) * (band_max - band_min)

    def _height_spine_first(self, x: float, z: float, carve_rivers: bool) -> float:
        template = self.template
        size = template.world_size
        bands = DEFAULTS.HEIGHT_BANDS
        sp = DEFAULTS.SPINE_INFLUENCE
        shelf = DEFAULTS.CONTINENTAL_SHELF
        deep_threshold = DEFAULTS.CONTINENT_THRESHOLDS['deep_ocean']
        land_threshold = DEFAULTS.CONTINENT_THRESHOLDS['land']

        # 1. Spine distance and spine-boosted continentalness
        nx, nz = to_bounds_space(x, z, template)
        spine = get_spine_info(nx, nz, template)
        continentalness = self._spine_first_continentalness(x, z, spine.distance)

        # 2. Bottomless ocean beyond the shelf edge
        if spine.distance > template.shelf_edge:
            return 0.0

        # 3. Continental shelf drop
        shallow_floor = bands['shallow_ocean_floor']
        if spine.distance > template.max_land_extent and continentalness < land_threshold:
            progress = (spine.distance - template.max_land_extent) / shelf['shelf_width_norm']
            return shallow_floor - progress ** shelf['drop_curve_exponent'] * shallow_floor

        # 4. Inner ocean and coastal ramp
        if continentalness < deep_threshold:
            return shallow_floor + self._base_terrain_noise(x, z) * DEFAULTS.SOFT_FLOOR_OFFSET
        if continentalness < land_threshold:
            t = (continentalness - deep_threshold) / (land_threshold - deep_threshold)
            return (shallow_floor + t * (self.sea_level - shallow_floor)
                    + self._base_terrain_noise(x, z) * DEFAULTS.SOFT_FLOOR_NOISE * (1.0 - t))

        # 5. Land: biome band, then headroom-limited spine boost
        height = self._land_band_height(x, z, continentalness)

        sigma = sp['height_sigma'] / size
        influence = math.exp(-(spine.distance * spine.distance) / (2.0 * sigma * sigma))
        if influence > DEFAULTS.SPINE_MIN_INFLUENCE:
            height += spine.elevation * influence * sp['height_boost_strength'] * (bands['peak'] - height)
            if influence > DEFAULTS.SPINE_RIDGE_INFLUENCE:
                ridge = ridged_noise_2d(x, z, 3, 0.015, 0.5, 2.0, self.seeds['ridge'])
                height += ridge * DEFAULTS.SPINE_RIDGE_WEIGHT * influence

        boost = self._spine_boost_at(x, z)
        if boost > 0:
            height += boost * (bands['peak'] - height) * DEFAULTS.LEGACY_SPINE_BOOST_WEIGHT

        # 6. Drainage toward the coast
        height -= spine.distance * size * sp['drainage_bias_strength']

        # 7. Soft floor just above sea level
        floor_level = self.sea_level + DEFAULTS.SOFT_FLOOR_OFFSET
        if height < floor_level:
            height = floor_level + octave_noise_2d(x, z, 2, 0.05, self.seeds['floor']) * DEFAULTS.SOFT_FLOOR_NOISE

        # 8. Rivers
        if carve_rivers:
            height = self._carve_rivers(x, z, height)

        # 9. World edge falloff
        edge = min(nx, nz, 1.0 - nx, 1.0 - nz)
        if edge < DEFAULTS.WORLD_EDGE_FALLOFF:
            height = bands['deep_ocean_floor'] + max(0.0, edge) / DEFAULTS.WORLD_EDGE_FALLOFF * (height - bands['deep_ocean_floor'])

        return clamp(height, 0.0, 1.0)

    def _height_legacy(self, x: float, z: float, carve_rivers: bool) -> float:
        bands = DEFAULTS.HEIGHT_BANDS
        mods = self._modifiers(x, z)

        # 1. Template ocean
        if mods.continentalness_multiplier < DEFAULTS.LEGACY_OCEAN_MULTIPLIER:
            depth = mods.continentalness_multiplier / DEFAULTS.LEGACY_OCEAN_MULTIPLIER
            return bands['deep_ocean_floor'] + depth * (self.sea_level - bands['deep_ocean_floor'])

        # 2. Biome band from continentalness, not from the final height
        continentalness = self._base_continentalness(x, z) * mods.continentalness_multiplier
        height = self._land_band_height(x, z, continentalness)

        # 3. Headroom-limited boosts
        if mods.mountain_boost > 0:
            height += mods.mountain_boost * (bands['peak'] - height) * DEFAULTS.LEGACY_MOUNTAIN_BOOST_WEIGHT

        boost = self._spine_boost_at(x, z)
        if boost > 0:
            height += boost * (bands['peak'] - height) * DEFAULTS.LEGACY_SPINE_BOOST_WEIGHT

        if carve_rivers:
            height = self._carve_rivers(x, z, height)

        return clamp(height, 0.0, 1.0)

    def _height_continental(self, x: float, z: float, carve_rivers: bool) -> float:
        bands = DEFAULTS.HEIGHT_BANDS
        state = self.continent_state
        distance = state.get_signed_distance(x, z)

        # 1. Ocean: rises from the bottomless floor to sea level across the shallows
        if distance <= 0.0:
            t = 1.0 + distance / DEFAULTS.CONTINENTAL_SHELF_DISTANCE
            if t <= 0.0:
                return 0.0
            return self.sea_level * smoothstep(t)

        # 2. Land: envelope elevation plus amplitude-scaled terrain noise
        envelope = state.get_envelope(x, z)
        relief = self._base_terrain_noise(x, z) * envelope.amplitude_scale * DEFAULTS.CONTINENTAL_DETAIL_WEIGHT
        height = self.sea_level + envelope.base_elevation / self.max_height + relief

        # 3. Coastal taper back down to sea level
        taper = smoothstep(distance / DEFAULTS.CONTINENTAL_TAPER_DISTANCE)
        height = self.sea_level + (height - self.sea_level) * taper

        boost = self._spine_boost_at(x, z)
        if boost > 0:
            height += boost * (bands['peak'] - height) * DEFAULTS.LEGACY_SPINE_BOOST_WEIGHT

        if carve_rivers:
            height = self._carve_rivers(x, z, height)

        return clamp(height, 0.0, 1.0)

    def to_blocks(self, height_normalized: float) -> int:
        """Quantises a normalised height; 0 only for the bottomless ocean."""
        if height_normalized == 0.0:
            return 0
        return max(1, int(math.floor(height_normalized * self.max_height + 0.5)))

    def get_height_at(self, x: float, z: float) -> int:
        return self.to_blocks(self.get_height_normalized(x, z))

    # --- Biomes, water and coast ---

    def _biome_for_height(self, x: float, z: float, height_normalized: float, climate: ClimateSample) -> str:
        if height_normalized == 0.0:
            return 'deep_ocean'
        biome = classify_biome(height_normalized, climate.temperature, climate.humidity,
                               self.get_coast_proximity(x, z), self.sea_level)
        if is_water_biome(biome):
            return biome
        return apply_sub_biome_variation(biome, x, z, self.seed)

    def get_biome_at(self, x: float, z: float) -> str:
        height = self.get_height_normalized(x, z)
        return self._biome_for_height(x, z, height, self.get_climate(x, z, height))

    def _water_type_for_height(self, x: float, z: float, height_normalized: float) -> str:
        if height_normalized >= self.sea_level:
            return 'none'

        if self.strategy is GenerationStrategy.SPINE_FIRST:
            nx, nz = to_bounds_space(x, z, self.template)
            deep = get_spine_info(nx, nz, self.template).distance > self.template.shelf_edge
        elif self.strategy is GenerationStrategy.CONTINENTAL:
            deep = self.continent_state.get_coast_zone(x, z) is CoastZone.DEEP_OCEAN
        else:
            deep = height_normalized < self.sea_level - DEFAULTS.DEEP_WATER_DEPTH
        return 'deep' if deep else 'shallow'

    def get_water_type(self, x: float, z: float) -> str:
        """'deep', 'shallow' or 'none'; river beds below sea level count as shallow water."""
        return self._water_type_for_height(x, z, self.get_height_normalized(x, z))

    def _ocean_depth_for_height(self, x: float, z: float, height_normalized: float) -> Optional[int]:
        if height_normalized >= self.sea_level:
            return None
        if self.strategy is not GenerationStrategy.SPINE_FIRST:
            return self.to_blocks(height_normalized)

        template = self.template
        nx, nz = to_bounds_space(x, z, template)
        distance = get_spine_info(nx, nz, template).distance
        shallow_floor = self.to_blocks(DEFAULTS.HEIGHT_BANDS['shallow_ocean_floor'])
        sea = self.to_blocks(self.sea_level)

        if distance > template.shelf_edge:
            return 0
        if distance > template.max_land_extent:
            shelf = DEFAULTS.CONTINENTAL_SHELF
            progress = (distance - template.max_land_extent) / shelf['shelf_width_norm']
            return int(round(shallow_floor - progress ** shelf['drop_curve_exponent'] * shallow_floor))
        return int(round(shallow_floor + self.get_coast_proximity(x, z) * (sea - shallow_floor)))

    def get_ocean_depth(self, x: float, z: float) -> Optional[int]:
        """Ocean floor height in blocks, or None on land."""
        return self._ocean_depth_for_height(x, z, self.get_height_normalized(x, z))

    def get_signed_coast_distance(self, x: float, z: float) -> float:
        """
        Signed distance to the coast in blocks (positive inland). Exact for the
        continental strategy; a proxy for the template strategies.
        """
        if self.strategy is GenerationStrategy.CONTINENTAL:
            return self.continent_state.get_signed_distance(x, z)

        if self.strategy is GenerationStrategy.SPINE_FIRST:
            nx, nz = to_bounds_space(x, z, self.template)
            distance = get_spine_info(nx, nz, self.template).distance
            return (self.template.max_land_extent - distance) * self.template.world_size

        _, _, from_center = get_normalized_position(x, z, self.template)
        return self.template.shape.radius - from_center

    def get_coast_zone(self, x: float, z: float) -> CoastZone:
        if self.strategy is GenerationStrategy.CONTINENTAL:
            return self.continent_state.get_coast_zone(x, z)
        return get_coast_zone(self.get_signed_coast_distance(x, z), self.settings['coast_zone_thresholds'])

    # --- Bundled queries ---

    def get_terrain_params(self, x: float, z: float) -> TerrainSample:
        """Every per-point output, computing the height only once."""
        height = self.get_height_normalized(x, z)
        climate = self.get_climate(x, z, height)
        return TerrainSample(
            continental=self.sample_continentalness(x, z),
            effective_continental=self.get_effective_continentalness(x, z),
            temperature=climate.temperature,
            humidity=climate.humidity,
            erosion=self.sample_erosion(x, z),
            ridgeness=self.sample_ridgeness(x, z),
            biome=self._biome_for_height(x, z, height, climate),
            height_normalized=height,
            height=self.to_blocks(height),
            water_type=self._water_type_for_height(x, z, height),
            ocean_depth=self._ocean_depth_for_height(x, z, height),
            coast_zone=self.get_coast_zone(x, z),
        )

    def generate_region(self, x0: float, z0: float, width: int, depth: int, step: float = 1) -> dict:
        """
        Samples a rectangular region. Arrays are indexed [row, col] = [z, x],
        matching np.meshgrid over (x, z).
        """
        if width < 1 or depth < 1 or step <= 0:
            raise ValueError(f"Region must have positive size and step, got {width}x{depth} step {step}")

        height = np.zeros((depth, width), dtype=np.int16)
        height_normalized = np.zeros((depth, width), dtype=np.float32)
        biome_id = np.zeros((depth, width), dtype=np.uint8)
        temperature = np.zeros((depth, width), dtype=np.float32)
        humidity = np.zeros((depth, width), dtype=np.float32)

        for row in range(depth):
            z = z0 + row * step
            for col in range(width):
                x = x0 + col * step
                n = self.get_height_normalized(x, z)
                climate = self.get_climate(x, z, n)
                height_normalized[row, col] = n
                height[row, col] = self.to_blocks(n)
                biome_id[row, col] = BIOME_IDS[self._biome_for_height(x, z, n, climate)]
                temperature[row, col] = climate.temperature
                humidity[row, col] = climate.humidity

        return {
            'height': height,
            'height_normalized': height_normalized,
            'biome_id': biome_id,
            'temperature': temperature,
            'humidity': humidity,
        }
