# terrain_generator/climate.py

"""
================================================================================
CLIMATE GEOGRAPHY
================================================================================
Spatially varying temperature and humidity in the continent's polar frame.
Four effects are combined with the raw climate noise:

1. Latitude: warm-to-cold gradient along a seeded "warm direction".
2. Windward: wet-to-dry gradient along a seeded wind direction.
3. Coastal moderation: temperature extremes damped near the coast.
4. Elevation drying: humidity drops above the treeline.

Data Contract:
---------------
- Inputs:
    - seed: The climate sub-seed of the world.
    - base_radius: Island radius in blocks.
    - preset: 'verdania', 'grausland', 'petermark', or None for seed-derived.
    - raw temperature / humidity in [0, 1], normalised elevation in [0, 1].
- Outputs: ClimateParams (immutable) and ClimateSample per position.
- Side Effects: None.
- Invariants: The 40% raw / 60% target blend is fixed, and the results are
  clamped to the declared temperature and humidity ranges.
================================================================================
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

from . import config as DEFAULTS
from .noise import clamp, hash_2d, smoothstep
from .templates import TemplateError

class ClimateSample(NamedTuple):
    temperature: float
    humidity: float

CLIMATE_PRESETS = {
    # Temperate, wide biome variety.
    'verdania': {
        'temp_offset': 0.0,
        'temp_range': (0.2, 0.8),
        'humidity_offset': 0.0,
        'humidity_range': (0.3, 0.7),
        'latitude_strength': 0.18,
        'windward_strength': 0.15,
        'coastal_strength': 0.10,
    },
    # Cold and wet on the windward coast, dry tundra in the lee.
    'grausland': {
        'temp_offset': -0.25,
        'temp_range': (0.0, 0.5),
        'humidity_offset': 0.1,
        'humidity_range': (0.4, 0.9),
        'latitude_strength': 0.15,
        'windward_strength': 0.18,
        'coastal_strength': 0.08,
    },
    # Hot and arid with warm coasts.
    'petermark': {
        'temp_offset': 0.2,
        'temp_range': (0.4, 1.0),
        'humidity_offset': -0.2,
        'humidity_range': (0.0, 0.5),
        'latitude_strength': 0.20,
        'windward_strength': 0.12,
        'coastal_strength': 0.12,
    },
}

@dataclass(frozen=True)
class ClimateParams:
    base_radius: float
    wind_angle: float
    warm_angle: float
    temp_offset: float
    temp_range: Tuple[float, float]
    humidity_offset: float
    humidity_range: Tuple[float, float]
    latitude_strength: float
    windward_strength: float
    coastal_strength: float

    @property
    def wind_dir(self) -> Tuple[float, float]:
        return math.cos(self.wind_angle), math.sin(self.wind_angle)

    @property
    def warm_dir(self) -> Tuple[float, float]:
        return math.cos(self.warm_angle), math.sin(self.warm_angle)

def generate_climate_params(seed: int, base_radius: float, preset: Optional[str] = None) -> ClimateParams:
    """Deterministic climate parameters; wind and warm directions always come from the seed."""
    wind_angle = hash_2d(0, 0, seed + 100) * 2.0 * math.pi
    warm_angle = hash_2d(0, 0, seed + 200) * 2.0 * math.pi

    if preset is not None and preset != 'default':
        if preset not in CLIMATE_PRESETS:
            raise TemplateError(f"Unknown climate preset '{preset}'. Available: {sorted(CLIMATE_PRESETS)}")
        return ClimateParams(base_radius, wind_angle, warm_angle, **CLIMATE_PRESETS[preset])

    return ClimateParams(
        base_radius=base_radius,
        wind_angle=wind_angle,
        warm_angle=warm_angle,
        temp_offset=(hash_2d(1, 0, seed + 300) - 0.5) * 0.3,
        temp_range=(hash_2d(2, 0, seed + 400) * 0.3, 0.7 + hash_2d(3, 0, seed + 500) * 0.3),
        humidity_offset=(hash_2d(4, 0, seed + 600) - 0.5) * 0.3,
        humidity_range=(hash_2d(5, 0, seed + 700) * 0.3, 0.7 + hash_2d(6, 0, seed + 800) * 0.3),
        latitude_strength=0.15 + hash_2d(7, 0, seed + 900) * 0.10,
        windward_strength=0.10 + hash_2d(8, 0, seed + 1000) * 0.10,
        coastal_strength=0.08 + hash_2d(9, 0, seed + 1100) * 0.06,
    )

def evaluate_climate(x: float, z: float, raw_temperature: float, raw_humidity: float,
                     params: ClimateParams, elevation: float) -> ClimateSample:
    """Applies the four geographic effects to raw climate noise at (x, z)."""
    dist = math.hypot(x, z)
    r_norm = min(dist / params.base_radius, 1.0)

    # Direction from the centre, zero within one block of it
    dir_x = dir_z = 0.0
    if dist > 1.0:
        dir_x = x / dist
        dir_z = z / dist

    raw_w = DEFAULTS.CLIMATE_RAW_WEIGHT
    target_w = DEFAULTS.CLIMATE_TARGET_WEIGHT

    # --- Temperature ---
    warm_x, warm_z = params.warm_dir
    latitude = dir_x * warm_x + dir_z * warm_z

    # 0 at the coast, 1 from CLIMATE_INLAND_FALLOFF inward
    inland = smoothstep((1.0 - r_norm) / DEFAULTS.CLIMATE_INLAND_FALLOFF)

    t_lo, t_hi = params.temp_range
    temp_median = (t_lo + t_hi) / 2.0
    temp_target = (temp_median
                   + latitude * params.latitude_strength
                   + (temp_median - (raw_temperature + params.temp_offset)) * params.coastal_strength * (1.0 - inland))

    temperature = raw_temperature * raw_w + temp_target * target_w + params.temp_offset * raw_w
    temperature = clamp(temperature, t_lo, t_hi)

    # --- Humidity ---
    wind_x, wind_z = params.wind_dir
    windward = dir_x * wind_x + dir_z * wind_z

    drying = -DEFAULTS.ELEVATION_DRYING_STRENGTH * smoothstep(
        (elevation - DEFAULTS.ELEVATION_DRYING_START) / DEFAULTS.ELEVATION_DRYING_WIDTH
    )

    h_lo, h_hi = params.humidity_range
    humid_target = (h_lo + h_hi) / 2.0 + windward * params.windward_strength + drying

    humidity = raw_humidity * raw_w + humid_target * target_w + params.humidity_offset * raw_w
    humidity = clamp(humidity, h_lo, h_hi)

    return ClimateSample(temperature, humidity)
