# terrain_generator/biomes.py

"""
================================================================================
BIOME CLASSIFIER
================================================================================
Maps climate and elevation to one of a fixed set of biome names.

Water and beach are resolved first from the actual elevation and the coast
proximity signal; only then is the 3x3x3 climate table consulted. A final
noise-driven pass swaps some parent biomes for a sub-biome variant to break up
uniform regions.

Data Contract:
---------------
- Inputs: temperature, humidity, elevation and coast proximity, all in [0, 1].
- Outputs: Biome name strings drawn from BIOMES.
- Side Effects: None.
- Invariants: Every function returns a key of BIOMES. BIOME_IDS is stable and
  is the integer encoding used by bulk arrays and colour maps.
================================================================================
"""

from typing import NamedTuple

from . import config as DEFAULTS
from .noise import octave_noise_2d

class BiomeInfo(NamedTuple):
    base_height: float    # Fraction of max height
    height_scale: float   # Vertical variation as a fraction of max height
    surface: str          # Top block
    subsurface: str       # 1-3 blocks below the surface

BIOMES = {
    # Water
    'deep_ocean': BiomeInfo(0.00, 0.00, 'sand', 'sand'),
    'ocean': BiomeInfo(0.02, 0.02, 'sand', 'sand'),
    'shallow_ocean': BiomeInfo(0.07, 0.03, 'sand', 'sand'),
    'beach': BiomeInfo(0.10, 0.02, 'sand', 'sand'),

    # Temperate
    'plains': BiomeInfo(0.13, 0.10, 'grass', 'dirt'),
    'savanna': BiomeInfo(0.13, 0.06, 'grass', 'dirt'),
    'taiga': BiomeInfo(0.14, 0.08, 'grass', 'dirt'),
    'meadow': BiomeInfo(0.11, 0.05, 'grass', 'dirt'),

    # Forest
    'jungle': BiomeInfo(0.16, 0.13, 'forest_floor', 'dirt'),
    'rainforest': BiomeInfo(0.17, 0.14, 'forest_floor', 'dirt'),
    'swamp': BiomeInfo(0.10, 0.05, 'forest_floor', 'dirt'),
    'deciduous_forest': BiomeInfo(0.22, 0.16, 'forest_floor', 'dirt'),
    'autumn_forest': BiomeInfo(0.16, 0.11, 'forest_floor', 'dirt'),

    # Dry
    'desert': BiomeInfo(0.11, 0.06, 'sand', 'sand'),
    'red_desert': BiomeInfo(0.13, 0.11, 'sand', 'sand'),
    'badlands': BiomeInfo(0.14, 0.19, 'sand', 'sand'),

    # Cold
    'snow': BiomeInfo(0.14, 0.08, 'ice', 'dirt'),
    'tundra': BiomeInfo(0.13, 0.05, 'ice', 'dirt'),
    'glacier': BiomeInfo(0.25, 0.29, 'ice', 'ice'),

    # Mountain
    'alpine': BiomeInfo(0.32, 0.24, 'ice', 'rock'),
    'mountains': BiomeInfo(0.29, 0.32, 'rock', 'rock'),
    'highlands': BiomeInfo(0.24, 0.19, 'rock', 'rock'),
    'volcanic': BiomeInfo(0.19, 0.29, 'rock', 'rock'),
}

BIOME_IDS = {name: i for i, name in enumerate(BIOMES)}
BIOME_NAMES = list(BIOMES)

WATER_BIOMES = frozenset(('deep_ocean', 'ocean', 'shallow_ocean'))

# Normalised [min, max] height range each land biome's terrain noise maps into.
BIOME_HEIGHT_BANDS = {
    'ocean': (0.00, 0.05),
    'shallow_ocean': (0.04, 0.09),
    'beach': (0.10, 0.18),

    'plains': (0.12, 0.35),
    'meadow': (0.11, 0.28),
    'savanna': (0.12, 0.32),
    'swamp': (0.10, 0.22),
    'desert': (0.11, 0.30),
    'tundra': (0.12, 0.28),

    'red_desert': (0.15, 0.42),
    'taiga': (0.15, 0.40),
    'jungle': (0.18, 0.48),
    'rainforest': (0.20, 0.52),
    'autumn_forest': (0.18, 0.42),
    'deciduous_forest': (0.22, 0.55),
    'snow': (0.15, 0.38),

    'badlands': (0.25, 0.65),
    'highlands': (0.30, 0.68),
    'volcanic': (0.28, 0.72),

    'alpine': (0.45, 0.88),
    'glacier': (0.40, 0.85),
    'mountains': (0.50, 1.00),
}
DEFAULT_HEIGHT_BAND = (0.15, 0.40)

# Parent biome -> (noise threshold, variant)
SUB_BIOMES = {
    'plains': (0.7, 'meadow'),
    'deciduous_forest': (0.75, 'autumn_forest'),
    'desert': (0.8, 'red_desert'),
    'jungle': (0.85, 'rainforest'),
}

# (temperature band, humidity band) -> biome per elevation band (low, mid, high)
CLIMATE_TABLE = {
    ('hot', 'dry'): ('desert', 'red_desert', 'badlands'),
    ('hot', 'moderate'): ('savanna', 'savanna', 'badlands'),
    ('hot', 'wet'): ('jungle', 'jungle', 'jungle'),
    ('temperate', 'dry'): ('meadow', 'plains', 'mountains'),
    ('temperate', 'moderate'): ('meadow', 'deciduous_forest', 'mountains'),
    ('temperate', 'wet'): ('swamp', 'autumn_forest', 'deciduous_forest'),
    ('cold', 'dry'): ('tundra', 'tundra', 'mountains'),
    ('cold', 'moderate'): ('glacier', 'taiga', 'glacier'),
    ('cold', 'wet'): ('glacier', 'taiga', 'glacier'),
}
ELEVATION_BANDS = ('low', 'mid', 'high')

def temperature_band(temperature: float) -> str:
    if temperature < 0.33:
        return 'cold'
    if temperature < 0.66:
        return 'temperate'
    return 'hot'

def humidity_band(humidity: float) -> str:
    if humidity < 0.33:
        return 'dry'
    if humidity < 0.66:
        return 'moderate'
    return 'wet'

def select_biome_from_climate(temp_band: str, humid_band: str, elev_band: str) -> str:
    row = CLIMATE_TABLE.get((temp_band, humid_band))
    if row is None or elev_band not in ELEVATION_BANDS:
        return 'plains'
    return row[ELEVATION_BANDS.index(elev_band)]

def classify_biome(elevation: float, temperature: float, humidity: float,
                   coast_proximity: float, sea_level: float = DEFAULTS.HEIGHT_BANDS['sea_level']) -> str:
    """
    Biome from the actual normalised elevation. Underwater points are ocean or
    shallow ocean by depth, low points near the coast are beach, and the rest
    go through the climate table with elevation bands at 0.30 / 0.55.
    """
    if elevation < sea_level:
        if sea_level - elevation > DEFAULTS.DEEP_WATER_DEPTH:
            return 'ocean'
        return 'shallow_ocean'

    if coast_proximity > DEFAULTS.BEACH_COAST_PROXIMITY and elevation < DEFAULTS.BEACH_MAX_ELEVATION:
        return 'beach'

    if elevation < 0.30:
        elev_band = 'low'
    elif elevation < 0.55:
        elev_band = 'mid'
    else:
        elev_band = 'high'

    return select_biome_from_climate(temperature_band(temperature), humidity_band(humidity), elev_band)

def land_biome_for_continentalness(temperature: float, humidity: float, continentalness: float) -> str:
    """Land biome with continentalness standing in for elevation (bands 0.45 / 0.70)."""
    if continentalness < 0.45:
        elev_band = 'low'
    elif continentalness < 0.70:
        elev_band = 'mid'
    else:
        elev_band = 'high'
    return select_biome_from_climate(temperature_band(temperature), humidity_band(humidity), elev_band)

def apply_sub_biome_variation(biome: str, x: float, z: float, seed: int) -> str:
    sub = SUB_BIOMES.get(biome)
    if sub is None:
        return biome

    threshold, variant = sub
    variation = octave_noise_2d(x, z, 2, 0.08, seed + DEFAULTS.SUB_BIOME_SEED_OFFSET)
    if variation > threshold:
        return variant
    return biome

def get_height_band(biome: str):
    return BIOME_HEIGHT_BANDS.get(biome, DEFAULT_HEIGHT_BAND)

def is_water_biome(name: str) -> bool:
    return name in WATER_BIOMES
