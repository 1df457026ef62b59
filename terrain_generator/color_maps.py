# terrain_generator/color_maps.py

"""
================================================================================
SHARED COLOR MAPPING UTILITIES
================================================================================
This module contains the color mapping constants and functions for converting
generated world data (biome IDs, heights, temperature, humidity) into RGB color
arrays.

It is a pure, stateless utility used by the offline bake tool and the fidelity
probe, so both always agree on the colour of a given value.

Data Contract:
---------------
- Inputs: numpy arrays indexed [row, col] = [z, x] as produced by
  WorldGenerator.generate_region.
- Outputs: uint8 arrays of shape (width, height, 3), i.e. transposed so the
  first index is x.
- Side Effects: None.
================================================================================
"""
import numpy as np

from .biomes import BIOME_NAMES

# --- Biome Colours (keyed by biome name, ordered by BIOME_IDS) ---
COLOR_MAP_BIOME = {
    "deep_ocean": (0, 0, 50),
    "ocean": (10, 20, 80),
    "shallow_ocean": (26, 102, 255),
    "beach": (240, 230, 140),
    "plains": (124, 189, 76),
    "savanna": (189, 178, 95),
    "taiga": (49, 94, 68),
    "meadow": (154, 205, 50),
    "jungle": (41, 122, 20),
    "rainforest": (0, 100, 0),
    "swamp": (76, 94, 56),
    "deciduous_forest": (34, 139, 34),
    "autumn_forest": (190, 110, 40),
    "desert": (237, 201, 120),
    "red_desert": (201, 110, 60),
    "badlands": (160, 82, 45),
    "snow": (250, 250, 250),
    "tundra": (190, 200, 190),
    "glacier": (210, 225, 240),
    "alpine": (200, 205, 215),
    "mountains": (112, 128, 144),
    "highlands": (139, 119, 101),
    "volcanic": (60, 40, 40),
}

COLOR_MAP_TEMPERATURE = {
    "coldest": (0, 0, 100),
    "cold": (0, 0, 255),
    "temperate": (255, 255, 0),
    "hot": (255, 0, 0),
    "hottest": (150, 0, 0)
}

# Normalised temperature stops between the colours above.
TEMP_LEVELS = {"cold": 0.33, "temperate": 0.5, "hot": 0.66}

COLOR_MAP_HUMIDITY = {
    "dry": (210, 180, 140),
    "wet": (70, 130, 180)
}

HUMIDITY_STEPS = 100  # Discrete humidity levels, for better tile deduplication

# --- Color Lookup Table (LUT) Generation ---
def create_biome_color_lut() -> np.ndarray:
    """Index is the biome ID, value is the RGB colour."""
    return np.array([COLOR_MAP_BIOME[name] for name in BIOME_NAMES], dtype=np.uint8)

def create_temperature_lut() -> np.ndarray:
    """Creates a 256-entry color LUT for normalised temperature."""
    t = np.linspace(0.0, 1.0, 256)[..., np.newaxis]
    stops = [0.0, TEMP_LEVELS["cold"], TEMP_LEVELS["temperate"], TEMP_LEVELS["hot"], 1.0]
    colors = [np.array(COLOR_MAP_TEMPERATURE[k], dtype=float)
              for k in ("coldest", "cold", "temperate", "hot", "hottest")]

    out = np.zeros((256, 3))
    for i in range(len(stops) - 1):
        lo, hi = stops[i], stops[i + 1]
        mask = ((t >= lo) & (t <= hi))[:, 0]
        f = (t[mask] - lo) / (hi - lo)
        out[mask] = (1 - f) * colors[i] + f * colors[i + 1]
    return out.astype(np.uint8)

def create_humidity_lut() -> np.ndarray:
    """Creates a 256-entry color LUT for normalised humidity."""
    t = np.linspace(0.0, 1.0, 256)[..., np.newaxis]
    colors = (1 - t) * np.array(COLOR_MAP_HUMIDITY["dry"]) + t * np.array(COLOR_MAP_HUMIDITY["wet"])
    return colors.astype(np.uint8)

# --- Color Array Generation ---
def get_biome_color_array(biome_ids: np.ndarray, biome_lut: np.ndarray) -> np.ndarray:
    """Converts a biome ID map into RGB through the LUT."""
    colors = biome_lut[biome_ids]
    return np.transpose(colors, (1, 0, 2))

def get_height_color_array(height_normalized: np.ndarray) -> np.ndarray:
    """Grayscale from normalised height [0, 1]."""
    gray_values = (np.clip(height_normalized, 0.0, 1.0) * 255).astype(np.uint8)
    colors = np.stack([gray_values] * 3, axis=-1)
    return np.transpose(colors, (1, 0, 2))

def get_climate_color_array(values: np.ndarray, lut: np.ndarray, steps: int = None) -> np.ndarray:
    """
    Maps a normalised climate field through a 256-entry LUT. With `steps`, the
    values are quantised first so neighbouring tiles deduplicate.
    """
    values = np.clip(values, 0.0, 1.0)
    if steps:
        values = np.round(values * steps) / steps
    indices = (values * 255).astype(np.uint8)
    colors = lut[indices]
    return np.transpose(colors, (1, 0, 2))

def get_temperature_color_array(temperature: np.ndarray, temp_lut: np.ndarray) -> np.ndarray:
    return get_climate_color_array(temperature, temp_lut)

def get_humidity_color_array(humidity: np.ndarray, humidity_lut: np.ndarray) -> np.ndarray:
    return get_climate_color_array(humidity, humidity_lut, HUMIDITY_STEPS)
