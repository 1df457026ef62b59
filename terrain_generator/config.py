# terrain_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the terrain
generator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC WORLD.
Instead, pass a configuration dictionary to the WorldGenerator instance.
================================================================================
"""

# --- Seeds ---
DEFAULT_SEED = 12345
DEFAULT_TEMPLATE = 'verdania'

# Integer salts used by the continental layer to derive independent sub-seeds
# from the world seed. Changing one never perturbs the others.
SHAPE_SEED_SALT = 111111
COAST_SEED_SALT = 222222
START_SEED_SALT = 333333
ENVELOPE_SEED_SALT = 444444
CLIMATE_SEED_SALT = 555555
# Sub-seeds are scaled into the positive signed 32-bit range.
SUB_SEED_SCALE = 0x7FFFFFFF

# Salt added to the world seed for sub-biome variation noise.
SUB_BIOME_SEED_OFFSET = 88888

# --- Noise Remapping ---
# Fixed input range of normalize_noise(). normalize_noise(0.06) is exactly 0.0
# and normalize_noise(0.45) is exactly 1.0.
NORMALIZE_NOISE_LOW = 0.06
NORMALIZE_NOISE_HIGH = 0.45

# The 32-bit hash is uniform on [0, 1), so multi-octave value noise centres on
# 0.5. This is the range the composition layer stretches to [0, 1].
NOISE_REMAP_RANGE = (0.25, 0.75)

# --- Continental Shape ---
DEFAULT_BASE_RADIUS = 2000.0
SDF_RESOLUTION = 256       # Coarse grid cells per side
# Minimum blocks per coarse cell. The cell grows with the base radius so the
# grid spans the largest possible silhouette (base * (1 + 0.22 * 1.75) + 15)
# plus BOUNDS_MARGIN; outside the grid the crude fallback is only valid offshore.
SDF_CELL_SIZE = 20.0
# Crude radius estimate used outside the coarse grid, as a fraction of its half-extent.
SDF_FALLBACK_RADIUS_FACTOR = 0.4

SILHOUETTE_OCTAVES = 3
SILHOUETTE_LOBES = 6           # Base angular frequency of the silhouette
SILHOUETTE_AMPLITUDE = 0.22    # Fraction of the base radius
SILHOUETTE_SAMPLE_RADIUS = 100.0
SILHOUETTE_OCTAVE_OFFSET = 1000.0
SILHOUETTE_SEED_STRIDE = 7777
SILHOUETTE_FREQUENCY = 0.01

COAST_DETAIL_OCTAVES = 5
COAST_DETAIL_FREQUENCY = 0.015
COAST_DETAIL_AMPLITUDE = 15.0  # Blocks

# Signed-distance thresholds (blocks) separating the five coast zones.
# Must be strictly decreasing.
COAST_ZONE_THRESHOLDS = {
    "deep_inland": 100.0,
    "coastal_taper": 50.0,
    "beach": 0.0,
    "shallow": -30.0,
}

# Two-tier query margins. Both must exceed COAST_DETAIL_AMPLITUDE so the coarse
# early-out never disagrees with the detailed coastline.
COARSE_INLAND_MARGIN = 120.0
COARSE_OCEAN_MARGIN = -50.0

DETAIL_CACHE_SIZE = 10000
BOUNDS_MARGIN = 100.0

# Player spawn: inland offset = base + hash * range (blocks).
START_INLAND_BASE = 30.0
START_INLAND_RANGE = 15.0

# --- Elevation Envelope ---
MAX_HEIGHT = 63                 # Blocks
ENVELOPE_MAX_RADIUS = 1.2       # Normalised radius clamp (slight extrapolation)
ENVELOPE_MAX_BASE_ELEVATION = 40.0
ENVELOPE_AMPLITUDE_RANGE = (0.05, 2.0)
ANGULAR_MODULATION_RANGE = (0.1, 2.0)
PRESET_JITTER_SPAN = 0.2        # Full width; values move at most +/-10%

# --- Climate Geography ---
CLIMATE_RAW_WEIGHT = 0.4        # 40% raw noise
CLIMATE_TARGET_WEIGHT = 0.6     # 60% climate target
CLIMATE_INLAND_FALLOFF = 0.4    # Normalised distance over which coastal moderation fades
ELEVATION_DRYING_START = 0.4
ELEVATION_DRYING_WIDTH = 0.4
ELEVATION_DRYING_STRENGTH = 0.2

# --- Height Bands (Normalized 0.0 to 1.0) ---
HEIGHT_BANDS = {
    "deep_ocean_floor": 0.0,
    "shallow_ocean_floor": 0.02,
    "sea_level": 0.10,
    "lowland": 0.25,
    "midland": 0.45,
    "highland": 0.65,
    "mountain": 0.85,
    "peak": 1.0,
}

# Water deeper than this below sea level is classified as open ocean.
DEEP_WATER_DEPTH = 0.05
BEACH_COAST_PROXIMITY = 0.7
BEACH_MAX_ELEVATION = 0.15

# --- Spine Influence (spine-first templates) ---
SPINE_INFLUENCE = {
    "continent_sigma": 200.0,          # Blocks
    "continent_boost_strength": 0.4,
    "height_sigma": 200.0,             # Blocks
    "height_boost_strength": 0.4,
    "drainage_bias_strength": 0.0001,  # Height per block of spine distance
}
SPINE_MIN_INFLUENCE = 0.01
SPINE_RIDGE_INFLUENCE = 0.3
SPINE_RIDGE_WEIGHT = 0.12

CONTINENT_THRESHOLDS = {
    "deep_ocean": 0.15,
    "land": 0.30,
}
OCEAN_THRESHOLDS = {
    "deep": 0.10,
    "shallow": 0.25,
}

CONTINENTAL_SHELF = {
    "shelf_width_norm": 0.025,
    "drop_curve_exponent": 2.0,
}

WORLD_EDGE_FALLOFF = 0.08       # Normalised distance from the world edge
SOFT_FLOOR_OFFSET = 0.02        # Above sea level
SOFT_FLOOR_NOISE = 0.03

# --- Legacy Composition ---
LEGACY_OCEAN_MULTIPLIER = 0.3
LEGACY_MOUNTAIN_BOOST_WEIGHT = 0.5
LEGACY_SPINE_BOOST_WEIGHT = 0.6

# --- River Carving ---
RIVER_BED_HEIGHT = 0.08
RIVER_CARVE_STRENGTH = 0.8

# --- Coast Proximity ---
COAST_SAMPLE_DISTANCE = 16      # Blocks
COAST_GRADIENT_SCALE = 100.0

# --- Island Perturbation ---
ISLAND_BAND = (0.12, 0.35)
ISLAND_STRENGTH = 0.15

# --- Noise Layers ---
# Frequencies are in cycles per block.
WORLD_PARAMS = {
    "continental": {"frequency": 0.002, "octaves": 4, "warp_strength": 30.0},
    "temperature": {"frequency": 0.0015, "octaves": 2},
    "humidity": {"frequency": 0.0012, "octaves": 2},
    "erosion": {"frequency": 0.015, "octaves": 2},
    "ridgeness": {"frequency": 0.012, "octaves": 4, "persistence": 0.5, "lacunarity": 2.0},
    "islands": {"frequency": 0.015, "octaves": 3},
}

BASE_TERRAIN_NOISE = {
    "warp_strength": 2.5,
    "warp_frequency": 0.015,
    "height_octaves": 5,
    "height_frequency": 0.03,
    "detail_octaves": 2,
    "detail_frequency": 0.12,
    "detail_weight": 0.15,
}

# --- Continental Strategy ---
# Signed distance (blocks) over which land rises from sea level to full height.
CONTINENTAL_TAPER_DISTANCE = 50.0
# Signed distance (blocks) over which the sea floor drops to the deep floor.
CONTINENTAL_SHELF_DISTANCE = 30.0
CONTINENTAL_DETAIL_WEIGHT = 0.25

# --- World Bounds ---
DEFAULT_WORLD_BOUNDS = (-2000.0, 2000.0)

# --- Feature Indices ---
RIVER_CELL_SIZE = 128
SPINE_CELL_SIZE = 256
FEATURE_CELL_SIZE = 256
RIVER_DEFAULT_WIDTH = 2.0
RIVER_BLEND_FACTOR = 1.5        # Influence reaches width * 1.5 from the centreline
SPINE_FALLOFF_WIDTH = 150.0     # Gaussian sigma in blocks
SPINE_MAX_INFLUENCE_RADIUS = 500.0
SPINE_MIN_PROMINENCE = 0.2

# --- Baking & Previews ---
CHUNK_RESOLUTION = 128          # Pixels on one side of a baked tile
BAKE_STEP = 4                   # Blocks per pixel
BAKE_OUTPUT_DIR = "baked_worlds"
BAKE_VIEW_MODES = ("biome", "height", "temperature", "humidity")
