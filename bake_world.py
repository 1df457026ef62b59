# bake_world.py

"""
================================================================================
OFFLINE WORLD BAKER SCRIPT
================================================================================
This script is a command-line tool for pre-computing a world's surface to a
directory of tile images and a full-resolution heightmap ("baking"). Tiles are
rendered per view mode (biome, height, temperature, humidity), deduplicated by
content hash, and indexed by a manifest.

Usage:
    python bake_world.py --config path/to/your/config.json
                         [--rivers rivers.json] [--spines spines.json]
================================================================================
"""
import os
import sys
import json
import math
import logging
import argparse
import time
import hashlib
import collections
import multiprocessing
import numpy as np
from PIL import Image
from tqdm import tqdm

from terrain_generator.generator import WorldGenerator
from terrain_generator.features import build_river_index, build_spine_index, load_features
from terrain_generator import color_maps
from terrain_generator import config as DEFAULTS

# --- Helper for Tile Compression ---
def save_chunk_surface(color_array: np.ndarray, directory: str, file_hash: str) -> str:
    """
    Saves a tile using a tiered, lossless compression strategy with Pillow.
    """
    os.makedirs(directory, exist_ok=True)
    file_path = os.path.join(directory, f"{file_hash}.png")

    # Colour arrays are (width, height, channels); Pillow wants (height, width, channels).
    img_data = np.ascontiguousarray(np.transpose(color_array, (1, 0, 2)))

    # Tier 1: perfectly uniform colour
    if (img_data == img_data[0, 0]).all():
        img = Image.new('RGB', (1, 1), tuple(int(c) for c in img_data[0, 0]))
        img.save(file_path, 'PNG')
        return 'uniform'

    img = Image.fromarray(img_data, 'RGB')

    # Tier 2: few enough colours for a palette
    colors = img.getcolors(256)
    if colors:
        img = img.quantize(colors=256)
        img.save(file_path, 'PNG')
        return 'palettized'

    # Tier 3: full RGB
    img.save(file_path, 'PNG')
    return 'full'

def get_bake_extent(generator: WorldGenerator):
    """(min_x, min_z, size) of the square area to bake, in blocks."""
    if generator.continent_state is not None:
        bounds = generator.continent_state.get_bounds()
        return bounds.min_x, bounds.min_z, bounds.max_x - bounds.min_x
    lo, hi = generator.template.world_bounds
    return lo, lo, hi - lo

def build_indices(rivers_path: str = None, spines_path: str = None):
    river_index = build_river_index(load_features(rivers_path)) if rivers_path else None
    spine_index = build_spine_index(load_features(spines_path)) if spines_path else None
    return river_index, spine_index

# --- Global variables for worker processes ---
worker_generator = None
worker_luts = {}
worker_chunk_dirs = {}
worker_view_modes = []
worker_chunk_res = 0
worker_step = 0
worker_origin = (0.0, 0.0)

def init_worker(world_params, feature_paths, luts, chunk_dirs, view_modes, chunk_res, step, origin):
    """Builds one WorldGenerator per worker so each owns its own caches."""
    global worker_generator, worker_luts, worker_chunk_dirs, worker_view_modes
    global worker_chunk_res, worker_step, worker_origin

    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    river_index, spine_index = build_indices(*feature_paths)
    worker_generator = WorldGenerator(config=world_params, logger=worker_logger,
                                      river_index=river_index, spine_index=spine_index)
    worker_luts = luts
    worker_chunk_dirs = chunk_dirs
    worker_view_modes = view_modes
    worker_chunk_res = chunk_res
    worker_step = step
    worker_origin = origin

def process_chunk(coords):
    """
    Generates and SAVES a single tile. Returns the hashes and the tile's
    heights so the main process can assemble the full heightmap.
    """
    cx, cz = coords
    span = worker_chunk_res * worker_step
    x0 = worker_origin[0] + cx * span
    z0 = worker_origin[1] + cz * span

    region = worker_generator.generate_region(x0, z0, worker_chunk_res, worker_chunk_res, worker_step)

    chunk_results = {'cx': cx, 'cz': cz, 'hashes': {}, 'compression_types': {}, 'height': region['height']}

    for mode in worker_view_modes:
        if mode == "biome":
            color_array = color_maps.get_biome_color_array(region['biome_id'], worker_luts['biome'])
        elif mode == "temperature":
            color_array = color_maps.get_temperature_color_array(region['temperature'], worker_luts['temp'])
        elif mode == "humidity":
            color_array = color_maps.get_humidity_color_array(region['humidity'], worker_luts['humidity'])
        else:  # height
            color_array = color_maps.get_height_color_array(region['height_normalized'])

        file_hash = hashlib.md5(color_array.tobytes()).hexdigest()
        compression_type = save_chunk_surface(color_array, worker_chunk_dirs[mode], file_hash)

        chunk_results['hashes'][mode] = file_hash
        chunk_results['compression_types'][mode] = compression_type

    return chunk_results

# --- Main Baking Function ---
def bake_world(config_path: str, rivers_path: str = None, spines_path: str = None, workers: int = None):
    """
    Loads a configuration, generates every tile of the world, and saves the
    tiles, the heightmap and manifest.json to a structured output directory.
    """
    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Baker")

    # 2. --- Load Configuration ---
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
        river_index, spine_index = build_indices(rivers_path, spines_path)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse input file: {e}")
        return None

    world_params = config.get('world_generation_parameters', {})
    seed = world_params.get('seed', DEFAULTS.DEFAULT_SEED)

    # 3. --- Initialize a World Generator for main-process info ---
    main_generator = WorldGenerator(config=world_params, logger=logger,
                                    river_index=river_index, spine_index=spine_index)

    chunk_res = world_params.get('chunk_resolution', DEFAULTS.CHUNK_RESOLUTION)
    step = world_params.get('bake_step', DEFAULTS.BAKE_STEP)
    min_x, min_z, size = get_bake_extent(main_generator)
    chunks_per_side = max(1, math.ceil(size / (chunk_res * step)))
    total_chunks = chunks_per_side * chunks_per_side

    # 4. --- Prepare Output Directories ---
    output_root = config.get('output_dir', DEFAULTS.BAKE_OUTPUT_DIR)
    base_output_dir = os.path.join(output_root, f"seed_{seed}_{main_generator.template.name}")
    view_modes = list(DEFAULTS.BAKE_VIEW_MODES)
    chunk_dirs = {mode: os.path.join(base_output_dir, mode, "chunks") for mode in view_modes}

    # 5. --- Pre-compute Color LUTs ---
    logger.info("Pre-computing color lookup tables...")
    luts = {
        'biome': color_maps.create_biome_color_lut(),
        'temp': color_maps.create_temperature_lut(),
        'humidity': color_maps.create_humidity_lut(),
    }

    # 6. --- Main Baking Loop (Parallelized) ---
    logger.info(
        f"Starting parallel bake for a {chunks_per_side}x{chunks_per_side} world ({total_chunks} tiles, "
        f"{chunk_res}px at {step} blocks/px from ({min_x:.0f}, {min_z:.0f}))..."
    )

    manifest = {mode: np.empty((chunks_per_side, chunks_per_side), dtype=object) for mode in view_modes}
    saved_hashes = {mode: set() for mode in view_modes}
    compression_stats = {mode: collections.Counter() for mode in view_modes}
    heightmap = np.zeros((chunks_per_side * chunk_res, chunks_per_side * chunk_res), dtype=np.int16)

    start_time = time.perf_counter()
    tasks = [(cx, cz) for cz in range(chunks_per_side) for cx in range(chunks_per_side)]

    num_workers = workers or max(1, multiprocessing.cpu_count() - 1)
    logger.info(f"Using {num_workers} worker processes.")

    init_args = (world_params, (rivers_path, spines_path), luts, chunk_dirs, view_modes,
                 chunk_res, step, (min_x, min_z))
    with multiprocessing.Pool(processes=num_workers, initializer=init_worker, initargs=init_args) as pool:
        results_iterator = pool.imap_unordered(process_chunk, tasks)

        for result in tqdm(results_iterator, total=total_chunks, desc="Baking Tiles"):
            cx, cz = result['cx'], result['cz']
            heightmap[cz * chunk_res:(cz + 1) * chunk_res, cx * chunk_res:(cx + 1) * chunk_res] = result['height']

            for mode in view_modes:
                file_hash = result['hashes'][mode]
                manifest[mode][cz, cx] = file_hash

                if file_hash not in saved_hashes[mode]:
                    saved_hashes[mode].add(file_hash)
                    compression_stats[mode][result['compression_types'][mode]] += 1

    # --- Finalization ---
    np.save(os.path.join(base_output_dir, "heightmap.npy"), heightmap)

    final_manifest = {
        'seed': seed,
        'template': main_generator.template.name,
        'world_generation_parameters': world_params,
        'feature_files': {'rivers': rivers_path, 'spines': spines_path},
        'origin': [min_x, min_z],
        'bake_step': step,
        'chunk_resolution_pixels': chunk_res,
        'world_dimensions_chunks': [chunks_per_side, chunks_per_side],
        'chunk_map': {mode: manifest[mode].tolist() for mode in view_modes},
    }
    manifest_path = os.path.join(base_output_dir, "manifest.json")
    with open(manifest_path, 'w') as f:
        json.dump(final_manifest, f, indent=2)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    logger.info("--- Deduplication & Compression Stats ---")
    for mode in view_modes:
        stats = compression_stats[mode]
        logger.info(
            f"  - {mode.capitalize()}: {total_chunks} total -> {len(saved_hashes[mode])} unique tiles saved "
            f"({stats['uniform']} uniform, {stats['palettized']} palettized, {stats['full']} full)"
        )
    logger.info(f"Baked world and manifest.json saved to: {base_output_dir}")
    return base_output_dir


# --- Command-Line Interface ---
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Offline world baker for the terrain generator.")
    parser.add_argument("--config", type=str, required=True,
                        help="Path to the JSON configuration file for the world to be baked.")
    parser.add_argument("--rivers", type=str, default=None, help="Optional river feature file (JSON).")
    parser.add_argument("--spines", type=str, default=None, help="Optional spine feature file (JSON).")
    parser.add_argument("--workers", type=int, default=None, help="Worker process count.")
    args = parser.parse_args()

    bake_world(args.config, args.rivers, args.spines, args.workers)
