# fidelity_probe.py

"""
================================================================================
BAKE FIDELITY PROBE
================================================================================
Reloads a baked world's heightmap and manifest, rebuilds the WorldGenerator
from the parameters stored in the manifest, and re-queries a handful of probe
points per tile through the live point queries. Any height that differs from
the baked value is a FAIL.

Usage:
    python fidelity_probe.py --bake-dir baked_worlds/seed_12345_verdania
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import numpy as np

from terrain_generator.generator import WorldGenerator
from terrain_generator.features import build_river_index, build_spine_index, load_features

def probe_points_for_chunk(chunk_res: int):
    """Corners and centre of a tile, in local pixels."""
    last = chunk_res - 1
    return [(0, 0), (last, 0), (0, last), (last, last), (chunk_res // 2, chunk_res // 2)]

def run_probe_on_chunk(logger, world_gen, heightmap, manifest, target_cx, target_cz) -> bool:
    """Compares baked heights with live queries for one tile."""
    logger.info(f"--- Probing Tile ({target_cx}, {target_cz}) ---")

    chunk_res = manifest['chunk_resolution_pixels']
    step = manifest['bake_step']
    origin_x, origin_z = manifest['origin']

    chunk_passed = True
    for px, pz in probe_points_for_chunk(chunk_res):
        row = target_cz * chunk_res + pz
        col = target_cx * chunk_res + px
        baked = int(heightmap[row, col])

        world_x = origin_x + col * step
        world_z = origin_z + row * step
        live = world_gen.get_height_at(world_x, world_z)

        result = "PASS" if baked == live else "FAIL"
        if result == "FAIL":
            chunk_passed = False

        logger.info(f"  - Probing ({world_x:.0f}, {world_z:.0f}): Baked={baked}, Live={live} -> {result}")

    return chunk_passed

def run_full_probe(bake_dir: str) -> bool:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s', stream=sys.stdout)
    logger = logging.getLogger("FidelityProbe")

    # --- 1. Load Baked World Manifest & Heightmap ---
    manifest_path = os.path.join(bake_dir, "manifest.json")
    logger.info(f"Loading manifest from '{manifest_path}'...")
    try:
        with open(manifest_path, 'r') as f:
            manifest = json.load(f)
        heightmap = np.load(os.path.join(bake_dir, "heightmap.npy"))
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Could not load the bake in '{bake_dir}'. Run bake_world.py first. ({e})")
        return False

    # --- 2. Rebuild the generator from the stored parameters ---
    feature_files = manifest.get('feature_files', {})
    rivers_path = feature_files.get('rivers')
    spines_path = feature_files.get('spines')
    river_index = build_river_index(load_features(rivers_path)) if rivers_path else None
    spine_index = build_spine_index(load_features(spines_path)) if spines_path else None

    world_gen = WorldGenerator(config=manifest['world_generation_parameters'], logger=logger,
                               river_index=river_index, spine_index=spine_index)

    # --- 3. Probe a set of tiles ---
    width, depth = manifest['world_dimensions_chunks']
    chunks_to_probe = sorted({(0, 0), (width - 1, depth - 1), (width // 2, depth // 2)})

    all_probes_passed = True
    for cx, cz in chunks_to_probe:
        if not run_probe_on_chunk(logger, world_gen, heightmap, manifest, cx, cz):
            all_probes_passed = False

    logger.info("--- Full Probe Complete ---")
    if all_probes_passed:
        logger.info("SUCCESS: All tested tiles are faithful to the live generator.")
    else:
        logger.error("FAILURE: Mismatch detected in one or more tiles.")
    return all_probes_passed

if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Compares a baked world against live point queries.")
    parser.add_argument("--bake-dir", type=str, required=True, help="Directory written by bake_world.py.")
    args = parser.parse_args()

    sys.exit(0 if run_full_probe(args.bake_dir) else 1)
