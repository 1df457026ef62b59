"""
End-to-end test: bake a tiny world, then probe it against live queries.
"""

import json

import numpy as np

from bake_world import bake_world, get_bake_extent
from fidelity_probe import probe_points_for_chunk, run_full_probe


def _write_config(tmp_path, **params):
    config = {
        'world_generation_parameters': dict(seed=3, template='simple', chunk_resolution=8, bake_step=250, **params),
        'output_dir': str(tmp_path / "out"),
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config))
    return path


def test_bake_extent_for_template_worlds(make_generator):
    gen = make_generator(seed=3, template='simple')
    assert get_bake_extent(gen) == (-2000.0, -2000.0, 4000.0)


def test_probe_points_cover_corners_and_centre():
    points = probe_points_for_chunk(8)
    assert (0, 0) in points and (7, 7) in points and (4, 4) in points


def test_bake_then_probe(tmp_path):
    config_path = _write_config(tmp_path)
    bake_dir = bake_world(str(config_path), workers=1)
    assert bake_dir is not None

    with open(f"{bake_dir}/manifest.json") as f:
        manifest = json.load(f)
    assert manifest['world_dimensions_chunks'] == [2, 2]
    assert set(manifest['chunk_map']) == {'biome', 'height', 'temperature', 'humidity'}
    assert len(manifest['chunk_map']['biome']) == 2

    heightmap = np.load(f"{bake_dir}/heightmap.npy")
    assert heightmap.shape == (16, 16)
    assert heightmap.min() >= 0

    assert run_full_probe(bake_dir) is True


def test_bake_with_missing_config(tmp_path):
    assert bake_world(str(tmp_path / "missing.json"), workers=1) is None


def test_probe_on_missing_bake(tmp_path):
    assert run_full_probe(str(tmp_path / "nothing")) is False
