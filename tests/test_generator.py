"""
Tests for WorldGenerator: height composition per strategy, biomes, water,
river carving, spine boosts and region sampling.
"""

import dataclasses
import logging

import numpy as np
import pytest

from terrain_generator import config as DEFAULTS
from terrain_generator.biomes import BIOME_IDS, BIOMES
from terrain_generator.climate import CLIMATE_PRESETS
from terrain_generator.continent_shape import CoastZone
from terrain_generator.features import LinearFeature, SpineFeature, build_river_index, build_spine_index
from terrain_generator.generator import TerrainSample, WorldGenerator, apply_river_carving
from terrain_generator.templates import (
    ARCHIPELAGO, CONTINENTAL_DEFAULT, SIMPLE, VERDANIA, GenerationStrategy, TemplateError
)

# A point on Verdania's primary spine: normalised (0.5, 0.25).
VERDANIA_SPINE_POINT = (0.0, -1000.0)
# A world corner far from every Archipelago spine.
ARCHIPELAGO_CORNER = (-1990.0, -1990.0)


@pytest.fixture(scope="module")
def continental(make_generator):
    return make_generator(seed=12345, template='continental', base_radius=2000.0)


@pytest.fixture(scope="module")
def verdania(make_generator):
    return make_generator(seed=12345, template='verdania')


@pytest.fixture(scope="module")
def archipelago(make_generator):
    return make_generator(seed=12345, template='archipelago')


@pytest.fixture(scope="module")
def simple(make_generator):
    return make_generator(seed=12345, template='simple')


# --- Template resolution ---

def test_auto_template_is_chosen_from_the_seed(make_generator):
    gen = make_generator(seed=12345, template='auto')
    assert gen.template is VERDANIA
    assert gen.strategy is GenerationStrategy.SPINE_FIRST
    assert gen.continent_state is None


def test_template_instance_and_bounds_override(make_generator):
    gen = make_generator(seed=1, template=SIMPLE, world_bounds=(-1000.0, 1000.0))
    assert gen.template.name == 'simple'
    assert gen.template.world_bounds == (-1000.0, 1000.0)
    assert SIMPLE.world_bounds == DEFAULTS.DEFAULT_WORLD_BOUNDS


def test_unknown_template_raises(logger):
    with pytest.raises(TemplateError):
        WorldGenerator({'template': 'atlantis'}, logger)


def test_generators_do_not_share_state(continental, verdania):
    assert continental.continent_state is not None
    assert verdania.continent_state is None
    assert continental.strategy is GenerationStrategy.CONTINENTAL


# --- Determinism & bounds ---

def test_same_config_same_world(logger):
    a = WorldGenerator({'seed': 777, 'template': 'pangaea'}, logger)
    b = WorldGenerator({'seed': 777, 'template': 'pangaea'}, logger)
    for x, z in [(0.0, 0.0), (-640.0, 128.0), (1500.5, -1499.5)]:
        assert a.get_height_normalized(x, z) == b.get_height_normalized(x, z)
        assert a.get_biome_at(x, z) == b.get_biome_at(x, z)


def test_different_seeds_differ(make_generator):
    a = make_generator(seed=1, template='simple')
    b = make_generator(seed=2, template='simple')
    samples = [(float(x), float(z)) for x in range(-900, 901, 300) for z in range(-900, 901, 300)]
    assert any(a.get_height_normalized(x, z) != b.get_height_normalized(x, z) for x, z in samples)


@pytest.mark.parametrize("template", ['verdania', 'archipelago', 'pangaea', 'simple', 'verdania_legacy'])
def test_heights_and_biomes_are_valid(make_generator, template):
    gen = make_generator(seed=4321, template=template)
    for x in range(-2000, 2001, 500):
        for z in range(-2000, 2001, 500):
            n = gen.get_height_normalized(float(x), float(z))
            assert 0.0 <= n <= 1.0, f"{template}: height {n} at ({x}, {z})"
            assert 0 <= gen.get_height_at(float(x), float(z)) <= gen.max_height
            assert gen.get_biome_at(float(x), float(z)) in BIOMES


def test_continental_heights_and_biomes_are_valid(continental):
    for x in range(-2400, 2401, 600):
        for z in range(-2400, 2401, 600):
            n = continental.get_height_normalized(float(x), float(z))
            assert 0.0 <= n <= 1.0
            assert continental.get_biome_at(float(x), float(z)) in BIOMES


# --- Known locations ---

def test_continental_centre_is_inland(continental):
    sample = continental.get_terrain_params(0.0, 0.0)
    assert sample.coast_zone is CoastZone.DEEP_INLAND
    assert sample.height_normalized >= continental.sea_level
    assert sample.water_type == 'none'
    assert sample.ocean_depth is None
    assert sample.biome not in ('deep_ocean', 'ocean', 'shallow_ocean', 'beach')


def test_continental_open_sea_is_bottomless(continental):
    assert continental.get_height_normalized(3000.0, 0.0) == 0.0
    assert continental.get_height_at(3000.0, 0.0) == 0
    assert continental.get_water_type(3000.0, 0.0) == 'deep'
    assert continental.get_biome_at(3000.0, 0.0) == 'deep_ocean'


def test_beyond_the_shelf_edge_is_exactly_zero(archipelago):
    x, z = ARCHIPELAGO_CORNER
    assert archipelago.get_height_normalized(x, z) == 0.0
    assert archipelago.get_height_at(x, z) == 0
    assert archipelago.get_biome_at(x, z) == 'deep_ocean'
    assert archipelago.get_water_type(x, z) == 'deep'
    assert archipelago.get_ocean_depth(x, z) == 0
    assert archipelago.get_coast_zone(x, z) is CoastZone.DEEP_OCEAN


def test_spine_is_dry_land(verdania):
    x, z = VERDANIA_SPINE_POINT
    n = verdania.get_height_normalized(x, z)
    assert n > verdania.sea_level
    assert verdania.get_water_type(x, z) == 'none'
    assert verdania.get_ocean_depth(x, z) is None
    assert verdania.get_coast_zone(x, z) is CoastZone.DEEP_INLAND


def test_verdania_bay_is_open_water(verdania):
    # The bay centre is further from the C-shaped spine than the shelf edge.
    assert verdania.get_height_normalized(0.0, 0.0) == 0.0


def test_legacy_open_ocean(simple):
    x, z = -1990.0, -1990.0
    assert simple.get_height_normalized(x, z) == 0.0
    assert simple.get_water_type(x, z) == 'deep'
    assert simple.get_biome_at(x, z) == 'deep_ocean'


def test_shallow_water_below_sea_level(verdania, continental):
    x, z = VERDANIA_SPINE_POINT
    assert verdania._water_type_for_height(x, z, verdania.sea_level - 0.01) == 'shallow'
    assert continental._water_type_for_height(0.0, 0.0, continental.sea_level - 0.01) == 'shallow'
    assert verdania._water_type_for_height(x, z, verdania.sea_level) == 'none'


# --- Quantisation ---

def test_to_blocks(simple):
    assert simple.to_blocks(0.0) == 0
    assert simple.to_blocks(1e-6) == 1
    assert simple.to_blocks(0.5) == 32
    assert simple.to_blocks(1.0) == DEFAULTS.MAX_HEIGHT


# --- Climate ---

def test_template_climate_is_raw_noise(verdania):
    climate = verdania.get_climate(123.0, 456.0)
    assert climate.temperature == verdania.sample_temperature(123.0, 456.0)
    assert climate.humidity == verdania.sample_humidity(123.0, 456.0)


def test_continental_climate_respects_preset_ranges(continental):
    params = continental.continent_state.climate_params
    for x, z in [(0.0, 0.0), (1000.0, -500.0), (-1800.0, 300.0)]:
        climate = continental.get_climate(x, z)
        assert params.temp_range[0] <= climate.temperature <= params.temp_range[1]
        assert params.humidity_range[0] <= climate.humidity <= params.humidity_range[1]


def test_template_climate_preset_is_independent_of_envelope(make_generator):
    mixed = dataclasses.replace(CONTINENTAL_DEFAULT, climate_preset='petermark')
    gen = make_generator(seed=12345, template=mixed, base_radius=2000.0)
    state = gen.continent_state
    assert state.template_name == 'verdania'
    assert state.climate_params.temp_range == CLIMATE_PRESETS['petermark']['temp_range']
    assert state.climate_params.humidity_range == CLIMATE_PRESETS['petermark']['humidity_range']


# --- Rivers ---

def _influence_at(distance, width=8.0):
    river = LinearFeature('river', [(0.0, 0.0), (100.0, 0.0)], width=width)
    return river.get_influence(50.0, distance)


def test_river_carving_deepens_towards_the_centreline():
    h = 0.5
    carved = [apply_river_carving(h, _influence_at(d)) for d in (0.0, 1.0, 2.0, 3.0, 4.0)]
    assert carved == sorted(carved)
    assert carved[0] < h
    assert carved[-1] == h


def test_river_carving_never_digs_below_the_bed():
    bed = DEFAULTS.RIVER_BED_HEIGHT
    assert apply_river_carving(0.5, _influence_at(0.0)) >= bed
    assert apply_river_carving(0.05, _influence_at(0.0)) == 0.05


def test_river_carving_is_identity_outside_the_channel():
    assert apply_river_carving(0.4, _influence_at(5.0)) == 0.4


def test_rivers_carve_generated_terrain(logger):
    x, z = VERDANIA_SPINE_POINT
    river = LinearFeature('river', [(x - 200.0, z), (x + 200.0, z)], width=12.0)
    gen = WorldGenerator({'seed': 12345, 'template': 'verdania'}, logger,
                         river_index=build_river_index([river]))
    plain = WorldGenerator({'seed': 12345, 'template': 'verdania'}, logger)

    assert gen.get_height_for_river_gen(x, z) == plain.get_height_normalized(x, z)
    assert gen.get_height_normalized(x, z) < gen.get_height_for_river_gen(x, z)
    assert gen.get_height_normalized(x, z + 50.0) == plain.get_height_normalized(x, z + 50.0)


# --- Procedural spines ---

def test_spine_index_raises_terrain_with_headroom(logger):
    spine = SpineFeature([(-300.0, 0.0, 0.9, 0.8), (300.0, 0.0, 0.9, 0.8)])
    boosted = WorldGenerator({'seed': 12345, 'template': 'simple'}, logger,
                             spine_index=build_spine_index([spine]))
    plain = WorldGenerator({'seed': 12345, 'template': 'simple'}, logger)

    base = plain.get_height_normalized(0.0, 0.0)
    raised = boosted.get_height_normalized(0.0, 0.0)
    assert base < raised <= 1.0
    assert boosted.get_height_normalized(0.0, 1500.0) == plain.get_height_normalized(0.0, 1500.0)


# --- Bundles & regions ---

def test_terrain_params_agree_with_point_queries(verdania):
    for x, z in [VERDANIA_SPINE_POINT, (0.0, 0.0), (700.0, -300.0)]:
        sample = verdania.get_terrain_params(x, z)
        assert isinstance(sample, TerrainSample)
        assert sample.height == verdania.get_height_at(x, z)
        assert sample.biome == verdania.get_biome_at(x, z)
        assert sample.water_type == verdania.get_water_type(x, z)
        assert sample.ocean_depth == verdania.get_ocean_depth(x, z)
        assert 0.0 <= sample.effective_continental <= 1.0


def test_generate_region_matches_point_queries(verdania):
    x0, z0, step = -64.0, -1032.0, 16.0
    region = verdania.generate_region(x0, z0, 4, 3, step)

    assert region['height'].shape == (3, 4)
    assert region['height'].dtype == np.int16
    assert region['biome_id'].dtype == np.uint8
    assert region['temperature'].shape == (3, 4)

    for row in range(3):
        for col in range(4):
            x, z = x0 + col * step, z0 + row * step
            assert region['height'][row, col] == verdania.get_height_at(x, z)
            assert region['biome_id'][row, col] == BIOME_IDS[verdania.get_biome_at(x, z)]


@pytest.mark.parametrize("width,depth,step", [(0, 4, 1), (4, 0, 1), (4, 4, 0)])
def test_generate_region_rejects_empty_regions(verdania, width, depth, step):
    with pytest.raises(ValueError):
        verdania.generate_region(0.0, 0.0, width, depth, step)


def test_generator_logs_initialisation(caplog):
    logger = logging.getLogger("TerrainTests.init")
    with caplog.at_level(logging.INFO, logger="TerrainTests.init"):
        WorldGenerator({'seed': 5, 'template': 'simple'}, logger)
    assert "WorldGenerator initialized with seed: 5" in caplog.text
