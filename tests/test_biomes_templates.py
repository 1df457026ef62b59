"""
Tests for biome classification and continent templates.
"""

import dataclasses
import math

import pytest

from terrain_generator.biomes import (
    BIOME_HEIGHT_BANDS, BIOME_IDS, BIOME_NAMES, BIOMES, SUB_BIOMES, apply_sub_biome_variation,
    classify_biome, get_height_band, is_water_biome, land_biome_for_continentalness
)
from terrain_generator.templates import (
    ARCHIPELAGO, PANGAEA, SIMPLE, TEMPLATES, VERDANIA, VERDANIA_LEGACY, BayFeature,
    ContinentTemplate, GenerationStrategy, LandExtent, Region, SpinePolyline, TemplateError,
    apply_bay_carving, apply_shape_mask, get_normalized_position, get_region_membership,
    get_spine_info, get_template, get_template_for_seed, get_template_modifiers
)


# --- Biomes ---

def test_biome_ids_are_dense():
    assert sorted(BIOME_IDS.values()) == list(range(len(BIOMES)))
    assert BIOME_NAMES[BIOME_IDS['plains']] == 'plains'


def test_every_biome_has_a_height_band():
    for name in BIOMES:
        if name == 'deep_ocean':
            continue
        lo, hi = BIOME_HEIGHT_BANDS[name]
        assert 0.0 <= lo < hi <= 1.0, f"bad band for {name}"


def test_underwater_classification_by_depth():
    assert classify_biome(0.01, 0.5, 0.5, 0.0) == 'ocean'
    assert classify_biome(0.08, 0.5, 0.5, 0.0) == 'shallow_ocean'


def test_low_coastal_land_is_beach():
    assert classify_biome(0.12, 0.5, 0.5, 0.9) == 'beach'
    assert classify_biome(0.12, 0.5, 0.5, 0.1) != 'beach'


def test_classification_follows_climate_table():
    assert classify_biome(0.2, 0.9, 0.1, 0.0) == 'desert'
    assert classify_biome(0.4, 0.5, 0.5, 0.0) == 'deciduous_forest'
    assert classify_biome(0.7, 0.5, 0.5, 0.0) == 'mountains'
    assert classify_biome(0.4, 0.1, 0.5, 0.0) == 'taiga'


def test_classifier_never_returns_deep_ocean():
    for elevation in (0.0, 0.05, 0.1, 0.5, 1.0):
        for t in (0.0, 0.5, 1.0):
            assert classify_biome(elevation, t, t, 0.5) != 'deep_ocean'


def test_continentalness_bands():
    assert land_biome_for_continentalness(0.5, 0.5, 0.3) == 'meadow'
    assert land_biome_for_continentalness(0.5, 0.5, 0.5) == 'deciduous_forest'
    assert land_biome_for_continentalness(0.5, 0.5, 0.9) == 'mountains'


def test_sub_biome_variation_only_yields_parent_or_variant():
    for x in range(0, 2000, 37):
        result = apply_sub_biome_variation('plains', float(x), 11.0, 12345)
        assert result in ('plains', SUB_BIOMES['plains'][1])
    assert apply_sub_biome_variation('ocean', 1.0, 2.0, 12345) == 'ocean'


def test_water_helpers():
    assert is_water_biome('deep_ocean')
    assert not is_water_biome('beach')
    assert get_height_band('no_such_biome') == (0.15, 0.40)


# --- Templates ---

def test_presets_are_registered_and_valid():
    for name, template in TEMPLATES.items():
        assert template.name == name
        assert isinstance(template.strategy, GenerationStrategy)
    assert get_template('verdania') is VERDANIA
    assert VERDANIA_LEGACY.strategy is GenerationStrategy.LEGACY


def test_unknown_template_raises():
    with pytest.raises(TemplateError):
        get_template('atlantis')


def test_seed_picks_a_spine_first_archetype():
    assert get_template_for_seed(12345) is VERDANIA
    for seed in range(10):
        assert get_template_for_seed(seed).strategy is GenerationStrategy.SPINE_FIRST
    assert get_template_for_seed(-4) is get_template_for_seed(4)


def test_spine_first_template_needs_a_spine():
    with pytest.raises(TemplateError):
        ContinentTemplate(name='broken', strategy=GenerationStrategy.SPINE_FIRST)
    with pytest.raises(TemplateError):
        ContinentTemplate(name='broken', strategy=GenerationStrategy.SPINE_FIRST,
                          spine=SpinePolyline([(0.5, 0.5)]))


def test_strategy_must_be_explicit_enum():
    with pytest.raises(TemplateError):
        ContinentTemplate(name='broken', strategy='legacy')


def test_template_validation_rejects_bad_fields():
    with pytest.raises(TemplateError):
        ContinentTemplate(name='b', strategy=GenerationStrategy.LEGACY, world_bounds=(10.0, -10.0))
    with pytest.raises(TemplateError):
        ContinentTemplate(name='b', strategy=GenerationStrategy.LEGACY, bay=BayFeature('X', 0.3, 0.3))
    with pytest.raises(TemplateError):
        ContinentTemplate(name='b', strategy=GenerationStrategy.LEGACY, flatten_region=Region(0.8, 0.2))
    with pytest.raises(TemplateError):
        dataclasses.replace(VERDANIA, land_extent=LandExtent(0.0, 0.2))


def test_templates_are_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        VERDANIA.name = 'other'


def test_shelf_edge_lies_beyond_land_extent():
    for template in (VERDANIA, ARCHIPELAGO, PANGAEA):
        assert template.shelf_edge > template.max_land_extent


def test_spine_info_on_and_off_the_spine():
    on = get_spine_info(0.5, 0.25, VERDANIA)
    assert on.distance == pytest.approx(0.0)
    assert on.elevation == VERDANIA.spine.elevation
    assert math.isinf(get_spine_info(0.5, 0.5, SIMPLE).distance)


def test_normalized_position_centre():
    pos = get_normalized_position(0.0, 0.0, SIMPLE)
    assert (pos.nx, pos.nz, pos.distance_from_center) == (0.5, 0.5, 0.0)


def test_shape_mask_profile():
    assert apply_shape_mask(0.0, 2000.0, 0.3) == 1.0
    assert apply_shape_mask(2500.0, 2000.0, 0.3) == 0.0
    assert 0.0 < apply_shape_mask(1900.0, 2000.0, 0.3) < 1.0


def test_bay_carving_is_deepest_at_the_edge_centre():
    bay = BayFeature('N', 0.35, 0.45)
    assert apply_bay_carving(0.5, 0.0, bay) == pytest.approx(0.3)
    assert apply_bay_carving(0.5, 0.9, bay) == 1.0
    assert apply_bay_carving(0.5, 0.0, None) == 1.0


def test_region_membership_transition():
    region = Region(0.4, 0.6)
    assert get_region_membership(0.5, region) == 1.0
    assert get_region_membership(0.1, region) == 0.0
    assert get_region_membership(0.4, region) == pytest.approx(0.5)


def test_modifiers_are_bounded_and_oceans_get_no_mountains():
    for template in (SIMPLE, VERDANIA, VERDANIA_LEGACY):
        for x in range(-2000, 2001, 250):
            for z in range(-2000, 2001, 250):
                mods = get_template_modifiers(float(x), float(z), template)
                assert 0.0 <= mods.continentalness_multiplier <= 1.0
                assert 0.0 <= mods.elevation_multiplier <= 1.0
                if mods.continentalness_multiplier == 0.0:
                    assert mods.mountain_boost == 0.0
                    assert mods.ridge_weight == 0.0
