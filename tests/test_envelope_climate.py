"""
Tests for the elevation envelope and the climate geography.
"""

import math

import pytest

from terrain_generator import config as DEFAULTS
from terrain_generator.climate import CLIMATE_PRESETS, evaluate_climate, generate_climate_params
from terrain_generator.envelope import (
    ENVELOPE_PRESETS, AngularLobe, ControlPoint, EnvelopeParams, angle_difference,
    compute_angular_modulation, evaluate_envelope, generate_envelope_params,
    interpolate_control_points, validate_control_points
)
from terrain_generator.templates import TemplateError


# --- Envelope ---

@pytest.mark.parametrize("preset", [None, 'default'] + sorted(ENVELOPE_PRESETS))
def test_envelope_samples_are_clamped(preset):
    params = generate_envelope_params(31337, 2000.0, preset, start_angle=1.0)
    for r in (0.0, 400.0, 1200.0, 2000.0, 5000.0):
        for i in range(12):
            theta = i * math.pi / 6.0
            sample = evaluate_envelope(math.cos(theta) * r, math.sin(theta) * r, params)
            assert 0.0 <= sample.base_elevation <= DEFAULTS.ENVELOPE_MAX_BASE_ELEVATION
            assert 0.05 <= sample.amplitude_scale <= 2.0
            assert 0.1 <= sample.modulation <= 2.0


def test_envelope_is_deterministic():
    a = generate_envelope_params(5, 2000.0, 'grausland')
    b = generate_envelope_params(5, 2000.0, 'grausland')
    assert a == b
    assert evaluate_envelope(100.0, 200.0, a) == evaluate_envelope(100.0, 200.0, b)


def test_preset_jitter_stays_within_ten_percent():
    assert DEFAULTS.PRESET_JITTER_SPAN / 2.0 == pytest.approx(0.1)
    preset = ENVELOPE_PRESETS['verdania']
    for seed in (1, 77, 4096):
        params = generate_envelope_params(seed, 2000.0, 'verdania')
        for original, jittered in zip(preset.control_points, params.control_points):
            assert jittered.r == original.r
            assert jittered.base_elevation == pytest.approx(original.base_elevation, rel=0.1, abs=1e-12)


def test_preset_spine_faces_away_from_start():
    params = generate_envelope_params(1, 2000.0, 'verdania', start_angle=0.5)
    assert params.spine_angle == pytest.approx(0.5 + math.pi)
    assert generate_envelope_params(1, 2000.0, 'petermark').spine_angle is None


def test_unknown_envelope_preset_raises():
    with pytest.raises(TemplateError):
        generate_envelope_params(1, 2000.0, 'atlantis')


@pytest.mark.parametrize("points", [
    [ControlPoint(0.0, 0.1, 0.5)],
    [ControlPoint(0.1, 0.1, 0.5), ControlPoint(1.0, 0.0, 0.2)],
    [ControlPoint(0.0, 0.1, 0.5), ControlPoint(0.9, 0.0, 0.2)],
    [ControlPoint(0.0, 0.1, 0.5), ControlPoint(0.5, 0.1, 0.5), ControlPoint(0.5, 0.1, 0.5), ControlPoint(1.0, 0.0, 0.2)],
])
def test_bad_control_points_are_rejected(points):
    with pytest.raises(TemplateError):
        validate_control_points(points)


def test_envelope_params_validate_lobe_count():
    points = [ControlPoint(0.0, 0.1, 0.5), ControlPoint(1.0, 0.0, 0.2)]
    with pytest.raises(TemplateError):
        EnvelopeParams(2000.0, points, [], None, 0.0, 0.0)
    with pytest.raises(TemplateError):
        EnvelopeParams(2000.0, points, [AngularLobe(i + 1, 0.1) for i in range(5)], None, 0.0, 0.0)


def test_interpolation_hits_control_points_exactly():
    points = [ControlPoint(0.0, 0.2, 1.0), ControlPoint(0.5, 0.1, 0.6), ControlPoint(1.0, 0.0, 0.2)]
    assert interpolate_control_points(0.0, points) == (0.2, 1.0)
    assert interpolate_control_points(0.5, points) == (0.1, 0.6)
    assert interpolate_control_points(1.5, points) == (0.0, 0.2)
    base, _ = interpolate_control_points(0.25, points)
    assert base == pytest.approx(0.15)


def test_angular_modulation_is_clamped():
    huge = [AngularLobe(1, 5.0)]
    assert compute_angular_modulation(math.pi / 2.0, huge, None, 0.0, 0.0) == 2.0
    assert compute_angular_modulation(-math.pi / 2.0, huge, None, 0.0, 0.0) == 0.1


def test_angle_difference_wraps():
    assert angle_difference(0.1, 2.0 * math.pi - 0.1) == pytest.approx(0.2)
    assert angle_difference(math.pi, 0.0) == pytest.approx(-math.pi)


# --- Climate ---

@pytest.mark.parametrize("preset", [None, 'default'] + sorted(CLIMATE_PRESETS))
def test_climate_stays_inside_preset_ranges(preset):
    params = generate_climate_params(2024, 2000.0, preset)
    for x, z in [(0.0, 0.0), (1500.0, 0.0), (-800.0, 1900.0), (3000.0, -3000.0)]:
        for raw in (0.0, 0.5, 1.0):
            for elevation in (0.1, 0.6, 1.0):
                sample = evaluate_climate(x, z, raw, raw, params, elevation)
                assert params.temp_range[0] <= sample.temperature <= params.temp_range[1]
                assert params.humidity_range[0] <= sample.humidity <= params.humidity_range[1]


def test_unknown_climate_preset_raises():
    with pytest.raises(TemplateError):
        generate_climate_params(1, 2000.0, 'atlantis')


def test_high_ground_is_drier():
    params = generate_climate_params(3, 2000.0, 'verdania')
    low = evaluate_climate(200.0, 100.0, 0.5, 0.5, params, 0.1)
    high = evaluate_climate(200.0, 100.0, 0.5, 0.5, params, 0.9)
    assert high.humidity <= low.humidity
    assert high.temperature == low.temperature


def test_wind_direction_comes_from_the_seed():
    a = generate_climate_params(10, 2000.0, 'verdania')
    b = generate_climate_params(10, 2000.0, 'grausland')
    assert a.wind_angle == b.wind_angle
    assert a.warm_angle == b.warm_angle
