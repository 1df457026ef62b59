"""
Tests for the deterministic noise primitives and seed derivation.
"""

import numpy as np
import pytest

from terrain_generator.noise import (
    clamp, derive_seed, hash_2d, noise_2d, normalize_noise, octave_noise_2d,
    octave_noise_grid, remap_noise, ridged_noise_2d, smoothstep, sub_seed, warped_noise_2d
)


def test_hash_is_deterministic_and_in_unit_interval():
    for x, z in [(0, 0), (1, 0), (-5, 7), (123456, -98765)]:
        h = hash_2d(x, z, 42)
        assert 0.0 <= h < 1.0, f"hash_2d({x}, {z}) = {h} outside [0, 1)"
        assert h == hash_2d(x, z, 42)


def test_hash_depends_on_seed():
    assert hash_2d(3, 4, 1) != hash_2d(3, 4, 2)


def test_noise_matches_hash_at_lattice_points():
    # Smoothstep weights vanish at integer coordinates.
    for x, z in [(0, 0), (2, -3), (10, 11)]:
        assert noise_2d(float(x), float(z), 7) == pytest.approx(hash_2d(x, z, 7))


def test_single_octave_equals_scaled_noise():
    x, z, freq, seed = 37.25, -12.5, 0.05, 99
    assert octave_noise_2d(x, z, 1, freq, seed) == pytest.approx(noise_2d(x * freq, z * freq, seed))


def test_octave_noise_stays_in_unit_interval():
    rng = np.random.default_rng(0)
    for x, z in rng.uniform(-5000, 5000, size=(200, 2)):
        v = octave_noise_2d(x, z, 4, 0.05, 12345)
        assert 0.0 <= v <= 1.0, f"octave noise {v} at ({x}, {z})"


def test_zero_octaves_returns_zero():
    assert octave_noise_2d(1.5, 2.5, 0, 0.05, 1) == 0.0


def test_ridged_and_warped_noise_in_range():
    for x, z in [(0.0, 0.0), (311.7, -42.0), (-1800.0, 900.5)]:
        r = ridged_noise_2d(x, z, 4, 0.012, 0.5, 2.0, 5)
        w = warped_noise_2d(x, z, 4, 0.002, 30.0, 5)
        assert 0.0 <= r <= 1.0
        assert 0.0 <= w <= 1.0


def test_normalize_noise_endpoints_are_exact():
    assert normalize_noise(0.06) == 0.0
    assert normalize_noise(0.45) == 1.0
    assert normalize_noise(-1.0) == 0.0
    assert normalize_noise(2.0) == 1.0
    assert normalize_noise(0.255) == pytest.approx(0.5)


def test_smoothstep_and_clamp():
    assert smoothstep(-0.5) == 0.0
    assert smoothstep(1.5) == 1.0
    assert smoothstep(0.5) == pytest.approx(0.5)
    assert clamp(2.0, 0.0, 1.0) == 1.0
    assert clamp(-2.0, 0.0, 1.0) == 0.0
    assert remap_noise(0.5, 0.25, 0.75) == pytest.approx(0.5)
    assert remap_noise(0.9, 0.25, 0.75) == 1.0


def test_grid_matches_point_queries():
    xs, zs = np.meshgrid(np.arange(0.0, 40.0, 10.0), np.arange(-20.0, 20.0, 10.0))
    grid = octave_noise_grid(xs, zs, 3, 0.05, 77)
    assert grid.shape == xs.shape
    assert grid[1, 2] == pytest.approx(octave_noise_2d(xs[1, 2], zs[1, 2], 3, 0.05, 77))


def test_derived_seeds_are_stable_and_independent():
    a = derive_seed(12345, "temperature")
    assert a == derive_seed(12345, "temperature")
    assert a != derive_seed(12345, "humidity")
    assert a != derive_seed(12346, "temperature")
    assert 0 <= a <= 0xFFFFFFFF


def test_sub_seed_is_positive_signed_32_bit():
    for salt in (111111, 222222, 333333):
        s = sub_seed(12345, salt)
        assert 0 <= s < 2 ** 31
        assert s == sub_seed(12345, salt)
