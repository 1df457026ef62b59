# terrain_generator/envelope.py

"""
================================================================================
ELEVATION ENVELOPE
================================================================================
Modulates terrain height in polar coordinates (r, theta) around the continent
centre with two outputs:

    base_elevation(r, theta)  - raises the terrain floor (blocks)
    amplitude_scale(r, theta) - multiplies the terrain noise amplitude

Plateaus are high base + low amplitude, mountain ranges medium base + high
amplitude, coastal lowlands low base + low amplitude.

Data Contract:
---------------
- Inputs:
    - seed: The envelope sub-seed of the world.
    - base_radius: Island radius in blocks.
    - preset: 'verdania', 'grausland', 'petermark', or None for seed-derived.
    - start_angle: Player start angle; a preset spine sits opposite it.
- Outputs:
    - EnvelopeParams (immutable) and EnvelopeSample per position.
- Side Effects: None.
- Invariants: 0 <= base_elevation <= ENVELOPE_MAX_BASE_ELEVATION,
  amplitude_scale in ENVELOPE_AMPLITUDE_RANGE, angular modulation in
  ANGULAR_MODULATION_RANGE. Control point radii strictly increase from 0 to 1.
================================================================================
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

from . import config as DEFAULTS
from .noise import clamp, hash_2d
from .templates import TemplateError

class ControlPoint(NamedTuple):
    r: float
    base_elevation: float
    amplitude: float

class AngularLobe(NamedTuple):
    frequency: float
    amplitude: float
    phase: float = 0.0

class EnvelopeSample(NamedTuple):
    base_elevation: float
    amplitude_scale: float
    modulation: float

@dataclass(frozen=True)
class EnvelopePreset:
    control_points: Tuple[ControlPoint, ...]
    lobes: Tuple[AngularLobe, ...]
    spine_width: float
    spine_strength: float

ENVELOPE_PRESETS = {
    # Gentle rolling terrain with a mountain spine opposite the start.
    'verdania': EnvelopePreset(
        control_points=(
            ControlPoint(0.00, 0.12, 0.50),
            ControlPoint(0.25, 0.08, 0.70),
            ControlPoint(0.50, 0.05, 0.60),
            ControlPoint(0.75, 0.02, 0.40),
            ControlPoint(1.00, 0.00, 0.15),
        ),
        lobes=(AngularLobe(2, 0.08), AngularLobe(3, 0.04)),
        spine_width=0.5,
        spine_strength=0.6,
    ),
    # Rugged, high interior with several ridges.
    'grausland': EnvelopePreset(
        control_points=(
            ControlPoint(0.00, 0.20, 0.90),
            ControlPoint(0.20, 0.15, 1.00),
            ControlPoint(0.45, 0.10, 0.80),
            ControlPoint(0.70, 0.06, 0.50),
            ControlPoint(1.00, 0.00, 0.20),
        ),
        lobes=(AngularLobe(1, 0.12), AngularLobe(2, 0.10), AngularLobe(3, 0.08), AngularLobe(5, 0.04)),
        spine_width=0.0,
        spine_strength=0.0,
    ),
    # Flat plains with strongly lobed, mesa-like sectors.
    'petermark': EnvelopePreset(
        control_points=(
            ControlPoint(0.00, 0.04, 0.25),
            ControlPoint(0.25, 0.03, 0.20),
            ControlPoint(0.50, 0.02, 0.20),
            ControlPoint(0.75, 0.01, 0.15),
            ControlPoint(1.00, 0.00, 0.10),
        ),
        lobes=(AngularLobe(2, 0.25), AngularLobe(3, 0.15)),
        spine_width=0.0,
        spine_strength=0.0,
    ),
}

def validate_control_points(points) -> None:
    """Raises TemplateError unless radii run strictly increasing from 0 to 1."""
    if len(points) < 2:
        raise TemplateError(f"Envelope needs at least 2 control points, got {len(points)}")
    if points[0].r != 0.0 or points[-1].r != 1.0:
        raise TemplateError(f"Envelope control points must start at r=0 and end at r=1, got {points[0].r}..{points[-1].r}")
    for a, b in zip(points, points[1:]):
        if not b.r > a.r:
            raise TemplateError(f"Envelope control point radii must be strictly increasing ({a.r} -> {b.r})")

@dataclass(frozen=True)
class EnvelopeParams:
    base_radius: float
    control_points: Tuple[ControlPoint, ...]
    lobes: Tuple[AngularLobe, ...]
    spine_angle: Optional[float]
    spine_width: float
    spine_strength: float

    def __post_init__(self):
        object.__setattr__(self, 'control_points', tuple(ControlPoint(*p) for p in self.control_points))
        object.__setattr__(self, 'lobes', tuple(AngularLobe(*l) for l in self.lobes))
        validate_control_points(self.control_points)
        if not 1 <= len(self.lobes) <= 4:
            raise TemplateError(f"Envelope needs 1 to 4 angular lobes, got {len(self.lobes)}")
        if self.base_radius <= 0:
            raise TemplateError(f"Envelope base radius must be positive, got {self.base_radius}")

def generate_envelope_params(seed: int, base_radius: float, preset: Optional[str] = None,
                             start_angle: float = 0.0) -> EnvelopeParams:
    """Deterministic envelope for a continent from a named preset or from the seed alone."""
    if preset is None or preset == 'default':
        return _generate_from_seed(seed, base_radius, start_angle)

    if preset not in ENVELOPE_PRESETS:
        raise TemplateError(f"Unknown envelope preset '{preset}'. Available: {sorted(ENVELOPE_PRESETS)}")
    return _generate_from_preset(seed, base_radius, ENVELOPE_PRESETS[preset], start_angle)

def _generate_from_preset(seed, base_radius, preset: EnvelopePreset, start_angle) -> EnvelopeParams:
    lobes = [
        AngularLobe(lobe.frequency, lobe.amplitude, hash_2d(i, 0, seed + 100) * 2.0 * math.pi)
        for i, lobe in enumerate(preset.lobes)
    ]

    # +/-10% jitter around each preset value
    jitter_span = DEFAULTS.PRESET_JITTER_SPAN
    points = []
    for i, cp in enumerate(preset.control_points):
        base_var = (hash_2d(i, 1, seed + 200) - 0.5) * jitter_span
        amp_var = (hash_2d(i, 2, seed + 300) - 0.5) * jitter_span
        points.append(ControlPoint(
            cp.r,
            max(0.0, cp.base_elevation * (1.0 + base_var)),
            max(0.05, cp.amplitude * (1.0 + amp_var)),
        ))

    spine_angle = start_angle + math.pi if preset.spine_strength > 0 else None

    return EnvelopeParams(base_radius, points, lobes, spine_angle, preset.spine_width, preset.spine_strength)

def _generate_from_seed(seed, base_radius, start_angle) -> EnvelopeParams:
    num_points = 5
    points = []
    for i in range(num_points):
        r = i / (num_points - 1)
        dome = 1.0 - r
        base = dome * (0.05 + hash_2d(i, 10, seed + 500) * 0.20)
        amplitude = (0.3 + hash_2d(i, 11, seed + 600) * 0.5) * (0.3 + 0.7 * dome)
        points.append(ControlPoint(r, max(0.0, base), max(0.05, amplitude)))

    lobe_count = 3 + (1 if hash_2d(0, 20, seed + 700) > 0.5 else 0)
    lobes = [
        AngularLobe(i + 1, 0.05 + hash_2d(i, 21, seed + 800) * 0.12, hash_2d(i, 22, seed + 900) * 2.0 * math.pi)
        for i in range(lobe_count)
    ]

    has_spine = hash_2d(0, 30, seed + 1000) > 0.6
    spine_angle = None
    spine_strength = 0.0
    if has_spine:
        spine_angle = start_angle + math.pi + (hash_2d(0, 31, seed + 1100) - 0.5) * 1.0
        spine_strength = 0.3 + hash_2d(0, 32, seed + 1200) * 0.4
    spine_width = 0.3 + hash_2d(0, 33, seed + 1300) * 0.4

    return EnvelopeParams(base_radius, points, lobes, spine_angle, spine_width, spine_strength)

def interpolate_control_points(r_norm: float, points) -> Tuple[float, float]:
    """
    Smoothstep interpolation of (base_elevation, amplitude) between the
    bracketing control points, clamped at both ends.
    """
    first = points[0]
    last = points[-1]
    if r_norm <= first.r:
        return first.base_elevation, first.amplitude
    if r_norm >= last.r:
        return last.base_elevation, last.amplitude

    for a, b in zip(points, points[1:]):
        if a.r <= r_norm < b.r:
            gap = b.r - a.r
            if gap <= 0.0:
                return b.base_elevation, b.amplitude
            t = (r_norm - a.r) / gap
            s = t * t * (3.0 - 2.0 * t)
            return (a.base_elevation + (b.base_elevation - a.base_elevation) * s,
                    a.amplitude + (b.amplitude - a.amplitude) * s)

    return last.base_elevation, last.amplitude

def angle_difference(a: float, b: float) -> float:
    """Shortest signed angular difference, wrapped to [-pi, pi]."""
    return (a - b + math.pi) % (2.0 * math.pi) - math.pi

def compute_angular_modulation(theta: float, lobes, spine_angle: Optional[float],
                               spine_width: float, spine_strength: float) -> float:
    mod = 1.0
    for lobe in lobes:
        mod += lobe.amplitude * math.sin(theta * lobe.frequency + lobe.phase)

    if spine_strength > 0 and spine_angle is not None and spine_width > 0:
        diff = angle_difference(theta, spine_angle)
        mod += spine_strength * math.exp(-(diff * diff) / (2.0 * spine_width * spine_width))

    lo, hi = DEFAULTS.ANGULAR_MODULATION_RANGE
    return clamp(mod, lo, hi)

def evaluate_envelope(x: float, z: float, params: EnvelopeParams) -> EnvelopeSample:
    r = math.hypot(x, z)
    r_norm = min(r / params.base_radius, DEFAULTS.ENVELOPE_MAX_RADIUS)
    theta = math.atan2(z, x)

    base, amplitude = interpolate_control_points(r_norm, params.control_points)
    modulation = compute_angular_modulation(
        theta, params.lobes, params.spine_angle, params.spine_width, params.spine_strength
    )

    amp_lo, amp_hi = DEFAULTS.ENVELOPE_AMPLITUDE_RANGE
    return EnvelopeSample(
        clamp(base * modulation * DEFAULTS.MAX_HEIGHT, 0.0, DEFAULTS.ENVELOPE_MAX_BASE_ELEVATION),
        clamp(amplitude * modulation, amp_lo, amp_hi),
        modulation,
    )
