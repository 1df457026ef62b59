# terrain_generator/templates.py

"""
================================================================================
CONTINENT TEMPLATES
================================================================================
High-level, immutable descriptions of a continent's layout, plus the pure
modifier functions that turn a template into per-position multipliers.

Coordinate systems:
- World space: block coordinates (e.g. x=256, z=512).
- Normalised space: [0, 1] across the template's world bounds, (0.5, 0.5) is
  the centre.

Modifier semantics: every multiplier is in [0, 1]. 0 suppresses a feature and
1 leaves it untouched.

Data Contract:
---------------
- Inputs: ContinentTemplate instances (presets below, or user-built) and world
  coordinates.
- Outputs: NormalizedPosition, SpineInfo and TemplateModifiers named tuples.
- Side Effects: None.
- Invariants: A template's generation strategy is stored explicitly and is
  never inferred from the shape of its data. Templates are validated on
  construction and frozen afterwards.
================================================================================
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional, Tuple

from . import config as DEFAULTS
from .noise import smoothstep

class TemplateError(ValueError):
    """Raised for malformed templates, envelope control points or unknown preset names."""

class GenerationStrategy(Enum):
    SPINE_FIRST = "spine_first"
    LEGACY = "legacy"
    CONTINENTAL = "continental"

# --- Template data types ---

class NormPoint(NamedTuple):
    x: float
    z: float

class Region(NamedTuple):
    min_z: float
    max_z: float

class ShapeParams(NamedTuple):
    center_x: float = 0.0
    center_z: float = 0.0
    radius: float = 2000.0
    falloff_sharpness: float = 0.3

class LandExtent(NamedTuple):
    inner: float = 0.20
    outer: float = 0.20

class BayFeature(NamedTuple):
    direction: str
    depth: float
    width: float

class DirectionalSpine(NamedTuple):
    """Straight legacy ridge: 'EW' runs along z = position, 'NS' along x = position."""
    direction: str
    position: float

@dataclass(frozen=True)
class SpinePolyline:
    points: Tuple[NormPoint, ...]
    elevation: float = 0.8
    width: float = 0.1

    def __post_init__(self):
        object.__setattr__(self, 'points', tuple(NormPoint(*p) for p in self.points))

def secondary_spine(points, elevation: float = 0.6, width: float = 0.08) -> SpinePolyline:
    return SpinePolyline(points, elevation, width)

@dataclass(frozen=True)
class ContinentTemplate:
    name: str
    strategy: GenerationStrategy
    world_bounds: Tuple[float, float] = DEFAULTS.DEFAULT_WORLD_BOUNDS
    shape: ShapeParams = ShapeParams()
    land_extent: LandExtent = LandExtent()
    bay_center: Optional[NormPoint] = None
    spine: Optional[SpinePolyline] = None
    secondary_spines: Tuple[SpinePolyline, ...] = field(default_factory=tuple)

    # Legacy modifiers
    mountain_boost_region: Optional[Region] = None
    mountain_boost_strength: float = 0.5
    mountain_ridge_weight: float = 0.6
    flatten_region: Optional[Region] = None
    flatness: float = 0.7
    bay: Optional[BayFeature] = None
    directional_spine: Optional[DirectionalSpine] = None

    # Continental-layer preset names (None = derived from the seed; a None
    # climate preset follows the envelope preset)
    envelope_preset: Optional[str] = None
    climate_preset: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'secondary_spines', tuple(self.secondary_spines))
        self.validate()

    def validate(self):
        if not isinstance(self.strategy, GenerationStrategy):
            raise TemplateError(f"Template '{self.name}': strategy must be a GenerationStrategy, got {self.strategy!r}")

        lo, hi = self.world_bounds
        if not hi > lo:
            raise TemplateError(f"Template '{self.name}': world bounds must satisfy min < max, got {self.world_bounds}")
        if self.shape.radius <= 0:
            raise TemplateError(f"Template '{self.name}': shape radius must be positive")

        if self.strategy is GenerationStrategy.SPINE_FIRST:
            if self.spine is None or len(self.spine.points) < 2:
                raise TemplateError(f"Template '{self.name}': spine-first templates need at least 2 spine points")
            if self.land_extent.inner <= 0 or self.land_extent.outer <= 0:
                raise TemplateError(f"Template '{self.name}': land extent must be positive")

        for region in (self.mountain_boost_region, self.flatten_region):
            if region is not None and region.min_z > region.max_z:
                raise TemplateError(f"Template '{self.name}': region {region} has min_z > max_z")

        if self.bay is not None and self.bay.direction not in ('N', 'S', 'E', 'W'):
            raise TemplateError(f"Template '{self.name}': bay direction must be one of N, S, E, W, got {self.bay.direction!r}")
        if self.directional_spine is not None and self.directional_spine.direction not in ('EW', 'NS'):
            raise TemplateError(f"Template '{self.name}': directional spine must be 'EW' or 'NS'")

    @property
    def world_size(self) -> float:
        return self.world_bounds[1] - self.world_bounds[0]

    @property
    def max_land_extent(self) -> float:
        return max(self.land_extent.inner, self.land_extent.outer)

    @property
    def shelf_edge(self) -> float:
        return self.max_land_extent + DEFAULTS.CONTINENTAL_SHELF['shelf_width_norm']

    def all_spines(self):
        if self.spine is not None:
            yield self.spine
        yield from self.secondary_spines

# --- Preset templates ---

SIMPLE = ContinentTemplate(
    name='simple',
    strategy=GenerationStrategy.LEGACY,
)

# C-shaped continent whose bay opens to the south (high z).
VERDANIA = ContinentTemplate(
    name='verdania',
    strategy=GenerationStrategy.SPINE_FIRST,
    bay_center=NormPoint(0.5, 0.85),
    spine=SpinePolyline(
        points=[(0.15, 0.70), (0.18, 0.50), (0.30, 0.32), (0.50, 0.25),
                (0.70, 0.32), (0.82, 0.50), (0.85, 0.70)],
        elevation=0.85,
    ),
    secondary_spines=(
        secondary_spine([(0.18, 0.50), (0.08, 0.55)], 0.50),
        secondary_spine([(0.82, 0.50), (0.92, 0.55)], 0.50),
        secondary_spine([(0.35, 0.12), (0.50, 0.08), (0.65, 0.12)], 0.40),
    ),
    land_extent=LandExtent(0.20, 0.20),
)

ARCHIPELAGO = ContinentTemplate(
    name='archipelago',
    strategy=GenerationStrategy.SPINE_FIRST,
    shape=ShapeParams(falloff_sharpness=0.4),
    spine=SpinePolyline(points=[(0.25, 0.45), (0.35, 0.50), (0.40, 0.48)], elevation=0.55),
    secondary_spines=(
        secondary_spine([(0.50, 0.30), (0.58, 0.35)], 0.45),
        secondary_spine([(0.65, 0.50), (0.72, 0.55), (0.75, 0.52)], 0.50),
        secondary_spine([(0.45, 0.70), (0.52, 0.72)], 0.40),
    ),
    land_extent=LandExtent(0.10, 0.10),
    mountain_boost_strength=0.4,
    mountain_ridge_weight=0.5,
    flatness=0.8,
)

PANGAEA = ContinentTemplate(
    name='pangaea',
    strategy=GenerationStrategy.SPINE_FIRST,
    shape=ShapeParams(falloff_sharpness=0.25),
    spine=SpinePolyline(
        points=[(0.15, 0.50), (0.30, 0.48), (0.50, 0.45), (0.70, 0.48), (0.85, 0.52)],
        elevation=0.85,
    ),
    secondary_spines=(
        secondary_spine([(0.50, 0.45), (0.48, 0.30), (0.45, 0.18)], 0.70),
        secondary_spine([(0.50, 0.45), (0.55, 0.62), (0.58, 0.78)], 0.65),
        secondary_spine([(0.30, 0.48), (0.18, 0.38)], 0.50),
        secondary_spine([(0.70, 0.48), (0.82, 0.62)], 0.55),
    ),
    land_extent=LandExtent(0.30, 0.30),
    flatness=0.75,
)

# Region-based layout: mountains in the south, flattened north, northern bay.
VERDANIA_LEGACY = ContinentTemplate(
    name='verdania_legacy',
    strategy=GenerationStrategy.LEGACY,
    mountain_boost_region=Region(0.7, 1.0),
    mountain_boost_strength=0.6,
    mountain_ridge_weight=0.6,
    flatten_region=Region(0.0, 0.4),
    flatness=0.7,
    bay=BayFeature('N', 0.35, 0.45),
    directional_spine=DirectionalSpine('EW', 0.85),
)

# Island built from the continental signed-distance layers.
CONTINENTAL_DEFAULT = ContinentTemplate(
    name='continental',
    strategy=GenerationStrategy.CONTINENTAL,
    envelope_preset='verdania',
    climate_preset='verdania',
)

TEMPLATES = {
    t.name: t for t in (SIMPLE, VERDANIA, ARCHIPELAGO, PANGAEA, VERDANIA_LEGACY, CONTINENTAL_DEFAULT)
}

ARCHETYPE_TEMPLATES = (VERDANIA, PANGAEA, ARCHIPELAGO)

def get_template(name: str) -> ContinentTemplate:
    try:
        return TEMPLATES[name]
    except KeyError:
        raise TemplateError(f"Unknown template '{name}'. Available: {sorted(TEMPLATES)}") from None

def get_template_for_seed(seed: int) -> ContinentTemplate:
    """Deterministically picks one of the spine-first archetypes."""
    return ARCHETYPE_TEMPLATES[abs(seed) % len(ARCHETYPE_TEMPLATES)]

# --- Geometry helpers ---

class NormalizedPosition(NamedTuple):
    nx: float
    nz: float
    distance_from_center: float

class SpineInfo(NamedTuple):
    distance: float
    elevation: float
    width: float
    nearest: NormPoint

class SpineSide(NamedTuple):
    distance: float
    is_inner_side: bool
    elevation: float
    width: float

class TemplateModifiers(NamedTuple):
    continentalness_multiplier: float
    elevation_multiplier: float
    mountain_boost: float
    ridge_weight: float

def get_normalized_position(x: float, z: float, template: ContinentTemplate) -> NormalizedPosition:
    """Maps world coordinates into the template's shape frame (0.5 = centre)."""
    shape = template.shape
    rel_x = x - shape.center_x
    rel_z = z - shape.center_z
    return NormalizedPosition(
        0.5 + rel_x / (2.0 * shape.radius),
        0.5 + rel_z / (2.0 * shape.radius),
        math.sqrt(rel_x * rel_x + rel_z * rel_z),
    )

def to_bounds_space(x: float, z: float, template: ContinentTemplate) -> Tuple[float, float]:
    """Maps world coordinates into [0, 1] across the template's world bounds."""
    lo = template.world_bounds[0]
    size = template.world_size
    return (x - lo) / size, (z - lo) / size

def apply_shape_mask(distance_from_center: float, radius: float, falloff_sharpness: float) -> float:
    """1.0 inside the solid continent, smooth falloff to 0.0 at the radius."""
    falloff_width = radius * (0.5 - 0.3 * falloff_sharpness)
    falloff_start = radius - falloff_width

    if distance_from_center < falloff_start:
        return 1.0
    if distance_from_center > radius:
        return 0.0
    return smoothstep((radius - distance_from_center) / falloff_width)

def apply_bay_carving(nx: float, nz: float, bay: Optional[BayFeature]) -> float:
    """
    Multiplier that carves a bay inward from one edge, at most 70% deep at the
    edge-centre of the bay.
    """
    if bay is None:
        return 1.0

    if bay.direction == 'N':
        dist_from_edge, across = nz, nx
    elif bay.direction == 'S':
        dist_from_edge, across = 1.0 - nz, nx
    elif bay.direction == 'E':
        dist_from_edge, across = 1.0 - nx, nz
    else:
        dist_from_edge, across = nx, nz

    half_width = bay.width / 2.0
    off_axis = abs(across - 0.5)
    if dist_from_edge >= bay.depth or off_axis >= half_width:
        return 1.0

    depth_factor = smoothstep(1.0 - dist_from_edge / bay.depth)
    width_factor = smoothstep(1.0 - off_axis / half_width)
    return 1.0 - depth_factor * width_factor * 0.7

def apply_directional_spine_boost(nx: float, nz: float, spine: Optional[DirectionalSpine]) -> float:
    """Gaussian ridge (sigma 0.1 normalised) along a straight legacy spine."""
    if spine is None:
        return 0.0

    if spine.direction == 'EW':
        perp = abs(nz - spine.position)
    else:
        perp = abs(nx - spine.position)

    sigma = 0.1
    return math.exp(-(perp * perp) / (2.0 * sigma * sigma))

def get_region_membership(nz: float, region: Optional[Region]) -> float:
    """1.0 inside the z-band, 0.0 outside, smoothstep across a 0.05 transition."""
    if region is None:
        return 0.0

    transition = 0.05
    if nz < region.min_z - transition or nz > region.max_z + transition:
        return 0.0
    if region.min_z + transition <= nz <= region.max_z - transition:
        return 1.0
    if nz < region.min_z + transition:
        return smoothstep((nz - (region.min_z - transition)) / (2.0 * transition))
    return smoothstep(((region.max_z + transition) - nz) / (2.0 * transition))

def _project_normalized(px, pz, a: NormPoint, b: NormPoint):
    dx = b.x - a.x
    dz = b.z - a.z
    len_sq = dx * dx + dz * dz

    if len_sq < 0.0001:
        return math.hypot(px - a.x, pz - a.z), a

    t = max(0.0, min(1.0, ((px - a.x) * dx + (pz - a.z) * dz) / len_sq))
    proj = NormPoint(a.x + t * dx, a.z + t * dz)
    return math.hypot(px - proj.x, pz - proj.z), proj

def get_spine_info(nx: float, nz: float, template: ContinentTemplate) -> SpineInfo:
    """
    Nearest spine segment over the primary and secondary spines. Distance is
    infinite when the template has no spines.
    """
    best = SpineInfo(math.inf, 0.5, 0.1, NormPoint(nx, nz))

    for spine in template.all_spines():
        pts = spine.points
        for i in range(len(pts) - 1):
            dist, point = _project_normalized(nx, nz, pts[i], pts[i + 1])
            if dist < best.distance:
                best = SpineInfo(dist, spine.elevation, spine.width, point)

    return best

def get_inner_reference_point(template: ContinentTemplate) -> NormPoint:
    """The bay centre if set, otherwise the centroid of every spine point."""
    if template.bay_center is not None:
        return template.bay_center

    points = [p for spine in template.all_spines() for p in spine.points]
    if not points:
        return NormPoint(0.5, 0.5)
    return NormPoint(sum(p.x for p in points) / len(points), sum(p.z for p in points) / len(points))

def get_spine_distance_with_side(nx: float, nz: float, template: ContinentTemplate) -> SpineSide:
    """Spine distance plus whether the point lies toward the inner reference point."""
    inner = get_inner_reference_point(template)
    info = get_spine_info(nx, nz, template)

    to_inner_x = inner.x - info.nearest.x
    to_inner_z = inner.z - info.nearest.z
    to_query_x = nx - info.nearest.x
    to_query_z = nz - info.nearest.z
    is_inner = (to_inner_x * to_query_x + to_inner_z * to_query_z) > 0

    return SpineSide(info.distance, is_inner, info.elevation, info.width)

def calculate_spine_land_mask(nx: float, nz: float, template: ContinentTemplate) -> float:
    """
    Land mask from spine distance, asymmetric by side. Circular caps around the
    primary spine's endpoints keep the horns from ending abruptly.
    """
    if template.spine is None or len(template.spine.points) < 2:
        return 1.0

    side = get_spine_distance_with_side(nx, nz, template)
    extent = template.land_extent
    max_extent = extent.inner if side.is_inner_side else extent.outer

    cap_radius = max(extent.inner, extent.outer) * 1.2
    first = template.spine.points[0]
    last = template.spine.points[-1]
    endpoint_dist = min(math.hypot(nx - first.x, nz - first.z), math.hypot(nx - last.x, nz - last.z))

    if endpoint_dist < cap_radius:
        cap_start = cap_radius * 0.6
        if endpoint_dist < cap_start:
            return 1.0
        return smoothstep((cap_radius - endpoint_dist) / (cap_radius - cap_start))

    if side.distance > max_extent:
        return 0.0

    falloff_start = max_extent * 0.7
    if side.distance < falloff_start:
        return 1.0
    return smoothstep((max_extent - side.distance) / (max_extent - falloff_start))

def calculate_spine_elevation_boost(nx: float, nz: float, template: ContinentTemplate) -> float:
    if template.spine is None:
        return 0.0
    info = get_spine_info(nx, nz, template)
    sigma = info.width * 1.5
    return info.elevation * math.exp(-(info.distance * info.distance) / (2.0 * sigma * sigma))

def get_template_modifiers(x: float, z: float, template: ContinentTemplate) -> TemplateModifiers:
    """
    Multiplicative modifiers for a world position. Mountain boost and ridge
    weight are masked by the shape so oceans never get mountains.
    """
    nx, nz, distance = get_normalized_position(x, z, template)
    spine_first = template.strategy is GenerationStrategy.SPINE_FIRST
    shape = template.shape

    # 1. Shape mask
    shape_mask = apply_shape_mask(distance, shape.radius, shape.falloff_sharpness)
    if spine_first:
        shape_mask *= calculate_spine_land_mask(nx, nz, template)
    shape_mask *= apply_bay_carving(nx, nz, template.bay)

    # 2. Flattening
    elevation_multiplier = 1.0
    if template.flatten_region is not None:
        membership = get_region_membership(nz, template.flatten_region)
        elevation_multiplier = 1.0 - membership * (1.0 - template.flatness)

    # 3. Mountain boost
    mountain_boost = 0.0
    ridge_weight = 0.0
    if spine_first:
        mountain_boost = calculate_spine_elevation_boost(nx, nz, template)
        ridge_weight = mountain_boost * 0.6

    if template.mountain_boost_region is not None:
        membership = get_region_membership(nz, template.mountain_boost_region)
        mountain_boost = max(mountain_boost, membership * template.mountain_boost_strength)
        ridge_weight = max(ridge_weight, membership * template.mountain_ridge_weight)

    if not spine_first and template.directional_spine is not None:
        boost = apply_directional_spine_boost(nx, nz, template.directional_spine)
        mountain_boost = max(mountain_boost, boost * template.mountain_boost_strength)
        ridge_weight = max(ridge_weight, boost * template.mountain_ridge_weight)

    return TemplateModifiers(
        shape_mask,
        elevation_multiplier,
        mountain_boost * shape_mask,
        ridge_weight * shape_mask,
    )
