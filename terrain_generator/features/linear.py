# terrain_generator/features/linear.py

"""
================================================================================
LINEAR FEATURES (RIVERS, ROADS, TRAILS)
================================================================================
Polylines with per-point widths and a spatial index that answers "which river
affects this point, and how strongly".

Data Contract:
---------------
- Inputs: Polylines in world coordinates, widths in blocks.
- Outputs: NearestPoint and RiverInfluence named tuples, or None when a point
  is beyond the blend distance (width * RIVER_BLEND_FACTOR).
- Side Effects: None.
- Invariants: center_distance is 0 on the centreline and exactly 1 at the
  channel edge (half the width); influence falls linearly to 0 at the blend
  distance.
================================================================================
"""

import math
from typing import NamedTuple, Optional

from .. import config as DEFAULTS
from .spatial_hash import SpatialHashIndex

class PathPoint(NamedTuple):
    x: float
    z: float

class SegmentProjection(NamedTuple):
    x: float
    z: float
    t: float

class NearestPoint(NamedTuple):
    index: int
    distance: float
    x: float
    z: float
    t: float

class RiverInfluence(NamedTuple):
    distance: float
    width: float
    influence: float
    center_distance: float

class FeatureHit(NamedTuple):
    feature: object
    influence: object

def project_onto_segment(px, pz, x1, z1, x2, z2) -> SegmentProjection:
    """Closest point on segment (x1,z1)-(x2,z2); a zero-length segment yields its start with t=0."""
    dx = x2 - x1
    dz = z2 - z1
    length_sq = dx * dx + dz * dz

    if length_sq == 0:
        return SegmentProjection(x1, z1, 0.0)

    t = max(0.0, min(1.0, ((px - x1) * dx + (pz - z1) * dz) / length_sq))
    return SegmentProjection(x1 + t * dx, z1 + t * dz, t)

def distance_to_segment(px, pz, x1, z1, x2, z2) -> float:
    proj = project_onto_segment(px, pz, x1, z1, x2, z2)
    return math.hypot(px - proj.x, pz - proj.z)

def nearest_point_on_path(path, x: float, z: float) -> NearestPoint:
    """Nearest point over every segment of a polyline (first segment wins ties)."""
    first = path[0]
    best = NearestPoint(0, math.inf, first.x, first.z, 0.0)
    if len(path) == 1:
        return best._replace(distance=math.hypot(x - first.x, z - first.z))

    for i in range(len(path) - 1):
        a = path[i]
        b = path[i + 1]
        proj = project_onto_segment(x, z, a.x, a.z, b.x, b.z)
        dist = math.hypot(x - proj.x, z - proj.z)
        if dist < best.distance:
            best = NearestPoint(i, dist, proj.x, proj.z, proj.t)
    return best

class LinearFeature:
    """A river, road, trail or path."""

    def __init__(self, feature_type: str, path, width: float = DEFAULTS.RIVER_DEFAULT_WIDTH,
                 widths=None, feature_id: Optional[str] = None, properties: dict = None):
        if len(path) < 1:
            raise ValueError("A linear feature needs at least one path point")
        self.feature_type = feature_type
        self.path = [PathPoint(*p) if not isinstance(p, dict) else PathPoint(p['x'], p['z']) for p in path]
        self.width = width
        self.widths = list(widths) if widths is not None else None
        self.feature_id = feature_id
        self.properties = dict(properties or {})

    def __repr__(self):
        return f"LinearFeature({self.feature_id!r}, {self.feature_type!r}, {len(self.path)} points)"

    def get_width_at(self, index: int) -> float:
        if self.widths is not None and 0 <= index < len(self.widths):
            return self.widths[index]
        return self.width

    def get_width_at_t(self, index: int, t: float) -> float:
        w1 = self.get_width_at(index)
        w2 = self.get_width_at(min(index + 1, len(self.path) - 1))
        return w1 + (w2 - w1) * t

    def get_nearest_point(self, x: float, z: float) -> NearestPoint:
        return nearest_point_on_path(self.path, x, z)

    def get_influence(self, x: float, z: float) -> Optional[RiverInfluence]:
        nearest = self.get_nearest_point(x, z)
        width = self.get_width_at_t(nearest.index, nearest.t)
        blend = width * DEFAULTS.RIVER_BLEND_FACTOR

        if nearest.distance > blend or width <= 0:
            return None

        return RiverInfluence(
            nearest.distance,
            width,
            1.0 - nearest.distance / blend,
            nearest.distance / (width / 2.0),
        )

    def get_bounds(self):
        """(min_x, max_x, min_z, max_z) including the blend distance."""
        min_x = min_z = math.inf
        max_x = max_z = -math.inf
        for i, p in enumerate(self.path):
            w = self.get_width_at(i) * DEFAULTS.RIVER_BLEND_FACTOR
            min_x = min(min_x, p.x - w)
            max_x = max(max_x, p.x + w)
            min_z = min(min_z, p.z - w)
            max_z = max(max_z, p.z + w)
        return min_x, max_x, min_z, max_z

    def segment_bounds(self):
        if len(self.path) == 1:
            yield self.get_bounds()
            return
        for i in range(len(self.path) - 1):
            a = self.path[i]
            b = self.path[i + 1]
            buf = max(self.get_width_at(i), self.get_width_at(i + 1)) * DEFAULTS.RIVER_BLEND_FACTOR
            yield (min(a.x, b.x) - buf, max(a.x, b.x) + buf, min(a.z, b.z) - buf, max(a.z, b.z) + buf)

    def to_json(self) -> dict:
        properties = dict(self.properties)
        properties['width'] = self.width
        if self.widths is not None:
            properties['widths'] = list(self.widths)
        return {
            'id': self.feature_id,
            'type': self.feature_type,
            'path': [{'x': p.x, 'z': p.z} for p in self.path],
            'properties': properties,
        }

    @classmethod
    def from_json(cls, data: dict) -> 'LinearFeature':
        properties = dict(data.get('properties', {}))
        width = properties.pop('width', DEFAULTS.RIVER_DEFAULT_WIDTH)
        widths = properties.pop('widths', None)
        return cls(data.get('type', 'river'), data['path'], width, widths, data.get('id'), properties)

class LinearFeatureIndex(SpatialHashIndex):
    """Spatial hash over linear features."""
    id_prefix = "feature"

    def __init__(self, cell_size: float = DEFAULTS.FEATURE_CELL_SIZE):
        super().__init__(cell_size)

    def get_influence_at(self, x: float, z: float) -> Optional[FeatureHit]:
        """The strongest influence at (x, z), or None."""
        best = None
        for feature in self.query(x, z):
            influence = feature.get_influence(x, z)
            if influence is not None and (best is None or influence.influence > best.influence.influence):
                best = FeatureHit(feature, influence)
        return best

    def get_all_influences_at(self, x: float, z: float):
        hits = []
        for feature in self.query(x, z):
            influence = feature.get_influence(x, z)
            if influence is not None:
                hits.append(FeatureHit(feature, influence))
        hits.sort(key=lambda h: h.influence.influence, reverse=True)
        return hits

def build_river_index(rivers, cell_size: float = DEFAULTS.RIVER_CELL_SIZE) -> LinearFeatureIndex:
    """Builds an index from LinearFeature objects or their JSON dicts."""
    index = LinearFeatureIndex(cell_size)
    for river in rivers:
        if isinstance(river, dict):
            river = LinearFeature.from_json(river)
        index.add(river)
    return index
