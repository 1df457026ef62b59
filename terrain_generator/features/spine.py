# terrain_generator/features/spine.py

"""
================================================================================
SPINE FEATURES (MOUNTAIN RIDGES)
================================================================================
Ridge backbones that additively raise elevation. Unlike rivers, a spine's
influence is a Gaussian of the perpendicular distance, scaled by the
interpolated elevation and prominence along the ridge.

Data Contract:
---------------
- Inputs: Polylines of (x, z, elevation, prominence) in world coordinates.
- Outputs: SpineInfluence named tuples, None beyond SPINE_MAX_INFLUENCE_RADIUS.
- Side Effects: None.
- Invariants: Overlapping spines combine by maximum, never by sum.
================================================================================
"""

import math
from typing import NamedTuple, Optional

from .. import config as DEFAULTS
from .linear import FeatureHit, NearestPoint, nearest_point_on_path
from .spatial_hash import SpatialHashIndex

class SpinePoint(NamedTuple):
    x: float
    z: float
    elevation: float
    prominence: float = DEFAULTS.SPINE_MIN_PROMINENCE

class SpineInfluence(NamedTuple):
    distance: float
    elevation: float
    prominence: float
    influence: float
    boost: float

def _to_spine_point(p) -> SpinePoint:
    if isinstance(p, dict):
        return SpinePoint(p['x'], p['z'], p.get('elevation', 0.0), p.get('prominence', DEFAULTS.SPINE_MIN_PROMINENCE))
    return SpinePoint(*p)

class SpineFeature:
    feature_type = "spine"

    def __init__(self, path, properties: dict = None, feature_id: Optional[str] = None):
        if len(path) < 1:
            raise ValueError("A spine needs at least one path point")
        self.path = [_to_spine_point(p) for p in path]
        self.properties = dict(properties or {})
        self.feature_id = feature_id

    def __repr__(self):
        return f"SpineFeature({self.feature_id!r}, {len(self.path)} points)"

    def get_elevation_at(self, index: int) -> float:
        if 0 <= index < len(self.path):
            return self.path[index].elevation
        return 0.0

    def get_elevation_at_t(self, index: int, t: float) -> float:
        e1 = self.get_elevation_at(index)
        e2 = self.get_elevation_at(min(index + 1, len(self.path) - 1))
        return e1 + (e2 - e1) * t

    def get_prominence_at(self, index: int) -> float:
        if 0 <= index < len(self.path):
            return self.path[index].prominence
        return 0.0

    def get_prominence_at_t(self, index: int, t: float) -> float:
        p1 = self.get_prominence_at(index)
        p2 = self.get_prominence_at(min(index + 1, len(self.path) - 1))
        return p1 + (p2 - p1) * t

    def get_nearest_point(self, x: float, z: float) -> NearestPoint:
        return nearest_point_on_path(self.path, x, z)

    def get_influence(self, x: float, z: float,
                      falloff_width: float = DEFAULTS.SPINE_FALLOFF_WIDTH) -> Optional[SpineInfluence]:
        nearest = self.get_nearest_point(x, z)
        if nearest.distance > DEFAULTS.SPINE_MAX_INFLUENCE_RADIUS:
            return None

        elevation = self.get_elevation_at_t(nearest.index, nearest.t)
        prominence = self.get_prominence_at_t(nearest.index, nearest.t)
        sigma = falloff_width
        influence = math.exp(-(nearest.distance * nearest.distance) / (2.0 * sigma * sigma))

        return SpineInfluence(nearest.distance, elevation, prominence, influence, elevation * prominence * influence)

    def get_bounds(self):
        buf = DEFAULTS.SPINE_MAX_INFLUENCE_RADIUS
        xs = [p.x for p in self.path]
        zs = [p.z for p in self.path]
        return min(xs) - buf, max(xs) + buf, min(zs) - buf, max(zs) + buf

    def segment_bounds(self):
        if len(self.path) == 1:
            yield self.get_bounds()
            return
        buf = DEFAULTS.SPINE_MAX_INFLUENCE_RADIUS
        for a, b in zip(self.path, self.path[1:]):
            yield (min(a.x, b.x) - buf, max(a.x, b.x) + buf, min(a.z, b.z) - buf, max(a.z, b.z) + buf)

    def to_json(self) -> dict:
        return {
            'id': self.feature_id,
            'path': [p._asdict() for p in self.path],
            'properties': dict(self.properties),
        }

    @classmethod
    def from_json(cls, data: dict) -> 'SpineFeature':
        return cls(data['path'], data.get('properties'), data.get('id'))

class SpineFeatureIndex(SpatialHashIndex):
    id_prefix = "spine"

    def __init__(self, cell_size: float = DEFAULTS.SPINE_CELL_SIZE):
        super().__init__(cell_size)

    def get_influence_at(self, x: float, z: float) -> Optional[FeatureHit]:
        best = None
        for spine in self.query(x, z):
            influence = spine.get_influence(x, z)
            if influence is not None and (best is None or influence.boost > best.influence.boost):
                best = FeatureHit(spine, influence)
        return best

    def get_all_influences_at(self, x: float, z: float):
        hits = []
        for spine in self.query(x, z):
            influence = spine.get_influence(x, z)
            if influence is not None:
                hits.append(FeatureHit(spine, influence))
        hits.sort(key=lambda h: h.influence.boost, reverse=True)
        return hits

    def get_elevation_boost_at(self, x: float, z: float) -> float:
        """Maximum boost over overlapping spines; 0.0 where none reach."""
        return max((hit.influence.boost for hit in self.get_all_influences_at(x, z)), default=0.0)

def build_spine_index(spines, cell_size: float = DEFAULTS.SPINE_CELL_SIZE) -> SpineFeatureIndex:
    """Builds an index from SpineFeature objects or their JSON dicts."""
    index = SpineFeatureIndex(cell_size)
    for spine in spines:
        if isinstance(spine, dict):
            spine = SpineFeature.from_json(spine)
        index.add(spine)
    return index
