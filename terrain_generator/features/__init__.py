# terrain_generator/features/__init__.py

# This file makes the 'features' directory a Python package.
# It also defines the public API for rivers, spines and their indices.

from .spatial_hash import SpatialHashIndex
from .linear import (
    FeatureHit, LinearFeature, LinearFeatureIndex, NearestPoint, RiverInfluence,
    SegmentProjection, build_river_index, project_onto_segment
)
from .spine import SpineFeature, SpineFeatureIndex, SpineInfluence, SpinePoint, build_spine_index
from .io import load_features, save_features

__all__ = [
    "SpatialHashIndex",
    "FeatureHit", "LinearFeature", "LinearFeatureIndex", "NearestPoint", "RiverInfluence",
    "SegmentProjection", "build_river_index", "project_onto_segment",
    "SpineFeature", "SpineFeatureIndex", "SpineInfluence", "SpinePoint", "build_spine_index",
    "load_features", "save_features",
]
