# terrain_generator/features/spatial_hash.py

"""
================================================================================
UNIFORM SPATIAL HASH
================================================================================
Grid index shared by the river and spine indices. World space is cut into
square cells of `cell_size` blocks; each cell maps to the set of feature ids
whose influence area overlaps it.

Data Contract:
---------------
- Inputs: Features exposing `feature_id` and `segment_bounds()`.
- Outputs: Features whose influence area may contain a query point.
- Side Effects: None on the caller's features. A feature added without an id
  is stored as a copy carrying the next free `<prefix>_<n>` id. The counter
  belongs to the index, so ids are reproducible per build.
- Invariants: Cell keys are integer (cx, cz) tuples. Only a caller-supplied
  id replaces an existing entry; generated ids skip ids already in use, so no
  feature is dropped.
================================================================================
"""

import copy
import math

class SpatialHashIndex:
    """Base class; subclasses name the id prefix and read influences."""
    id_prefix = "feature"

    def __init__(self, cell_size: float):
        if cell_size <= 0:
            raise ValueError(f"Cell size must be positive, got {cell_size}")
        self.cell_size = cell_size
        self.grid = {}        # (cx, cz) -> set of feature ids
        self.features = {}    # feature id -> feature
        self._next_id = 0

    def cell_of(self, x: float, z: float):
        return (math.floor(x / self.cell_size), math.floor(z / self.cell_size))

    def cells_for_bounds(self, min_x: float, max_x: float, min_z: float, max_z: float):
        min_cx, min_cz = self.cell_of(min_x, min_z)
        max_cx, max_cz = self.cell_of(max_x, max_z)
        return [(cx, cz) for cx in range(min_cx, max_cx + 1) for cz in range(min_cz, max_cz + 1)]

    def _next_free_id(self, prefix: str) -> str:
        while True:
            feature_id = f"{prefix}_{self._next_id}"
            self._next_id += 1
            if feature_id not in self.features:
                return feature_id

    def add(self, feature):
        if feature.feature_id is None:
            prefix = getattr(feature, 'feature_type', None) or self.id_prefix
            feature = copy.copy(feature)
            feature.feature_id = self._next_free_id(prefix)
        elif feature.feature_id in self.features:
            self.remove(feature.feature_id)

        feature_id = feature.feature_id
        self.features[feature_id] = feature
        for bounds in feature.segment_bounds():
            for cell in self.cells_for_bounds(*bounds):
                self.grid.setdefault(cell, set()).add(feature_id)
        return feature_id

    def add_all(self, features):
        for feature in features:
            self.add(feature)
        return self

    def remove(self, feature_id: str):
        self.features.pop(feature_id, None)
        for cell in list(self.grid):
            ids = self.grid[cell]
            ids.discard(feature_id)
            if not ids:
                del self.grid[cell]

    def query(self, x: float, z: float):
        """Features registered in the cell containing (x, z), in id order."""
        ids = self.grid.get(self.cell_of(x, z))
        if not ids:
            return []
        return [self.features[i] for i in sorted(ids) if i in self.features]

    def clear(self):
        self.grid.clear()
        self.features.clear()
        self._next_id = 0

    def stats(self) -> dict:
        return {'feature_count': len(self.features), 'cell_count': len(self.grid)}

    def __len__(self):
        return len(self.features)
