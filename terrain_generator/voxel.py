# terrain_generator/voxel.py

"""
================================================================================
VOXEL TARGETS
================================================================================
Write targets for the blocks a chunk builder or structure placer produces.

Two concrete targets share the VoxelTarget interface:
    - BlockMap:    world blocks keyed by (x, y, z); carving deletes a block.
    - VoxelVolume: a staging volume that records a semantic VoxelState per
                   voxel and blends into a BlockMap against the terrain later.

Shape helpers only ever call `set` and `carve`, so they work on either target.

Data Contract:
---------------
- Inputs: Integer voxel coordinates, block type names, VoxelState values.
- Outputs: Mutated targets; VoxelVolume transforms return new volumes.
- Side Effects: Mutates the target passed in.
- Invariants: Keys are (x, y, z) integer tuples. Box ranges are half-open
  [min, max); sphere and cylinder radii are inclusive.
================================================================================
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Callable, NamedTuple, Optional

from .biomes import BIOMES, is_water_biome

SUBSURFACE_DEPTH = 3
BEDROCK_BLOCK = 'stone'
WATER_BLOCK = 'water'

class VoxelState(IntEnum):
    TERRAIN = 0              # Leave whatever the terrain has
    AIR_FORCED = 1           # Carve, even through terrain
    SOLID = 2                # Always place
    SOLID_ABOVE_TERRAIN = 3  # Place only at or above the terrain surface
    SOLID_BELOW_TERRAIN = 4  # Place only below the terrain surface

SOLID_STATES = frozenset((VoxelState.SOLID, VoxelState.SOLID_ABOVE_TERRAIN, VoxelState.SOLID_BELOW_TERRAIN))

def is_solid_state(state: VoxelState) -> bool:
    return state in SOLID_STATES

class Voxel(NamedTuple):
    block: Optional[str]
    state: VoxelState

class VolumeBounds(NamedTuple):
    min_x: int
    min_y: int
    min_z: int
    max_x: int
    max_y: int
    max_z: int

class VoxelTarget(ABC):
    """Anything shape helpers can write into."""

    @abstractmethod
    def set(self, x: int, y: int, z: int, block: str, state: VoxelState = VoxelState.SOLID):
        ...

    @abstractmethod
    def carve(self, x: int, y: int, z: int):
        ...

class BlockMap(VoxelTarget):
    """Direct world blocks. The semantic state is ignored; every set places."""

    def __init__(self, blocks: dict = None):
        self.blocks = dict(blocks or {})

    def set(self, x, y, z, block, state=VoxelState.SOLID):
        self.blocks[(x, y, z)] = block

    def carve(self, x, y, z):
        self.blocks.pop((x, y, z), None)

    def get(self, x, y, z):
        return self.blocks.get((x, y, z))

    def __contains__(self, key):
        return key in self.blocks

    def __len__(self):
        return len(self.blocks)

    def __iter__(self):
        return iter(self.blocks.items())

class VoxelVolume(VoxelTarget):
    """Staging volume for a structure, in local coordinates."""

    def __init__(self):
        self.voxels = {}
        self._bounds = None

    def _extend(self, x, y, z):
        if self._bounds is None:
            self._bounds = VolumeBounds(x, y, z, x, y, z)
            return
        b = self._bounds
        self._bounds = VolumeBounds(min(b.min_x, x), min(b.min_y, y), min(b.min_z, z),
                                    max(b.max_x, x), max(b.max_y, y), max(b.max_z, z))

    def set(self, x, y, z, block, state=VoxelState.SOLID):
        self.voxels[(x, y, z)] = Voxel(block, VoxelState(state))
        self._extend(x, y, z)

    def carve(self, x, y, z):
        self.voxels[(x, y, z)] = Voxel(None, VoxelState.AIR_FORCED)
        self._extend(x, y, z)

    def get(self, x, y, z) -> Optional[Voxel]:
        return self.voxels.get((x, y, z))

    def clear(self):
        self.voxels.clear()
        self._bounds = None

    def get_bounds(self) -> Optional[VolumeBounds]:
        """Inclusive bounds of every touched voxel, or None when empty."""
        return self._bounds

    def __len__(self):
        return len(self.voxels)

    def __iter__(self):
        for (x, y, z), voxel in self.voxels.items():
            yield x, y, z, voxel.block, voxel.state

    def blend_into(self, block_map: BlockMap, origin=(0, 0, 0),
                   height_fn: Callable[[int, int], int] = None):
        """
        Writes the volume into world blocks at `origin`. `height_fn(x, z)`
        returns the terrain height in blocks; without it, above-terrain voxels
        always place and below-terrain voxels never do.
        """
        ox, oy, oz = origin
        for (lx, ly, lz), voxel in self.voxels.items():
            wx, wy, wz = ox + lx, oy + ly, oz + lz
            state = voxel.state

            if state is VoxelState.AIR_FORCED:
                block_map.carve(wx, wy, wz)
            elif state is VoxelState.SOLID:
                block_map.set(wx, wy, wz, voxel.block)
            elif state is VoxelState.SOLID_ABOVE_TERRAIN:
                if height_fn is None or wy >= height_fn(wx, wz):
                    block_map.set(wx, wy, wz, voxel.block)
            elif state is VoxelState.SOLID_BELOW_TERRAIN:
                if height_fn is not None and wy < height_fn(wx, wz):
                    block_map.set(wx, wy, wz, voxel.block)

    def to_block_map(self) -> BlockMap:
        """Solid voxels only, in local coordinates."""
        return BlockMap({key: v.block for key, v in self.voxels.items()
                         if is_solid_state(v.state) and v.block is not None})

    def translate(self, dx: int, dy: int, dz: int) -> 'VoxelVolume':
        moved = VoxelVolume()
        for (x, y, z), voxel in self.voxels.items():
            moved.voxels[(x + dx, y + dy, z + dz)] = voxel
            moved._extend(x + dx, y + dy, z + dz)
        return moved

    def rotate_y(self, quarter_turns: int) -> 'VoxelVolume':
        """Rotates clockwise (seen from above) about the local y axis."""
        turns = quarter_turns % 4
        rotated = VoxelVolume()
        for (x, y, z), voxel in self.voxels.items():
            if turns == 1:
                x, z = -z, x
            elif turns == 2:
                x, z = -x, -z
            elif turns == 3:
                x, z = z, -x
            rotated.voxels[(x, y, z)] = voxel
            rotated._extend(x, y, z)
        return rotated

    def merge(self, other: 'VoxelVolume', offset=(0, 0, 0)):
        dx, dy, dz = offset
        for (x, y, z), voxel in other.voxels.items():
            self.set(x + dx, y + dy, z + dz, voxel.block, voxel.state)

# --- Shape helpers ---

def fill_box(target: VoxelTarget, min_x, min_y, min_z, max_x, max_y, max_z, block, state=VoxelState.SOLID):
    for y in range(min_y, max_y):
        for x in range(min_x, max_x):
            for z in range(min_z, max_z):
                target.set(x, y, z, block, state)

def carve_box(target: VoxelTarget, min_x, min_y, min_z, max_x, max_y, max_z):
    for y in range(min_y, max_y):
        for x in range(min_x, max_x):
            for z in range(min_z, max_z):
                target.carve(x, y, z)

def _sphere_cells(cx, cy, cz, radius):
    r2 = radius * radius
    for y in range(cy - radius, cy + radius + 1):
        for x in range(cx - radius, cx + radius + 1):
            for z in range(cz - radius, cz + radius + 1):
                dx, dy, dz = x - cx, y - cy, z - cz
                if dx * dx + dy * dy + dz * dz <= r2:
                    yield x, y, z

def fill_sphere(target: VoxelTarget, cx, cy, cz, radius, block, state=VoxelState.SOLID):
    for x, y, z in _sphere_cells(cx, cy, cz, radius):
        target.set(x, y, z, block, state)

def carve_sphere(target: VoxelTarget, cx, cy, cz, radius):
    for x, y, z in _sphere_cells(cx, cy, cz, radius):
        target.carve(x, y, z)

def fill_cylinder(target: VoxelTarget, cx, base_y, cz, radius, height, block, state=VoxelState.SOLID):
    r2 = radius * radius
    for y in range(base_y, base_y + height):
        for x in range(cx - radius, cx + radius + 1):
            for z in range(cz - radius, cz + radius + 1):
                dx, dz = x - cx, z - cz
                if dx * dx + dz * dz <= r2:
                    target.set(x, y, z, block, state)

def fill_terrain_column(target: VoxelTarget, x: int, z: int, height: int, biome: str, water_level: int = None):
    """
    Fills one terrain column: the biome's surface block on top, its subsurface
    block for up to SUBSURFACE_DEPTH blocks below, stone beneath. With a water
    level, water fills from the surface up to (excluding) that level.
    """
    info = BIOMES[biome]
    for y in range(height):
        if y == height - 1:
            block = info.surface
        elif y >= height - 1 - SUBSURFACE_DEPTH:
            block = info.subsurface
        else:
            block = BEDROCK_BLOCK
        target.set(x, y, z, block, VoxelState.SOLID)

    if water_level is not None and (height < water_level or is_water_biome(biome)):
        for y in range(height, water_level):
            target.set(x, y, z, WATER_BLOCK, VoxelState.SOLID)
