"""
Tests for the voxel targets and shape helpers.
"""

import pytest

from terrain_generator.voxel import (
    BlockMap, VoxelState, VoxelTarget, VoxelVolume, carve_box, carve_sphere, fill_box,
    fill_cylinder, fill_sphere, fill_terrain_column, is_solid_state
)


def test_targets_share_the_interface():
    assert isinstance(BlockMap(), VoxelTarget)
    assert isinstance(VoxelVolume(), VoxelTarget)
    with pytest.raises(TypeError):
        VoxelTarget()


def test_block_map_set_and_carve():
    blocks = BlockMap()
    blocks.set(1, 2, 3, 'stone')
    assert blocks.get(1, 2, 3) == 'stone'
    assert (1, 2, 3) in blocks
    blocks.carve(1, 2, 3)
    assert blocks.get(1, 2, 3) is None
    blocks.carve(9, 9, 9)
    assert len(blocks) == 0


def test_fill_box_is_half_open():
    blocks = BlockMap()
    fill_box(blocks, 0, 0, 0, 2, 3, 4, 'rock')
    assert len(blocks) == 2 * 3 * 4
    assert (1, 2, 3) in blocks
    assert (2, 0, 0) not in blocks


def test_helpers_work_on_either_target():
    for target in (BlockMap(), VoxelVolume()):
        fill_box(target, 0, 0, 0, 3, 3, 3, 'rock')
        carve_box(target, 1, 1, 1, 2, 2, 2)
        assert len(target) in (26, 27)


def test_sphere_radius_is_inclusive():
    blocks = BlockMap()
    fill_sphere(blocks, 0, 0, 0, 1, 'rock')
    assert len(blocks) == 7
    carve_sphere(blocks, 0, 0, 0, 1)
    assert len(blocks) == 0


def test_cylinder():
    blocks = BlockMap()
    fill_cylinder(blocks, 0, 5, 0, 1, 2, 'rock')
    assert len(blocks) == 5 * 2
    assert (0, 6, 0) in blocks
    assert (0, 7, 0) not in blocks


def test_volume_records_states_and_bounds():
    volume = VoxelVolume()
    assert volume.get_bounds() is None
    volume.set(0, 0, 0, 'planks')
    volume.set(2, 5, -1, 'glass', VoxelState.SOLID_ABOVE_TERRAIN)
    volume.carve(1, 1, 1)

    assert volume.get(1, 1, 1).state is VoxelState.AIR_FORCED
    assert volume.get(2, 5, -1).state is VoxelState.SOLID_ABOVE_TERRAIN
    bounds = volume.get_bounds()
    assert (bounds.min_x, bounds.min_y, bounds.min_z) == (0, 0, -1)
    assert (bounds.max_x, bounds.max_y, bounds.max_z) == (2, 5, 1)

    volume.clear()
    assert len(volume) == 0 and volume.get_bounds() is None


def test_blend_respects_terrain_height():
    world = BlockMap({(10, 4, 10): 'dirt', (10, 8, 10): 'stone'})
    volume = VoxelVolume()
    volume.set(0, 0, 0, 'foundation', VoxelState.SOLID_BELOW_TERRAIN)   # y = 3
    volume.set(0, 2, 0, 'wall', VoxelState.SOLID_ABOVE_TERRAIN)         # y = 5
    volume.set(0, 1, 0, 'ghost', VoxelState.SOLID_ABOVE_TERRAIN)        # y = 4, below surface
    volume.carve(0, 5, 0)                                                # y = 8
    volume.set(1, 0, 0, 'ignored', VoxelState.TERRAIN)

    volume.blend_into(world, origin=(10, 3, 10), height_fn=lambda x, z: 5)

    assert world.get(10, 3, 10) == 'foundation'
    assert world.get(10, 5, 10) == 'wall'
    assert world.get(10, 4, 10) == 'dirt'
    assert world.get(10, 8, 10) is None
    assert world.get(11, 3, 10) is None


def test_blend_without_height_function():
    world = BlockMap()
    volume = VoxelVolume()
    volume.set(0, 0, 0, 'a', VoxelState.SOLID_ABOVE_TERRAIN)
    volume.set(1, 0, 0, 'b', VoxelState.SOLID_BELOW_TERRAIN)
    volume.blend_into(world)
    assert world.get(0, 0, 0) == 'a'
    assert world.get(1, 0, 0) is None


def test_transforms_return_new_volumes():
    volume = VoxelVolume()
    volume.set(1, 0, 0, 'a')
    volume.set(0, 0, 2, 'b')

    moved = volume.translate(5, 1, 0)
    assert moved.get(6, 1, 0).block == 'a'
    assert volume.get(6, 1, 0) is None

    rotated = volume.rotate_y(1)
    assert rotated.get(0, 0, 1).block == 'a'
    assert rotated.get(-2, 0, 0).block == 'b'
    assert volume.rotate_y(4).voxels == volume.voxels


def test_merge_and_block_map_conversion():
    a = VoxelVolume()
    a.set(0, 0, 0, 'a')
    b = VoxelVolume()
    b.set(0, 0, 0, 'b')
    b.carve(1, 0, 0)
    a.merge(b, offset=(0, 1, 0))

    assert a.get(0, 1, 0).block == 'b'
    blocks = a.to_block_map()
    assert dict(iter(blocks)) == {(0, 0, 0): 'a', (0, 1, 0): 'b'}


def test_state_helpers():
    assert is_solid_state(VoxelState.SOLID_BELOW_TERRAIN)
    assert not is_solid_state(VoxelState.AIR_FORCED)
    assert not is_solid_state(VoxelState.TERRAIN)


def test_terrain_column_layers():
    blocks = BlockMap()
    fill_terrain_column(blocks, 0, 0, 6, 'plains')
    assert blocks.get(0, 5, 0) == 'grass'
    assert [blocks.get(0, y, 0) for y in (2, 3, 4)] == ['dirt'] * 3
    assert blocks.get(0, 1, 0) == 'stone'
    assert blocks.get(0, 6, 0) is None


def test_terrain_column_with_water():
    blocks = BlockMap()
    fill_terrain_column(blocks, 0, 0, 3, 'ocean', water_level=6)
    assert blocks.get(0, 2, 0) == 'sand'
    assert [blocks.get(0, y, 0) for y in (3, 4, 5)] == ['water'] * 3
    assert blocks.get(0, 6, 0) is None
