# Shared fixtures for the terrain generator tests.
import logging

import pytest

from terrain_generator.generator import WorldGenerator


@pytest.fixture(scope="session")
def logger():
    return logging.getLogger("TerrainTests")


@pytest.fixture(scope="session")
def make_generator(logger):
    """Factory that builds (and memoises) a WorldGenerator per config."""
    built = {}

    def _make(river_index=None, spine_index=None, **config):
        if river_index is not None or spine_index is not None:
            return WorldGenerator(config, logger, river_index=river_index, spine_index=spine_index)
        key = tuple(sorted((k, repr(v)) for k, v in config.items()))
        if key not in built:
            built[key] = WorldGenerator(config, logger)
        return built[key]

    return _make
