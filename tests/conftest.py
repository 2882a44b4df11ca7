"""Shared fixtures for the territory test suite."""

import pytest

from py_territory.core.elevation import ElevationOptions
from py_territory.core.noise import NoiseOptions
from py_territory.core.world_generator import GenerationOptions, WorldConfig
from py_territory.db.connection import Database, db

TEST_WIDTH = 48
TEST_HEIGHT = 32
TEST_SEED = 1337


class FakeTileStore:
    """In-memory stand-in for TileRepository that records every call."""

    def __init__(self, existing=0, fail_on_batch=None):
        self.existing = existing
        self.fail_on_batch = fail_on_batch
        self.batches = []
        self.committed = False
        self.rolled_back = False

    def count_tiles(self):
        return self.existing + sum(len(b) for b in self.batches)

    def bulk_insert_tiles(self, rows):
        if self.fail_on_batch is not None and len(self.batches) == self.fail_on_batch:
            raise IOError("disk full")
        self.batches.append(list(rows))

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True
        self.batches = []

    @property
    def rows(self):
        return [row for batch in self.batches for row in batch]


@pytest.fixture
def world_config():
    return WorldConfig(width=TEST_WIDTH, height=TEST_HEIGHT, seed=TEST_SEED)


@pytest.fixture
def textured_options():
    """Higher-frequency noise so small test worlds get several coastlines."""
    return GenerationOptions(
        elevation=ElevationOptions(noise=NoiseOptions(scale=0.1))
    )


@pytest.fixture
def fake_store():
    return FakeTileStore()


@pytest.fixture
def make_store():
    """Factory for stores with pre-existing tiles or injected write failures."""
    return FakeTileStore


@pytest.fixture
def sqlite_db():
    """A fresh in-memory SQLite database."""
    database = Database()
    database.initialize("sqlite://")
    yield database
    database.engine.dispose()


@pytest.fixture
def global_sqlite_db():
    """Point the module-level ``db`` used by the API at in-memory SQLite."""
    original_engine = db.engine
    original_session_local = db.SessionLocal

    db.initialize("sqlite://")

    yield db

    db.engine.dispose()
    db.engine = original_engine
    db.SessionLocal = original_session_local
