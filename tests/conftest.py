"""Shared pytest configuration and fixtures for tests."""

import sys
import io
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from kanbo.core import repository
from kanbo.core.ids import SequentialIds
from kanbo.core.persistence import BoardPersistence
from kanbo.core.repository import MemoryStorage
from kanbo.core.store import BoardStore


FIXED_NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def fixed_clock():
    return FIXED_NOW


@pytest.fixture(autouse=True)
def temp_db(monkeypatch, tmp_path):
    """Use temporary database for all tests."""
    db_path = tmp_path / "test_kanbo.db"
    monkeypatch.setattr(repository, "DB_PATH", db_path)
    monkeypatch.setattr(repository, "DB_DIR", tmp_path)
    yield db_path


@pytest.fixture
def ids():
    return SequentialIds()


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def store(ids, memory_storage):
    """Empty board with deterministic ids and clock, saving to memory."""
    return BoardStore(ids=ids, clock=fixed_clock, persistence=BoardPersistence(memory_storage))
