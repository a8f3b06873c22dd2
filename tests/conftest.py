"""
Pytest configuration and fixtures.
"""

import pytest
import tempfile
import shutil
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from kanban_board.tasks.kanban import KanbanBoard
from kanban_board.tasks.storage import CardStore, LocalStorage


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp, ignore_errors=True)


@pytest.fixture
def storage(temp_dir):
    """LocalStorage file inside the temp dir."""
    return LocalStorage(temp_dir / "local_storage.json")


@pytest.fixture
def store(storage):
    """CardStore with nothing persisted yet."""
    return CardStore(storage)


@pytest.fixture
def empty_store(store):
    """CardStore holding an empty collection (no seed card)."""
    store.storage.set_item(store.key, "[]")
    return store


@pytest.fixture
def board(empty_store):
    """KanbanBoard starting from an empty collection."""
    return KanbanBoard(empty_store)


@pytest.fixture(autouse=True)
def isolated_config(temp_dir, monkeypatch):
    """Keep config reads/writes out of the real home directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir / "config"))
    monkeypatch.setenv("LOCALAPPDATA", str(temp_dir / "config"))
