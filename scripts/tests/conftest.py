"""Pytest fixtures shared by the item store tests."""

import pytest

from fs_store import FsRepository
from item_store import ItemStore, session
from records import default_registry
from utils import log


@pytest.fixture(autouse=True)
def quiet_log(monkeypatch):
    """Keep the diagnostic stream on stderr only; never touch ~/.item_store."""
    monkeypatch.setattr(log, "LOG_TO_FILE", False)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def repo(tmp_path):
    return FsRepository(tmp_path / "repo")


@pytest.fixture
def world(registry, repo):
    with session(registry, repo, user="alice") as w:
        yield w


@pytest.fixture
def store(world):
    return ItemStore(world)
