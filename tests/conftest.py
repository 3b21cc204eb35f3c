import io
import logging
from pathlib import Path

import pytest

from synchro.git import SynchroRegistry
from tests.helpers import RemoteRepo


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("synchro")
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    logger.setLevel(previous_level)
    log_stream.close()


@pytest.fixture
def make_remote(tmp_path):
    """Factory for remote repositories under tmp_path/remotes."""

    def _make(name: str = "origin") -> RemoteRepo:
        return RemoteRepo(tmp_path / "remotes" / name)

    return _make


@pytest.fixture
def remote(make_remote):
    """Remote with ``main`` at c1 and ``feature`` at c2, a child of c1.

    The commit ids are available as ``remote.c1`` and ``remote.c2``.
    """
    repo = make_remote("modules.git")
    repo.c1 = repo.commit({"README": "first\n", "manifest.txt": "v1\n"}, "c1")
    repo.branch("feature")
    repo.checkout("feature")
    repo.c2 = repo.commit({"feature.txt": "feature\n", "manifest.txt": "v2\n"}, "c2")
    repo.checkout("main")
    return repo


@pytest.fixture
def cache_root(tmp_path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def registry(cache_root) -> SynchroRegistry:
    return SynchroRegistry(cache_root=cache_root)
