"""
Pytest configuration and fixtures.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set test environment (must happen before core.config is imported)
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["SEED_SAMPLE_DATA"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="lost-found-uploads-")

from core.storage import Repositories, StorageBackend  # noqa: E402
from core.storage.memory import InMemoryPostRepository, InMemoryUserRepository  # noqa: E402
from core.uploads import ImageStore  # noqa: E402
from manager.board import LostFoundBoard  # noqa: E402


@pytest.fixture
def users():
    return InMemoryUserRepository()


@pytest.fixture
def posts():
    return InMemoryPostRepository()


@pytest.fixture
def image_store(tmp_path):
    return ImageStore(upload_dir=str(tmp_path / "uploads"), max_bytes=1024)


@pytest.fixture
def board(users, posts, image_store):
    """Board over fresh in-memory repositories."""
    repos = Repositories(users=users, posts=posts, backend=StorageBackend.MEMORY)
    return LostFoundBoard(image_store=image_store, repositories=repos)


@pytest.fixture
def client():
    """API client with a fresh in-memory store per test."""
    from fastapi.testclient import TestClient

    from api.server import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
