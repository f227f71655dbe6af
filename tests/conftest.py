"""Shared fixtures."""

from pathlib import Path
from typing import Iterator

import pytest

from slug_guard.config import Settings
from slug_guard.connectors.sqlite import SQLiteConnector
from slug_guard.core.store import PostStore
from slug_guard.core.synchronizer import SlugSynchronizer
from slug_guard.core.validation import ValidationPipeline
from slug_guard.models import Post


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Default settings pointing at a temporary database."""
    return Settings(database={"path": tmp_path / "blog.db"})


@pytest.fixture
def store(settings: Settings) -> Iterator[PostStore]:
    """Post store backed by a fresh SQLite file."""
    store = PostStore.open(settings)
    yield store
    store.close()


@pytest.fixture
def pipeline() -> ValidationPipeline:
    """Post validation pipeline with slug hooks and no uniqueness lookup."""
    pipeline = ValidationPipeline(rules=list(Post.rules))
    SlugSynchronizer().install(pipeline)
    return pipeline


@pytest.fixture
def memory_db() -> Iterator[SQLiteConnector]:
    connector = SQLiteConnector(":memory:")
    yield connector
    connector.close()
