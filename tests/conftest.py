"""
Shared fixtures.

Every test runs against the in-memory storage and document store, so no
credentials or network access are needed.
"""

import pytest
from fastapi.testclient import TestClient

from src.config.settings import Settings
from src.infrastructure.mongo import create_document_store
from src.infrastructure.mongo.repositories import (
    CommentRepository,
    UserRepository,
    VideoRepository,
)
from src.infrastructure.storage import MockStorageClient
from src.main import create_app


@pytest.fixture
def settings() -> Settings:
    """Settings with both mock modes on and no .env influence."""
    return Settings(
        _env_file=None,
        storage_mock_mode=True,
        document_store_mock_mode=True,
        identity_endpoint_url=None,
    )


@pytest.fixture
def client(settings):
    """TestClient with the lifespan running (clients built on app.state)."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def storage(client) -> MockStorageClient:
    return client.app.state.storage


@pytest.fixture
def video_repo(client) -> VideoRepository:
    return VideoRepository(client.app.state.documents.videos)


@pytest.fixture
def comment_repo(client) -> CommentRepository:
    return CommentRepository(client.app.state.documents.comments)


@pytest.fixture
def user_repo(client) -> UserRepository:
    return UserRepository(client.app.state.documents.users)


@pytest.fixture
def document_store():
    """A standalone in-memory document store for unit tests."""
    return create_document_store(mock_mode=True)
