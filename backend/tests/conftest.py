"""Shared fixtures for the backend test suite."""

import pytest
from fastapi.testclient import TestClient

from services import asset_store
from services.config_manager import ConfigManager
from services.document_store import DocumentCollection

KV_ENV_VARS = (
    "KV_REST_API_URL",
    "KV_REST_API_TOKEN",
    "UPSTASH_REDIS_REST_URL",
    "UPSTASH_REDIS_REST_TOKEN",
)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point configuration at a fresh directory and forget cached backends."""
    monkeypatch.setenv("MDDIFF_CONFIG_DIR", str(tmp_path / "config"))
    for name in KV_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(asset_store, "_memory_backend", None)
    ConfigManager.reset_instance()
    yield ConfigManager.get_instance()
    ConfigManager.reset_instance()


@pytest.fixture
def client(monkeypatch):
    """Test client over a freshly seeded document workspace."""
    from main import app
    from routers import documents

    monkeypatch.setattr(documents, "collection", DocumentCollection())
    with TestClient(app) as test_client:
        yield test_client
