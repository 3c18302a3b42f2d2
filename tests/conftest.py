# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from catalog.config import get_settings
from catalog.main import app


@pytest.fixture()
def data_file(tmp_path):
    path = tmp_path / "products.json"
    path.write_text("[]", encoding="utf-8")
    return path


@pytest.fixture()
def client(data_file, monkeypatch):
    """TestClient whose requests hit a fresh backing file."""
    monkeypatch.setenv("CATALOG_DATA_PATH", str(data_file))
    get_settings.cache_clear()
    yield TestClient(app)
    get_settings.cache_clear()
