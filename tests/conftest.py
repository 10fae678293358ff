# tests/conftest.py
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are read when api.server is first imported
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from viewaccess.manager import DisplayAccessManager  # noqa: E402
from viewaccess.models import DatabaseManager  # noqa: E402

API_KEY = "test-secret-key"


@pytest.fixture
def db_manager():
    """Temporary in-memory database."""
    manager = DatabaseManager("sqlite:///:memory:")
    manager.create_tables()
    yield manager
    manager.drop_tables()
    manager.dispose()


@pytest.fixture
def access_manager(db_manager):
    manager = DisplayAccessManager(db_manager)
    manager.save_role("editor", "Editor", 1)
    manager.save_role("admin", "Administrator", 2)
    manager.save_role("reviewer", "Reviewer <b>", 3)
    return manager


@pytest.fixture
def api_key_headers(monkeypatch):
    monkeypatch.setenv("API_KEY", API_KEY)
    return {"X-API-Key": API_KEY}


@pytest.fixture
def client(access_manager, api_key_headers):
    from fastapi.testclient import TestClient

    from api.dependencies import get_access_manager
    from api.server import app

    app.dependency_overrides[get_access_manager] = lambda: access_manager
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
