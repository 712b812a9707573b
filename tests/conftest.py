# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

import config
import database
from main import create_app
from store import TaskStore


@pytest.fixture()
def settings() -> config.Settings:
    # explicit settings: no env lookups, no sample data
    return config.Settings(seed_sample_tasks=False, configure_logging=False)


@pytest.fixture()
def app(settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def store():
    """A TaskStore on its own in-memory database."""
    engine = database.create_db_engine("sqlite://")
    database.init_db(engine)
    yield TaskStore(database.create_session_factory(engine))
    engine.dispose()


@pytest.fixture()
def make_task(client):
    def _make(**fields):
        fields.setdefault("title", "Test Task")
        response = client.post("/tasks", json=fields)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
