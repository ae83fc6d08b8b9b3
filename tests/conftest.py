import mongomock
import pytest
from fastapi.testclient import TestClient

from database import ensure_indexes, get_db, optional_db
from main import app


@pytest.fixture
def db():
    client = mongomock.MongoClient()
    database = client["disasterCareHub_test"]
    ensure_indexes(database)
    yield database
    client.close()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[optional_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    def _register(email, password="secret123", name="Test User", role="donor", **extra):
        body = {"name": name, "email": email, "password": password, "role": role, **extra}
        return client.post("/api/v1/register", json=body)
    return _register
