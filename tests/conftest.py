import pytest
from fastapi.testclient import TestClient

from kig_issues.core.config import StorageMode
from kig_issues.main import app
from kig_issues.services.data_access import DataAccessService
from kig_issues.services.providers import get_data_access


@pytest.fixture
def data_access():
    """Fresh in-memory store seeded with the demo fixtures."""
    return DataAccessService(StorageMode.MOCK)


@pytest.fixture
def client(data_access):
    app.dependency_overrides[get_data_access] = lambda: data_access
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def login(client, email="admin@kig.com", password="admin123"):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}
