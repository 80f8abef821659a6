import mongomock
import pytest
from fastapi.testclient import TestClient

import auth
import config
import database
from main import app

ADMIN_EMAIL = "owner@shivay.com"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture(autouse=True)
def store():
    """A fresh in-memory MongoDB for every test."""
    client = mongomock.MongoClient()
    database.reset(client)
    yield client[config.MONGODB_DB]
    database.reset()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin(store):
    doc, _ = auth.create_admin(ADMIN_EMAIL, ADMIN_PASSWORD)
    return doc


@pytest.fixture
def admin_client(client, admin):
    res = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert res.status_code == 200
    return client
