import mongomock
import pytest
from fastapi.testclient import TestClient

from catalogue.config import Settings
from catalogue.main import create_app

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"


@pytest.fixture
def settings() -> Settings:
    return Settings(jwt_secret_key=TEST_SECRET, db_name="shop_test")


@pytest.fixture
def db():
    """Fresh in-memory document store per test."""
    client = mongomock.MongoClient()
    yield client["shop_test"]
    client.close()


@pytest.fixture
def client(settings, db) -> TestClient:
    app = create_app(settings, db=db)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def token(client) -> str:
    """Register a user, log in and hand back the bearer token."""
    client.post("/user", json={"name": "A", "email": "a@x.com", "password": "p"})
    res = client.post("/login", json={"email": "a@x.com", "password": "p"})
    return res.json()["token"]


@pytest.fixture
def auth(token) -> dict:
    return {"Authorization": f"Bearer {token}"}
