import mongomock
import pytest
from fastapi.testclient import TestClient

from inventory_api.config import Settings, get_settings
from inventory_api.database import ensure_indexes, get_database, get_db
from inventory_api.main import app

TEST_SETTINGS = Settings(jwt_secret="test-secret")

PASSWORD = "Abcd123!"

USER = {
    "firstName": "Jo",
    "lastName": "Do",
    "email": "j@d.com",
    "password": PASSWORD,
    "confirmPassword": PASSWORD,
}

PRODUCT = {
    "name": "Olive Oil",
    "price": 12.5,
    "description": "Cold pressed, 1L",
    "imageUrl": "https://cdn.shop.io/olive-oil.png",
}


@pytest.fixture
def settings():
    return TEST_SETTINGS


@pytest.fixture
def db():
    database = mongomock.MongoClient()["inventory_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(db, settings):
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def user(client):
    response = client.post("/v1/user", json=USER)
    assert response.status_code == 200
    return response.json()["data"]


@pytest.fixture
def token(client, user):
    response = client.post("/v1/login", json={"email": USER["email"], "password": PASSWORD})
    assert response.status_code == 200
    return response.json()["token"]


@pytest.fixture
def auth(token, settings):
    return {settings.auth_header: token}


@pytest.fixture
def product(client, auth):
    response = client.post("/v1/product", json=PRODUCT, headers=auth)
    assert response.status_code == 200
    return response.json()["data"]
