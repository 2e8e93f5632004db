from datetime import timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

from config import Settings
from main import create_app


@pytest.fixture
def settings():
    return Settings(jwt_secret="test-secret", database_name="styleSyncTest", token_lifetime=timedelta(minutes=5))


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def db(mongo_client, settings):
    from database import ensure_indexes

    database = mongo_client[settings.database_name]
    ensure_indexes(database)
    return database


@pytest.fixture
def client(settings, mongo_client):
    app = create_app(settings, client=mongo_client)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def registered_user(client):
    payload = {"name": "Ada Lovelace", "email": "ada@example.com", "password": "s3cret-pass", "role": "admin"}
    response = client.post("/api/v1/register", json=payload)
    assert response.status_code == 201
    return payload
