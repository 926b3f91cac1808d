import os

# Point the app at an in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from database.database import Base, SessionLocal, engine
import main


@pytest.fixture(autouse=True)
def fresh_tables():
    """
    Recreate the schema for each test so no rows leak between tests.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    return TestClient(main.app)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_transaction(client):
    def _make(**overrides):
        payload = {"amount": 50, "type": "expense", "category": "Food", "description": "Groceries"}
        payload.update(overrides)
        response = client.post("/api/transactions", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["transaction"]
    return _make
