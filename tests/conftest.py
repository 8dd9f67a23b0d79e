import os

# must be set before bharatrewards.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

import bharatrewards.models  # noqa: F401
from bharatrewards.db.base import Base
from bharatrewards.db.sessions import SessionLocal, engine
from bharatrewards.services.storage_service import StorageService


class FakeGenerator:
    """Stands in for OpenAIService."""

    def __init__(self, items=None, error=None):
        self.items = items
        self.error = error
        self.calls = []

    def generate_questions(self, category, count):
        self.calls.append((category, count))
        if self.error is not None:
            raise self.error
        if self.items is not None:
            return self.items

        items = []
        for i in range(count):
            item = {"questionText": f"{category} generated {i}", "correctAnswer": str(i)}
            if category == "QUIZ":
                item["options"] = [str(i), "x", "y", "z"]
            items.append(item)
        return items


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(db):
    return StorageService(db)


@pytest.fixture
def seeded_storage(storage):
    storage.initialize()
    return storage


@pytest.fixture
def client(db):
    from bharatrewards.main import app

    with TestClient(app) as c:
        yield c


def login_headers(client, email, password):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client):
    return login_headers(client, "admin@bharatrewards.com", "admin")


@pytest.fixture
def user_headers(client):
    response = client.post(
        "/auth/register",
        json={"name": "Asha", "email": "asha@x.com", "password": "pw"},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
