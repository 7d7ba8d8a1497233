"""Test configuration and shared fixtures"""

import os

# must be set before flocka.config is imported, its defaults read the environment
os.environ.setdefault("FLOCKA_SECRET_KEY", "flocka-test-secret-key-0123456789abcdef")
os.environ.setdefault("FLOCKA_BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from flocka.app import app
from flocka.config import Config, get_config
from flocka.db import DatabaseConnection
from flocka.dependencies.services import ServiceContainer
from flocka.errors.card import ImageNotFound
from flocka.services.storage import get_object_storage
from flocka.uow import UnitOfWork


class InMemoryObjectStorage:
    """Stands in for the S3 bucket in tests."""

    def __init__(self):
        self.objects: dict[str, tuple[bytes, str]] = {}

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self.objects[key] = (data, content_type)

    def get(self, key: str) -> tuple[bytes, str]:
        if key not in self.objects:
            raise ImageNotFound(key)
        return self.objects[key]

    def delete(self, key: str) -> None:
        self.objects.pop(key, None)

    def delete_quietly(self, key: str) -> None:
        self.delete(key)

    def presigned_put_url(self, key: str, content_type: str, expires_in: int = 3600) -> str:
        return f"https://storage.test/{key}?content-type={content_type}&expires={expires_in}"


# each test class have it's own empty database
@pytest.fixture(scope="class")
def test_config():
    return Config(
        # overwrite application name so it will use another database file
        app_name="flocka-test",
        cleanup_api_keys=["valid-cleanup-key"],
    )


@pytest.fixture(scope="class")
def storage():
    return InMemoryObjectStorage()


@pytest.fixture(scope="class")
def test_app(test_config: Config, storage: InMemoryObjectStorage):
    app.dependency_overrides = {
        get_config: lambda: test_config,
        get_object_storage: lambda: storage,
    }
    DatabaseConnection(config=test_config)

    client = TestClient(app)
    yield client
    app.dependency_overrides = {}
    # clean up test database file after tests
    DatabaseConnection.dispose(test_config.database_url)
    if os.path.exists(test_config.database_path):
        os.remove(test_config.database_path)


@pytest.fixture(scope="class")
def container_factory(test_app: TestClient, test_config: Config, storage):
    """Services bound to a fresh unit of work, for tests that skip HTTP."""

    def f() -> tuple[ServiceContainer, UnitOfWork]:
        session = DatabaseConnection(test_config).get_session()
        uow = UnitOfWork(session)
        container = ServiceContainer(uow, test_config)
        container._storage = storage
        return container, uow

    return f


@pytest.fixture(scope="class")
def user_factory(test_app: TestClient):
    """Register and log in a user, returns its id, token and auth headers."""

    def f(email: str, name: str = "Test User", password: str = "password123"):
        r = test_app.post(
            "/auth/register",
            json={"email": email, "name": name, "password": password},
        )
        assert r.status_code == 201, r.text
        r = test_app.post("/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        data = r.json()["data"]
        return {
            "id": data["user"]["id"],
            "email": email,
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }

    return f


@pytest.fixture(scope="class")
def card_factory(test_app: TestClient):
    """Create a card for the given user, returns the card json."""

    def f(user: dict, card_name: str, **fields):
        r = test_app.post(
            "/cards",
            json={"card_name": card_name, **fields},
            headers=user["headers"],
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    return f
