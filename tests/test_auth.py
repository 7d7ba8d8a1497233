"""Tests for registration, login, email verification and the current user"""

import pytest
from fastapi.testclient import TestClient

from flocka.services.token import TokenService


class TestRegistration:
    def test_register(self, test_app: TestClient):
        r = test_app.post(
            "/auth/register",
            json={"email": "Alice@Example.com", "name": "Alice", "password": "password123"},
        )
        assert r.status_code == 201, r.text
        body = r.json()
        assert body["success"] is True
        user = body["data"]["user"]
        assert user["email"] == "alice@example.com"
        assert user["name"] == "Alice"
        assert user["email_verified"] is False
        assert "hashed_password" not in user
        # no mail api key in tests
        assert body["data"]["email_sent"] is False

    def test_register_duplicate_email(self, test_app: TestClient):
        r = test_app.post(
            "/auth/register",
            json={"email": "alice@example.com", "name": "Alice 2", "password": "password123"},
        )
        assert r.status_code == 409, r.text
        assert r.json()["success"] is False
        assert r.json()["error_code"] == "email_already_exists"

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "not-an-email", "name": "Bob", "password": "password123"},
            {"email": "bob@example.com", "name": "Bob", "password": "short"},
            {"email": "bob@example.com", "name": "", "password": "password123"},
        ],
    )
    def test_register_validation(self, test_app: TestClient, payload):
        r = test_app.post("/auth/register", json=payload)
        assert r.status_code == 422, r.text
        assert r.json()["error_code"] == "validation_error"

    def test_login(self, test_app: TestClient):
        r = test_app.post(
            "/auth/login", json={"email": "ALICE@example.com", "password": "password123"}
        )
        assert r.status_code == 200, r.text
        data = r.json()["data"]
        assert data["token"]
        assert data["user"]["email"] == "alice@example.com"

    def test_login_wrong_password(self, test_app: TestClient):
        r = test_app.post(
            "/auth/login", json={"email": "alice@example.com", "password": "wrong-password"}
        )
        assert r.status_code == 401, r.text
        assert r.json()["error_code"] == "invalid_login"

    def test_login_unknown_email(self, test_app: TestClient):
        r = test_app.post(
            "/auth/login", json={"email": "nobody@example.com", "password": "password123"}
        )
        assert r.status_code == 401, r.text
        assert r.json()["error_code"] == "invalid_login"


class TestSession:
    @pytest.fixture(scope="class")
    def user(self, user_factory):
        return user_factory("carol@example.com", name="Carol")

    def test_read_me(self, test_app: TestClient, user):
        r = test_app.get("/users/me", headers=user["headers"])
        assert r.status_code == 200, r.text
        assert r.json()["data"]["id"] == user["id"]
        assert r.json()["data"]["name"] == "Carol"

    def test_read_me_under_auth(self, test_app: TestClient, user):
        r = test_app.get("/auth/me", headers=user["headers"])
        assert r.status_code == 200, r.text
        assert r.json()["data"]["email"] == "carol@example.com"

        r = test_app.get("/auth/me")
        assert r.status_code == 401, r.text

    def test_missing_header(self, test_app: TestClient):
        r = test_app.get("/users/me")
        assert r.status_code == 401, r.text
        assert r.json()["error_code"] == "token_missing"

    def test_wrong_scheme(self, test_app: TestClient, user):
        r = test_app.get("/users/me", headers={"Authorization": f"Token {user['token']}"})
        assert r.status_code == 401, r.text
        assert r.json()["error_code"] == "token_missing"

    def test_garbage_token(self, test_app: TestClient):
        r = test_app.get("/users/me", headers={"Authorization": "Bearer garbage"})
        assert r.status_code == 401, r.text
        assert r.json()["error_code"] == "token_invalid"

    def test_verify_email(self, test_app: TestClient, user, container_factory, test_config):
        container, uow = container_factory()
        with uow:
            token_service = TokenService(
                user_service=container.user_service, config=test_config
            )
            verification_token = token_service.generate_email_verification_token(
                container.user_service.get(user["id"])
            )

        # a verification token is not a session token
        r = test_app.get(
            "/users/me", headers={"Authorization": f"Bearer {verification_token}"}
        )
        assert r.status_code == 401, r.text

        r = test_app.post("/auth/verify-email", json={"token": verification_token})
        assert r.status_code == 200, r.text
        assert r.json()["data"]["email_verified"] is True

        r = test_app.get("/users/me", headers=user["headers"])
        assert r.json()["data"]["email_verified"] is True

    def test_session_token_does_not_verify_email(self, test_app: TestClient, user):
        r = test_app.post("/auth/verify-email", json={"token": user["token"]})
        assert r.status_code == 400, r.text
        assert r.json()["error_code"] == "verification_token_invalid"


class TestDeleteAccount:
    def test_delete_me_removes_everything(
        self, test_app: TestClient, user_factory, card_factory
    ):
        dave = user_factory("dave@example.com", name="Dave")
        erin = user_factory("erin@example.com", name="Erin")
        dave_card = card_factory(dave, "Dave")
        erin_card = card_factory(erin, "Erin")
        r = test_app.post(
            "/exchanges",
            json={"collected_card_id": dave_card["id"]},
            headers=erin["headers"],
        )
        assert r.status_code == 201, r.text

        r = test_app.delete("/users/me", headers=dave["headers"])
        assert r.status_code == 200, r.text
        assert r.json()["data"] == dave["id"]

        # the token outlives the account but no longer authenticates
        r = test_app.get("/users/me", headers=dave["headers"])
        assert r.status_code == 401, r.text
        assert r.json()["error_code"] == "token_invalid"

        r = test_app.get(f"/cards/public/{dave_card['id']}")
        assert r.status_code == 404, r.text

        # Dave's card is gone from Erin's collection, her own card is intact
        r = test_app.get("/exchanges", headers=erin["headers"])
        assert r.json()["data"]["total"] == 0
        r = test_app.get(f"/cards/{erin_card['id']}", headers=erin["headers"])
        assert r.status_code == 200, r.text

        r = test_app.post(
            "/auth/login", json={"email": "dave@example.com", "password": "password123"}
        )
        assert r.status_code == 401, r.text

    def test_delete_me_removes_card_images(
        self, test_app: TestClient, user_factory, card_factory, storage, container_factory
    ):
        frank = user_factory("frank@example.com", name="Frank")
        key = f"cards/{frank['id']}/avatar.png"
        storage.put(key, b"\x89PNG\r\n\x1a\n", "image/png")
        card_factory(frank, "Frank", image_key=key)

        container, uow = container_factory()
        with pytest.raises(RuntimeError):
            with uow:
                container.user_service.delete(frank["id"])
                raise RuntimeError("abort")
        assert key in storage.objects

        r = test_app.delete("/users/me", headers=frank["headers"])
        assert r.status_code == 200, r.text
        assert key not in storage.objects
