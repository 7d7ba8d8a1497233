"""Tests for the exchange notification feed"""

import pytest
from fastapi.testclient import TestClient


class TestExchangeLogFeed:
    @pytest.fixture(scope="class")
    def issuer(self, user_factory):
        return user_factory("issuer@example.com", name="Issuer")

    @pytest.fixture(scope="class")
    def scanners(self, user_factory, card_factory):
        result = []
        for name in ("First", "Second"):
            user = user_factory(f"{name.lower()}@example.com", name=name)
            user["card"] = card_factory(user, f"{name} card")
            result.append(user)
        return result

    @pytest.fixture(scope="class")
    def log_ids(self, test_app: TestClient, issuer, card_factory, scanners):
        card = card_factory(issuer, "Issuer card")
        r = test_app.post(f"/cards/{card['id']}/generate-qr", headers=issuer["headers"])
        qr_data = r.json()["data"]["qr_data"]
        ids = []
        for scanner in scanners:
            r = test_app.post(
                "/exchanges/qr",
                json={"credential": qr_data, "my_card_id": scanner["card"]["id"]},
                headers=scanner["headers"],
            )
            assert r.status_code == 200, r.text
            ids.append(r.json()["data"]["exchange_log_id"])
        return ids

    def test_feed_newest_first(self, test_app: TestClient, issuer, log_ids):
        r = test_app.get("/exchanges/qr-logs", headers=issuer["headers"])
        assert r.status_code == 200, r.text
        data = r.json()["data"]
        assert data["total"] == 2
        assert data["new_count"] == 2
        assert [log["id"] for log in data["logs"]] == list(reversed(log_ids))
        assert data["logs"][0]["scanner_user"]["name"] == "Second"

    def test_new_count_resets(self, test_app: TestClient, issuer, log_ids):
        r = test_app.get("/exchanges/qr-logs", headers=issuer["headers"])
        assert r.json()["data"]["new_count"] == 0

    def test_delete_by_stranger(self, test_app: TestClient, user_factory, log_ids):
        stranger = user_factory("stranger@example.com", name="Stranger")
        r = test_app.delete(f"/exchanges/qr-logs/{log_ids[0]}", headers=stranger["headers"])
        assert r.status_code == 403, r.text
        assert r.json()["error_code"] == "not_owner"

    def test_delete_unknown(self, test_app: TestClient, issuer):
        r = test_app.delete("/exchanges/qr-logs/missing", headers=issuer["headers"])
        assert r.status_code == 404, r.text

    def test_delete_by_participants(self, test_app: TestClient, issuer, scanners, log_ids):
        # the scanner may delete the entry about their own scan
        r = test_app.delete(
            f"/exchanges/qr-logs/{log_ids[0]}", headers=scanners[0]["headers"]
        )
        assert r.status_code == 200, r.text
        r = test_app.delete(f"/exchanges/qr-logs/{log_ids[1]}", headers=issuer["headers"])
        assert r.status_code == 200, r.text

        r = test_app.get("/exchanges/qr-logs", headers=issuer["headers"])
        assert r.json()["data"]["total"] == 0
