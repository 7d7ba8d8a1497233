"""Tests for the collection ledger: single direction collect and entry management"""

import pytest
from fastapi.testclient import TestClient


class TestCollection:
    @pytest.fixture(scope="class")
    def collector(self, user_factory):
        return user_factory("collector@example.com", name="Collector")

    @pytest.fixture(scope="class")
    def author(self, user_factory):
        return user_factory("author@example.com", name="Author")

    @pytest.fixture(scope="class")
    def author_card(self, card_factory, author):
        return card_factory(
            author,
            "Author",
            links=[{"title": "Blog", "url": "https://blog.example.com"}],
        )

    @pytest.fixture(scope="class")
    def entry(self, test_app: TestClient, collector, author_card):
        r = test_app.post(
            "/exchanges",
            json={
                "collected_card_id": author_card["id"],
                "memo": "Conference",
                "location_name": "Hall B",
            },
            headers=collector["headers"],
        )
        assert r.status_code == 201, r.text
        return r.json()["data"]

    def test_collect(self, entry, collector, author_card):
        assert entry["owner_user_id"] == collector["id"]
        assert entry["card"]["id"] == author_card["id"]
        assert entry["card"]["owner_name"] == "Author"
        assert entry["card"]["links"][0]["title"] == "Blog"
        assert entry["memo"] == "Conference"
        assert entry["location"] == {"name": "Hall B", "latitude": None, "longitude": None}
        assert entry["collected_at"]

    def test_collect_twice(self, test_app: TestClient, entry, collector, author_card):
        r = test_app.post(
            "/exchanges",
            json={"collected_card_id": author_card["id"]},
            headers=collector["headers"],
        )
        assert r.status_code == 409, r.text
        assert r.json()["error_code"] == "already_collected"

    def test_collect_own_card(self, test_app: TestClient, author, author_card):
        r = test_app.post(
            "/exchanges",
            json={"collected_card_id": author_card["id"]},
            headers=author["headers"],
        )
        assert r.status_code == 400, r.text
        assert r.json()["error_code"] == "self_exchange"

    def test_collect_unknown_card(self, test_app: TestClient, collector):
        r = test_app.post(
            "/exchanges",
            json={"collected_card_id": "missing"},
            headers=collector["headers"],
        )
        assert r.status_code == 404, r.text
        assert r.json()["error_code"] == "card_not_found"

    def test_coordinates_come_in_pairs(self, test_app: TestClient, collector, author_card):
        r = test_app.post(
            "/exchanges",
            json={"collected_card_id": author_card["id"], "latitude": 10.0},
            headers=collector["headers"],
        )
        assert r.status_code == 422, r.text

    def test_list(self, test_app: TestClient, entry, collector, author):
        r = test_app.get("/exchanges", headers=collector["headers"])
        assert r.status_code == 200, r.text
        data = r.json()["data"]
        assert data["total"] == 1
        assert data["collections"][0]["id"] == entry["id"]

        r = test_app.get("/exchanges", headers=author["headers"])
        assert r.json()["data"]["total"] == 0

    def test_read_entry(self, test_app: TestClient, entry, collector, author):
        r = test_app.get(f"/exchanges/{entry['id']}", headers=collector["headers"])
        assert r.status_code == 200, r.text
        assert r.json()["data"]["memo"] == "Conference"

        # entries of others are not disclosed
        r = test_app.get(f"/exchanges/{entry['id']}", headers=author["headers"])
        assert r.status_code == 404, r.text
        assert r.json()["error_code"] == "not_found"

    def test_update_entry(self, test_app: TestClient, entry, collector, author):
        r = test_app.put(
            f"/exchanges/{entry['id']}",
            json={"memo": "Follow up next week", "latitude": 1.5, "longitude": 2.5},
            headers=collector["headers"],
        )
        assert r.status_code == 200, r.text
        data = r.json()["data"]
        assert data["memo"] == "Follow up next week"
        assert data["location"] == {"name": "Hall B", "latitude": 1.5, "longitude": 2.5}
        assert data["modified_at"] is not None

        r = test_app.put(
            f"/exchanges/{entry['id']}",
            json={"memo": "mine now"},
            headers=author["headers"],
        )
        assert r.status_code == 403, r.text
        assert r.json()["error_code"] == "not_owner"

    def test_delete_entry(self, test_app: TestClient, entry, collector, author, author_card):
        r = test_app.delete(f"/exchanges/{entry['id']}", headers=author["headers"])
        assert r.status_code == 403, r.text

        r = test_app.delete(f"/exchanges/{entry['id']}", headers=collector["headers"])
        assert r.status_code == 200, r.text
        assert r.json()["data"] == entry["id"]

        r = test_app.get(f"/exchanges/{entry['id']}", headers=collector["headers"])
        assert r.status_code == 404, r.text

        # the card can be collected again
        r = test_app.post(
            "/exchanges",
            json={"collected_card_id": author_card["id"]},
            headers=collector["headers"],
        )
        assert r.status_code == 201, r.text


class TestAddIfAbsent:
    def test_second_insert_is_skipped(self, user_factory, card_factory, container_factory):
        owner = user_factory("ledger-owner@example.com", name="Owner")
        collector = user_factory("ledger-collector@example.com", name="Collector")
        card = card_factory(owner, "Ledger")

        container, uow = container_factory()
        with uow:
            first, created = container.collection_service.add_if_absent(
                collector["id"], card["id"], {"memo": "one"}
            )
            assert created is True
            second, created_again = container.collection_service.add_if_absent(
                collector["id"], card["id"], {"memo": "two"}
            )
            assert created_again is False
            assert second.id == first.id
            assert second.memo == "one"

        container, uow = container_factory()
        with uow:
            assert len(container.collection_service.list_for(collector["id"])) == 1
