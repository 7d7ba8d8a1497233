"""Tests for database engine reuse"""

import os

from fastapi.testclient import TestClient

from flocka.config import Config
from flocka.db import DatabaseConnection


class TestDatabaseConnection:
    def test_engine_is_shared_per_url(self, test_app: TestClient, test_config: Config):
        first = DatabaseConnection(test_config)
        second = DatabaseConnection(test_config)
        assert first.engine is second.engine
        assert first.get_session() is not second.get_session()

    def test_requests_reuse_the_engine(self, test_app: TestClient, test_config: Config):
        engine = DatabaseConnection(test_config).engine
        r = test_app.get("/cards/public/does-not-exist")
        assert r.status_code == 404, r.text
        assert DatabaseConnection(test_config).engine is engine

    def test_other_url_gets_own_engine(self, test_app: TestClient, test_config: Config):
        other_config = Config(app_name="flocka-test-other")
        other = DatabaseConnection(other_config)
        try:
            assert other.engine is not DatabaseConnection(test_config).engine
        finally:
            DatabaseConnection.dispose(other_config.database_url)
            if os.path.exists(other_config.database_path):
                os.remove(other_config.database_path)

    def test_dispose_drops_the_engine(self, test_app: TestClient):
        config = Config(app_name="flocka-test-disposed")
        engine = DatabaseConnection(config).engine
        DatabaseConnection.dispose(config.database_url)
        try:
            assert DatabaseConnection(config).engine is not engine
        finally:
            DatabaseConnection.dispose(config.database_url)
            if os.path.exists(config.database_path):
                os.remove(config.database_path)
