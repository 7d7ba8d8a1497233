"""Database connection and initialization"""

import logging
import os
import threading
from typing import Any, Generator

from fastapi import Depends
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

# every model must be imported before the metadata is used
import flocka.models.card  # noqa: F401
import flocka.models.exchange  # noqa: F401
import flocka.models.exchange_log  # noqa: F401
import flocka.models.exchange_request  # noqa: F401
import flocka.models.exchange_token  # noqa: F401
import flocka.models.user  # noqa: F401
from flocka.config import Config, get_config
from flocka.models.base import BaseModel

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseConnection:
    engine: Engine
    session_local: sessionmaker[Session]
    # one engine, and so one connection pool, per database url
    _engines: dict[str, Engine] = {}
    _engines_lock = threading.Lock()

    def __init__(self, config: Config = Depends(get_config)) -> None:
        self.engine = self.get_engine(config)
        self.session_local = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
        )

    @classmethod
    def get_engine(cls, config: Config) -> Engine:
        """Engine of config.database_url, created with its tables on first use."""
        url = config.database_url
        with cls._engines_lock:
            engine = cls._engines.get(url)
            if engine is None:
                engine = cls._create_engine(config)
                cls._engines[url] = engine
                cls._create_all(engine)
        return engine

    @staticmethod
    def _create_engine(config: Config) -> Engine:
        if config.database_url.startswith("sqlite"):
            # Ensure the database folder exists.
            os.makedirs(config.database_path.parent, exist_ok=True)
            engine = create_engine(
                config.database_url, connect_args={"check_same_thread": False}
            )
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            return engine
        return create_engine(config.database_url, pool_pre_ping=True)

    @classmethod
    def dispose(cls, database_url: str) -> None:
        """Close the pooled connections of database_url and forget its engine."""
        with cls._engines_lock:
            engine = cls._engines.pop(database_url, None)
        if engine is not None:
            engine.dispose()

    @staticmethod
    def _create_all(engine: Engine) -> None:
        logger.info("Creating database tables...")
        BaseModel.metadata.create_all(bind=engine)
        logger.info("Database tables created.")

    def create_tables(self) -> None:
        """Create all database tables defined in models."""
        self._create_all(self.engine)

    def get_session(self) -> Session:
        """Return a new SQLAlchemy session."""
        return self.session_local()


def get_db(db_conn: DatabaseConnection = Depends()) -> Generator[Session, Any, None]:
    """
    Dependency for providing a SQLAlchemy session to services and tests.

    Yields:
        SQLAlchemy Session.
    """
    session = db_conn.get_session()
    try:
        yield session
    finally:
        session.close()
