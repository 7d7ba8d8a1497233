"""Periodic sweep of expired exchange tokens and proximity requests.

Runs inside the API process when FLOCKA_CLEANUP_INTERVAL_MINUTES is set.
External schedulers can call POST /cleanup/expired-tokens instead.
"""

from __future__ import annotations

import asyncio
import logging

from flocka.config import Config, get_config
from flocka.db import DatabaseConnection
from flocka.dependencies.services import ServiceContainer
from flocka.schemas.cleanup import CleanupReportSchema
from flocka.uow import UnitOfWork

logger = logging.getLogger(__name__)


def run_cleanup(config: Config | None = None) -> CleanupReportSchema:
    config = config or get_config()
    db_conn = DatabaseConnection(config)
    session = db_conn.get_session()
    with UnitOfWork(session) as uow:
        container = ServiceContainer(uow, config)
        report = container.cleanup_service.sweep()
    return report


async def schedule_cleanup(config: Config) -> None:
    delay = config.cleanup_interval_minutes * 60
    while True:
        await asyncio.sleep(delay)
        try:
            report = await asyncio.to_thread(run_cleanup, config)
            logger.info(
                "Cleanup completed. tokens_deleted=%s requests_expired=%s",
                report.tokens_deleted,
                report.requests_expired,
            )
        except Exception:
            logger.exception("Cleanup failed")
