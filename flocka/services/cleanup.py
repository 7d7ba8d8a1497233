"""Sweeps of expired exchange tokens and stale proximity requests."""

from fastapi import Depends

from flocka.schemas.cleanup import (
    CleanupCountsSchema,
    CleanupReportSchema,
    CleanupStatsSchema,
)
from flocka.services.credential import CredentialService
from flocka.services.exchange_request import ExchangeRequestService


class CleanupService:
    def __init__(
        self,
        credential_service: CredentialService = Depends(),
        exchange_request_service: ExchangeRequestService = Depends(),
    ):
        self.credential_service = credential_service
        self.exchange_request_service = exchange_request_service

    def sweep(self) -> CleanupReportSchema:
        return CleanupReportSchema(
            tokens_deleted=self.credential_service.sweep_expired(),
            requests_expired=self.exchange_request_service.sweep_expired(),
        )

    def stats(self) -> CleanupStatsSchema:
        return CleanupStatsSchema(
            expired=CleanupCountsSchema(
                tokens=self.credential_service.count_expired(),
                requests=self.exchange_request_service.count_pending(expired=True),
            ),
            active=CleanupCountsSchema(
                tokens=self.credential_service.count_active(),
                requests=self.exchange_request_service.count_pending(expired=False),
            ),
        )
