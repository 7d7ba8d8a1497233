"""Service wiring outside of a request (background tasks, scripts)."""

from flocka.config import Config
from flocka.services.storage import ObjectStorageService
from flocka.uow import UnitOfWork


class ServiceContainer:
    """Builds services lazily around one session, the way Depends() does per request."""

    def __init__(self, db: UnitOfWork, config: Config):
        self.db = db
        self.config = config
        self._storage = None
        self._user_service = None
        self._card_service = None
        self._credential_service = None
        self._collection_service = None
        self._exchange_log_service = None
        self._reconciliation_service = None
        self._exchange_request_service = None
        self._cleanup_service = None

    @property
    def storage(self):
        if self._storage is None:
            self._storage = ObjectStorageService(self.config)
        return self._storage

    @property
    def user_service(self):
        if self._user_service is None:
            from flocka.services.user import UserService

            self._user_service = UserService(
                db=self.db, config=self.config, storage=self.storage
            )
        return self._user_service

    @property
    def card_service(self):
        if self._card_service is None:
            from flocka.services.card import CardService

            self._card_service = CardService(db=self.db, storage=self.storage)
        return self._card_service

    @property
    def credential_service(self):
        if self._credential_service is None:
            from flocka.services.credential import CredentialService

            self._credential_service = CredentialService(
                db=self.db, config=self.config, card_service=self.card_service
            )
        return self._credential_service

    @property
    def collection_service(self):
        if self._collection_service is None:
            from flocka.services.collection import CollectionService

            self._collection_service = CollectionService(
                db=self.db, card_service=self.card_service
            )
        return self._collection_service

    @property
    def exchange_log_service(self):
        if self._exchange_log_service is None:
            from flocka.services.exchange_log import ExchangeLogService

            self._exchange_log_service = ExchangeLogService(db=self.db)
        return self._exchange_log_service

    @property
    def reconciliation_service(self):
        if self._reconciliation_service is None:
            from flocka.services.reconciliation import ReconciliationService

            self._reconciliation_service = ReconciliationService(
                db=self.db,
                config=self.config,
                card_service=self.card_service,
                credential_service=self.credential_service,
                collection_service=self.collection_service,
                exchange_log_service=self.exchange_log_service,
            )
        return self._reconciliation_service

    @property
    def exchange_request_service(self):
        if self._exchange_request_service is None:
            from flocka.services.exchange_request import ExchangeRequestService

            self._exchange_request_service = ExchangeRequestService(
                db=self.db,
                config=self.config,
                user_service=self.user_service,
                card_service=self.card_service,
                reconciliation_service=self.reconciliation_service,
            )
        return self._exchange_request_service

    @property
    def cleanup_service(self):
        if self._cleanup_service is None:
            from flocka.services.cleanup import CleanupService

            self._cleanup_service = CleanupService(
                credential_service=self.credential_service,
                exchange_request_service=self.exchange_request_service,
            )
        return self._cleanup_service
