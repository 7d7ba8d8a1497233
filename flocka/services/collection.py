"""Collection ledger. One row per (collector, collected card), never duplicated."""

import logging

from fastapi import Depends
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from flocka.errors.common import NotFoundError
from flocka.errors.exchange import AlreadyCollected, SelfExchange
from flocka.models.base import new_id, utcnow
from flocka.models.exchange import Exchange
from flocka.schemas.exchange import CollectSchema, ExchangeUpdateSchema
from flocka.services.base import BaseService, OwnedServiceMixin
from flocka.services.card import CardService
from flocka.uow import get_uow

logger = logging.getLogger(__name__)

METADATA_FIELDS = ("memo", "location_name", "latitude", "longitude")


class CollectionService(OwnedServiceMixin[Exchange], BaseService[Exchange]):
    model = Exchange
    owner_field = "owner_user_id"

    def __init__(
        self,
        db: Session = Depends(get_uow),
        card_service: CardService = Depends(),
    ):
        self.db = db
        self.card_service = card_service

    def find_entry(self, collector_user_id: str, card_id: str) -> Exchange | None:
        return (
            self.db.query(self.model)
            .filter(
                self.model.owner_user_id == collector_user_id,
                self.model.collected_card_id == card_id,
            )
            .first()
        )

    def list_for(self, user_id: str) -> list[Exchange]:
        return (
            self.db.query(self.model)
            .filter(self.model.owner_user_id == user_id)
            .order_by(self.model.created_at.desc())
            .all()
        )

    def get_for(self, entry_id: str, caller_user_id: str) -> Exchange:
        entry = self.find(entry_id)
        # entries of other users are not disclosed
        if entry is None or entry.owner_user_id != caller_user_id:
            raise NotFoundError(f"Exchange id={entry_id}")
        return entry

    def update(
        self, entry_id: str, schema: ExchangeUpdateSchema, caller_user_id: str
    ) -> Exchange:
        entry = self.get_owned(entry_id, caller_user_id)
        for key, value in schema.model_dump(exclude_unset=True).items():
            setattr(entry, key, value)
        entry.modified_at = utcnow()
        self.db.flush()
        self.db.refresh(entry)
        return entry

    def delete(self, entry_id: str, caller_user_id: str) -> str:  # type: ignore[override]
        entry = self.get_owned(entry_id, caller_user_id)
        self.db.delete(entry)
        self.db.flush()
        return entry_id

    def _insert_ignoring_duplicates(self, values: dict) -> bool:
        dialect = self.db.get_bind().dialect.name
        if dialect in ("sqlite", "postgresql"):
            insert = sqlite_insert if dialect == "sqlite" else postgresql_insert
            stmt = (
                insert(Exchange)
                .values(**values)
                .on_conflict_do_nothing(
                    index_elements=["owner_user_id", "collected_card_id"]
                )
            )
            return self.db.execute(stmt).rowcount == 1
        # other backends, rely on the unique constraint inside a savepoint
        try:
            with self.db.begin_nested():
                self.db.add(Exchange(**values))
        except IntegrityError:
            return False
        return True

    def add_if_absent(
        self, collector_user_id: str, card_id: str, metadata: dict | None = None
    ) -> tuple[Exchange, bool]:
        """Put the card into the collector's ledger unless it is already there.

        Returns the ledger entry and whether this call created it. Losing an
        insert race to a concurrent request counts as already present.
        """
        values = {
            "id": new_id(),
            "created_at": utcnow(),
            "owner_user_id": collector_user_id,
            "collected_card_id": card_id,
        }
        for key in METADATA_FIELDS:
            values[key] = (metadata or {}).get(key)
        created = self._insert_ignoring_duplicates(values)
        entry = self.find_entry(collector_user_id, card_id)
        if entry is None:
            # the conflicting row vanished between insert and read
            raise NotFoundError(f"Exchange owner={collector_user_id} card={card_id}")
        if created:
            logger.info(
                "Card collected card_id=%s collector=%s", card_id, collector_user_id
            )
        return entry, created

    def collect(self, schema: CollectSchema, collector_user_id: str) -> Exchange:
        """Single direction collect of somebody else's card."""
        card = self.card_service.get(schema.collected_card_id)
        if card.user_id == collector_user_id:
            raise SelfExchange
        if self.find_entry(collector_user_id, card.id) is not None:
            raise AlreadyCollected(f"card_id={card.id}")
        metadata = schema.model_dump(include=set(METADATA_FIELDS))
        entry, created = self.add_if_absent(collector_user_id, card.id, metadata)
        if not created:
            raise AlreadyCollected(f"card_id={card.id}")
        return entry
