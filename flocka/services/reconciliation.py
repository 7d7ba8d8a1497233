"""Exchange reconciliation engine.

Turns a presented credential, or an accepted proximity request, into a mutual
exchange: each side ends up with the other's card in its collection. Every
step is idempotent, redeeming the same credential twice changes nothing.
"""

import enum
import logging
from datetime import timedelta

from fastapi import Depends
from sqlalchemy.orm import Session

from flocka.config import Config, get_config
from flocka.errors.exchange import ExpiredCredential, InvalidCredential, SelfExchange
from flocka.models.base import utcnow
from flocka.models.card import Card
from flocka.models.exchange_token import ExchangeToken
from flocka.schemas.card import CardSummarySchema
from flocka.schemas.exchange import ExchangeMetadataSchema, LocationSchema
from flocka.schemas.reconciliation import (
    LedgerDirectionSchema,
    ReconciliationReceiptSchema,
)
from flocka.services.card import CardService
from flocka.services.collection import METADATA_FIELDS, CollectionService
from flocka.services.credential import CredentialService
from flocka.services.credential_codec import decode_credential
from flocka.services.exchange_log import ExchangeLogService
from flocka.uow import get_uow

logger = logging.getLogger(__name__)


class ConfirmationMode(enum.Enum):
    # credential redeemed, both sides committed right away and logged
    IMMEDIATE = "immediate"
    # proximity request accepted by its target, not logged
    REQUEST = "request"


MEMO_LABELS = {
    ConfirmationMode.IMMEDIATE: "QR exchange",
    ConfirmationMode.REQUEST: "Nearby exchange",
}


class ReconciliationService:
    def __init__(
        self,
        db: Session = Depends(get_uow),
        config: Config = Depends(get_config),
        card_service: CardService = Depends(),
        credential_service: CredentialService = Depends(),
        collection_service: CollectionService = Depends(),
        exchange_log_service: ExchangeLogService = Depends(),
    ):
        self.db = db
        self.config = config
        self.card_service = card_service
        self.credential_service = credential_service
        self.collection_service = collection_service
        self.exchange_log_service = exchange_log_service

    def resolve_credential(self, credential: str) -> ExchangeToken:
        """Decode the credential and find the stored token behind it."""
        decoded = decode_credential(
            credential,
            self.config.secret_key or "",
            timedelta(minutes=self.config.qr_token_ttl_minutes),
        )
        stored = self.credential_service.lookup(decoded.token)
        if stored is None:
            raise InvalidCredential("unknown token")
        if utcnow() >= stored.expires_at:
            raise ExpiredCredential
        if decoded.card_id is not None and decoded.card_id != stored.card_id:
            raise InvalidCredential("card mismatch")
        if decoded.user_id is not None and decoded.user_id != stored.user_id:
            raise InvalidCredential("user mismatch")
        return stored

    def redeem(
        self,
        credential: str,
        responder_user_id: str,
        responder_card_id: str,
        metadata: ExchangeMetadataSchema | None = None,
    ) -> ReconciliationReceiptSchema:
        stored = self.resolve_credential(credential)
        target_card = self.card_service.get(stored.card_id)
        responder_card = self.card_service.get_owned(
            responder_card_id, responder_user_id
        )
        if target_card.user_id == responder_user_id:
            raise SelfExchange
        if self.config.single_use_credentials:
            if not self.credential_service.consume(stored.token):
                raise InvalidCredential("token already used")
        return self.reconcile_cards(
            target_card, responder_card, metadata, ConfirmationMode.IMMEDIATE
        )

    def reconcile_cards(
        self,
        issuer_card: Card,
        responder_card: Card,
        metadata: ExchangeMetadataSchema | None,
        mode: ConfirmationMode,
    ) -> ReconciliationReceiptSchema:
        """Give each owner the other's card. Directions already present are skipped."""
        if issuer_card.user_id == responder_card.user_id:
            raise SelfExchange
        shared = (
            metadata.model_dump(include=set(METADATA_FIELDS))
            if metadata is not None
            else {}
        )
        label = MEMO_LABELS[mode]
        responder_side = {
            **shared,
            "memo": shared.get("memo") or f"{label}: {issuer_card.card_name}",
        }
        issuer_side = {
            **shared,
            "memo": f"{label} with {responder_card.card_name}",
        }

        directions = []
        for collector_user_id, card, values in (
            (responder_card.user_id, issuer_card, responder_side),
            (issuer_card.user_id, responder_card, issuer_side),
        ):
            entry, created = self.collection_service.add_if_absent(
                collector_user_id, card.id, values
            )
            directions.append(
                LedgerDirectionSchema(
                    collector_user_id=collector_user_id,
                    collected_card_id=card.id,
                    exchange_id=entry.id,
                    created=created,
                )
            )

        log_id = None
        if mode is ConfirmationMode.IMMEDIATE:
            log = self.exchange_log_service.append(
                qr_owner_user_id=issuer_card.user_id,
                scanner_user_id=responder_card.user_id,
                qr_card_id=issuer_card.id,
                scanner_card_id=responder_card.id,
                metadata=shared,
            )
            log_id = log.id

        logger.info(
            "Cards exchanged mode=%s issuer_card=%s responder_card=%s created=%s",
            mode.value,
            issuer_card.id,
            responder_card.id,
            [d.created for d in directions],
        )

        location = None
        if shared.get("location_name") or shared.get("latitude") is not None:
            location = LocationSchema(
                name=shared.get("location_name"),
                latitude=shared.get("latitude"),
                longitude=shared.get("longitude"),
            )
        return ReconciliationReceiptSchema(
            directions=directions,
            exchange_log_id=log_id,
            your_new_card=CardSummarySchema.model_validate(issuer_card),
            your_card_sent=CardSummarySchema.model_validate(responder_card),
            location=location,
        )
