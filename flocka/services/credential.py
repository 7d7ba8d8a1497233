"""Credential service. Short-lived exchange tokens bound to (issuer, card)."""

import logging
import uuid
from datetime import timedelta
from urllib.parse import urlencode

from fastapi import Depends
from sqlalchemy.orm import Session

from flocka.config import Config, get_config
from flocka.models.base import utcnow
from flocka.models.exchange_token import ExchangeToken, ExchangeTokenKind
from flocka.schemas.credential import (
    CardShareSchema,
    QRCredentialSchema,
    ShareCredentialSchema,
)
from flocka.services.card import CardService
from flocka.services.credential_codec import (
    encode_card_view_payload,
    encode_qr_payload,
    encode_share_token,
)
from flocka.uow import get_uow

logger = logging.getLogger(__name__)


def generate_exchange_token() -> str:
    return str(uuid.uuid4())


class CredentialService:
    def __init__(
        self,
        db: Session = Depends(get_uow),
        config: Config = Depends(get_config),
        card_service: CardService = Depends(),
    ):
        self.db = db
        self.config = config
        self.card_service = card_service

    @property
    def qr_ttl(self) -> timedelta:
        return timedelta(minutes=self.config.qr_token_ttl_minutes)

    @property
    def share_ttl(self) -> timedelta:
        return timedelta(hours=self.config.share_token_ttl_hours)

    def issue(
        self,
        issuer_user_id: str,
        card_id: str,
        kind: ExchangeTokenKind,
        ttl: timedelta,
    ) -> ExchangeToken:
        """Store a fresh token for the issuer's card, replacing older ones of the same kind."""
        self.card_service.get_owned(card_id, issuer_user_id)
        self.db.query(ExchangeToken).filter(
            ExchangeToken.user_id == issuer_user_id,
            ExchangeToken.card_id == card_id,
            ExchangeToken.kind == kind,
        ).delete(synchronize_session=False)
        exchange_token = ExchangeToken(
            token=generate_exchange_token(),
            user_id=issuer_user_id,
            card_id=card_id,
            kind=kind,
            expires_at=utcnow() + ttl,
        )
        self.db.add(exchange_token)
        self.db.flush()
        logger.info(
            "Exchange token issued kind=%s card_id=%s user_id=%s",
            kind.value,
            card_id,
            issuer_user_id,
        )
        return exchange_token

    def issue_qr(self, issuer_user_id: str, card_id: str) -> QRCredentialSchema:
        exchange_token = self.issue(
            issuer_user_id, card_id, ExchangeTokenKind.QR, self.qr_ttl
        )
        card = self.card_service.get(card_id)
        return QRCredentialSchema(
            qr_data=encode_qr_payload(card_id, issuer_user_id, exchange_token.token),
            token=exchange_token.token,
            card_id=card_id,
            card_name=card.card_name,
            expires_at=exchange_token.expires_at,
        )

    def issue_share(self, issuer_user_id: str, card_id: str) -> ShareCredentialSchema:
        exchange_token = self.issue(
            issuer_user_id, card_id, ExchangeTokenKind.SHARE, self.share_ttl
        )
        card = self.card_service.get(card_id)
        share_token = encode_share_token(
            card_id,
            issuer_user_id,
            exchange_token.token,
            self.config.secret_key or "",
            self.share_ttl,
        )
        query = urlencode({"token": share_token})
        return ShareCredentialSchema(
            exchange_url=f"{self.config.api_url.rstrip('/')}/cards/exchange?{query}",
            token=exchange_token.token,
            card_id=card_id,
            card_name=card.card_name,
            expires_at=exchange_token.expires_at,
        )

    def issue_view_link(self, owner_user_id: str, card_id: str) -> CardShareSchema:
        """Public link to the card. Shows it, never exchanges it."""
        card = self.card_service.get_owned(card_id, owner_user_id)
        share_url = f"{self.config.api_url.rstrip('/')}/cards/public/{card.id}"
        return CardShareSchema(
            share_url=share_url,
            qr_data=encode_card_view_payload(card.id, share_url),
            card_id=card.id,
            card_name=card.card_name,
        )

    def lookup(self, token: str) -> ExchangeToken | None:
        return (
            self.db.query(ExchangeToken).filter(ExchangeToken.token == token).first()
        )

    def validate(self, token: str) -> ExchangeToken | None:
        """The stored token if it exists and has not expired, otherwise None."""
        exchange_token = self.lookup(token)
        if exchange_token is None or utcnow() >= exchange_token.expires_at:
            return None
        return exchange_token

    def consume(self, token: str) -> bool:
        """Delete a live token. True only for the caller whose delete removed it."""
        deleted = (
            self.db.query(ExchangeToken)
            .filter(ExchangeToken.token == token, ExchangeToken.expires_at > utcnow())
            .delete(synchronize_session=False)
        )
        return deleted == 1

    def revoke(self, token: str, caller_user_id: str) -> str:
        deleted = (
            self.db.query(ExchangeToken)
            .filter(
                ExchangeToken.token == token, ExchangeToken.user_id == caller_user_id
            )
            .delete(synchronize_session=False)
        )
        if deleted:
            logger.info("Exchange token revoked user_id=%s", caller_user_id)
        return token

    def sweep_expired(self) -> int:
        deleted = (
            self.db.query(ExchangeToken)
            .filter(ExchangeToken.expires_at <= utcnow())
            .delete(synchronize_session=False)
        )
        if deleted:
            logger.info("Swept %s expired exchange tokens", deleted)
        return deleted

    def count_active(self) -> int:
        return (
            self.db.query(ExchangeToken)
            .filter(ExchangeToken.expires_at > utcnow())
            .count()
        )

    def count_expired(self) -> int:
        return (
            self.db.query(ExchangeToken)
            .filter(ExchangeToken.expires_at <= utcnow())
            .count()
        )
