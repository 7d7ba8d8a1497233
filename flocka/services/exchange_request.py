"""Proximity exchange requests. A nearby user offers a card, the target answers."""

import logging
from datetime import timedelta

from fastapi import Depends
from sqlalchemy.orm import Session

from flocka.config import Config, get_config
from flocka.errors.common import NotOwner
from flocka.errors.exchange import (
    ExchangeRequestAlreadyPending,
    ExchangeRequestExpired,
    ExchangeRequestNotPending,
    ResponderCardRequired,
    SelfExchange,
)
from flocka.models.base import utcnow
from flocka.models.exchange_request import (
    ExchangeRequest,
    ExchangeRequestAction,
    ExchangeRequestStatus,
)
from flocka.schemas.exchange_request import (
    ExchangeRequestCreateSchema,
    ExchangeRequestRespondSchema,
)
from flocka.schemas.reconciliation import ReconciliationReceiptSchema
from flocka.services.base import BaseService
from flocka.services.card import CardService
from flocka.services.reconciliation import ConfirmationMode, ReconciliationService
from flocka.services.user import UserService
from flocka.uow import get_uow

logger = logging.getLogger(__name__)


class ExchangeRequestService(BaseService[ExchangeRequest]):
    model = ExchangeRequest

    def __init__(
        self,
        db: Session = Depends(get_uow),
        config: Config = Depends(get_config),
        user_service: UserService = Depends(),
        card_service: CardService = Depends(),
        reconciliation_service: ReconciliationService = Depends(),
    ):
        self.db = db
        self.config = config
        self.user_service = user_service
        self.card_service = card_service
        self.reconciliation_service = reconciliation_service

    def send(
        self, schema: ExchangeRequestCreateSchema, requester_user_id: str
    ) -> ExchangeRequest:
        self.card_service.get_owned(schema.card_id, requester_user_id)
        target = self.user_service.get(schema.target_user_id)
        if target.id == requester_user_id:
            raise SelfExchange
        pending = (
            self.db.query(self.model)
            .filter(
                self.model.requester_user_id == requester_user_id,
                self.model.target_user_id == target.id,
                self.model.status == ExchangeRequestStatus.PENDING,
                self.model.expires_at > utcnow(),
            )
            .first()
        )
        if pending is not None:
            raise ExchangeRequestAlreadyPending(f"request_id={pending.id}")
        request = ExchangeRequest(
            requester_user_id=requester_user_id,
            requester_card_id=schema.card_id,
            target_user_id=target.id,
            message=schema.message,
            status=ExchangeRequestStatus.PENDING,
            expires_at=utcnow()
            + timedelta(minutes=self.config.exchange_request_ttl_minutes),
        )
        self.db.add(request)
        self.db.flush()
        self.db.refresh(request)
        logger.info(
            "Exchange request sent request_id=%s requester=%s target=%s",
            request.id,
            requester_user_id,
            target.id,
        )
        return request

    def _transition(
        self, request: ExchangeRequest, status: ExchangeRequestStatus, **values
    ) -> bool:
        """Move a pending request to `status`. False if someone else answered first."""
        updated = (
            self.db.query(self.model)
            .filter(
                self.model.id == request.id,
                self.model.status == ExchangeRequestStatus.PENDING,
            )
            .update({self.model.status: status, **values}, synchronize_session=False)
        )
        self.db.refresh(request)
        return updated == 1

    def respond(
        self,
        request_id: str,
        schema: ExchangeRequestRespondSchema,
        caller_user_id: str,
    ) -> tuple[ExchangeRequest, ReconciliationReceiptSchema | None]:
        request = self.get(request_id)
        if request.target_user_id != caller_user_id:
            raise NotOwner(f"ExchangeRequest id={request_id}")
        if request.status != ExchangeRequestStatus.PENDING:
            raise ExchangeRequestNotPending(f"status={request.status.value}")
        now = utcnow()
        if now >= request.expires_at:
            self._transition(request, ExchangeRequestStatus.EXPIRED)
            # keep the status change, raising rolls back the unit of work
            self.db.commit()
            raise ExchangeRequestExpired(f"request_id={request_id}")

        if schema.action is ExchangeRequestAction.REJECT:
            if not self._transition(
                request, ExchangeRequestStatus.REJECTED, responded_at=now
            ):
                raise ExchangeRequestNotPending(f"request_id={request_id}")
            logger.info("Exchange request rejected request_id=%s", request_id)
            return request, None

        if not schema.responder_card_id:
            raise ResponderCardRequired
        responder_card = self.card_service.get_owned(
            schema.responder_card_id, caller_user_id
        )
        requester_card = self.card_service.get(request.requester_card_id)
        receipt = self.reconciliation_service.reconcile_cards(
            requester_card, responder_card, schema, ConfirmationMode.REQUEST
        )
        if not self._transition(
            request,
            ExchangeRequestStatus.ACCEPTED,
            responder_card_id=responder_card.id,
            responded_at=now,
        ):
            # answered concurrently, the ledger inserts above are idempotent
            raise ExchangeRequestNotPending(f"request_id={request_id}")
        logger.info("Exchange request accepted request_id=%s", request_id)
        return request, receipt

    def list_incoming(self, user_id: str) -> list[ExchangeRequest]:
        return (
            self.db.query(self.model)
            .filter(self.model.target_user_id == user_id)
            .order_by(self.model.created_at.desc())
            .all()
        )

    def list_outgoing(self, user_id: str) -> list[ExchangeRequest]:
        return (
            self.db.query(self.model)
            .filter(self.model.requester_user_id == user_id)
            .order_by(self.model.created_at.desc())
            .all()
        )

    def sweep_expired(self) -> int:
        expired = (
            self.db.query(self.model)
            .filter(
                self.model.status == ExchangeRequestStatus.PENDING,
                self.model.expires_at <= utcnow(),
            )
            .update(
                {self.model.status: ExchangeRequestStatus.EXPIRED},
                synchronize_session=False,
            )
        )
        if expired:
            logger.info("Marked %s exchange requests expired", expired)
        return expired

    def count_pending(self, expired: bool) -> int:
        now = utcnow()
        query = self.db.query(self.model).filter(
            self.model.status == ExchangeRequestStatus.PENDING
        )
        if expired:
            return query.filter(self.model.expires_at <= now).count()
        return query.filter(self.model.expires_at > now).count()
