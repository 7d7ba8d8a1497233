"""DTO for proximity exchange requests"""

from datetime import datetime

from pydantic import Field

from flocka.models.exchange_request import ExchangeRequestAction, ExchangeRequestStatus
from flocka.schemas.base import BaseReadSchema, BaseSchema
from flocka.schemas.card import CardSummarySchema
from flocka.schemas.exchange import ExchangeMetadataSchema
from flocka.schemas.reconciliation import ReconciliationReceiptSchema


class ExchangeRequestCreateSchema(BaseSchema):
    target_user_id: str
    card_id: str
    message: str | None = Field(default=None, max_length=200)


class ExchangeRequestRespondSchema(ExchangeMetadataSchema):
    action: ExchangeRequestAction
    responder_card_id: str | None = None


class ExchangeRequestSchema(BaseReadSchema):
    requester_user_id: str
    requester_card: CardSummarySchema
    target_user_id: str
    message: str | None = None
    status: ExchangeRequestStatus
    responder_card_id: str | None = None
    expires_at: datetime
    responded_at: datetime | None = None


class ExchangeRequestListSchema(BaseSchema):
    incoming: list[ExchangeRequestSchema]
    outgoing: list[ExchangeRequestSchema]


class ExchangeRequestResponseSchema(BaseSchema):
    request: ExchangeRequestSchema
    receipt: ReconciliationReceiptSchema | None = None
