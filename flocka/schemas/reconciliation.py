"""DTO for the result of a card exchange"""

from flocka.schemas.base import BaseSchema
from flocka.schemas.card import CardSummarySchema
from flocka.schemas.exchange import LocationSchema


class LedgerDirectionSchema(BaseSchema):
    collector_user_id: str
    collected_card_id: str
    exchange_id: str | None
    # False when the collector already had the card
    created: bool


class ReconciliationReceiptSchema(BaseSchema):
    directions: list[LedgerDirectionSchema]
    exchange_log_id: str | None = None
    your_new_card: CardSummarySchema
    your_card_sent: CardSummarySchema
    location: LocationSchema | None = None
