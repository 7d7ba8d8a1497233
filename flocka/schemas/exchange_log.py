"""DTO for the exchange notification feed"""

from datetime import datetime

from pydantic import model_validator

from flocka.schemas.base import BaseSchema
from flocka.schemas.card import CardSummarySchema
from flocka.schemas.exchange import LocationSchema


class FeedUserSchema(BaseSchema):
    id: str
    name: str


class ExchangeLogSchema(BaseSchema):
    id: str
    scanner_user: FeedUserSchema
    scanner_card: CardSummarySchema
    qr_card: CardSummarySchema
    memo: str | None = None
    location: LocationSchema | None = None
    notified: bool
    created_at: datetime

    @model_validator(mode="before")
    @classmethod
    def from_orm_row(cls, data):
        if hasattr(data, "scanner_card"):
            location = None
            if data.location_name or data.latitude is not None:
                location = {
                    "name": data.location_name,
                    "latitude": data.latitude,
                    "longitude": data.longitude,
                }
            return {
                "id": data.id,
                "scanner_user": data.scanner_user,
                "scanner_card": data.scanner_card,
                "qr_card": data.qr_card,
                "memo": data.memo,
                "location": location,
                "notified": data.notified,
                "created_at": data.created_at,
            }
        return data


class ExchangeFeedSchema(BaseSchema):
    logs: list[ExchangeLogSchema]
    total: int
    new_count: int
