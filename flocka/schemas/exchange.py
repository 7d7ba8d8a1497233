"""DTO for the collection ledger (exchanges table)"""

from datetime import datetime

from pydantic import Field, model_validator

from flocka.schemas.base import BaseSchema, BaseUpdateSchema
from flocka.schemas.card import CardLinkSchema, CardSummarySchema


class LocationSchema(BaseSchema):
    name: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class ExchangeMetadataSchema(BaseUpdateSchema):
    """Memo and where the exchange happened. Shared by every exchange input."""

    memo: str | None = Field(default=None, max_length=500)
    location_name: str | None = Field(default=None, max_length=200)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    @model_validator(mode="after")
    def coordinates_come_in_pairs(self):
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be given together")
        return self


class CollectSchema(ExchangeMetadataSchema):
    collected_card_id: str


class ExchangeUpdateSchema(ExchangeMetadataSchema):
    pass


class CollectedCardSchema(CardSummarySchema):
    links: list[CardLinkSchema] = []
    owner_name: str


class ExchangeSchema(BaseSchema):
    id: str
    owner_user_id: str
    card: CollectedCardSchema
    memo: str | None = None
    location: LocationSchema | None = None
    collected_at: datetime
    modified_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def from_orm_row(cls, data):
        # build the nested shape from an Exchange ORM object
        if hasattr(data, "collected_card"):
            location = None
            if data.location_name or data.latitude is not None:
                location = {
                    "name": data.location_name,
                    "latitude": data.latitude,
                    "longitude": data.longitude,
                }
            return {
                "id": data.id,
                "owner_user_id": data.owner_user_id,
                "card": data.collected_card,
                "memo": data.memo,
                "location": location,
                "collected_at": data.created_at,
                "modified_at": data.modified_at,
            }
        return data


class CollectionSchema(BaseSchema):
    collections: list[ExchangeSchema]
    total: int
