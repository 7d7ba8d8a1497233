"""DTO for exchange credentials (QR codes and share URLs)"""

from datetime import datetime

from pydantic import Field

from flocka.schemas.base import BaseSchema
from flocka.schemas.exchange import ExchangeMetadataSchema


class QRCredentialSchema(BaseSchema):
    qr_data: str
    token: str
    card_id: str
    card_name: str
    expires_at: datetime


class ShareCredentialSchema(BaseSchema):
    exchange_url: str
    token: str
    card_id: str
    card_name: str
    expires_at: datetime


class RedeemSchema(ExchangeMetadataSchema):
    # raw QR payload, signed share token or bare token string
    credential: str = Field(min_length=1)
    my_card_id: str = Field(min_length=1)


class CardShareSchema(BaseSchema):
    share_url: str
    # view-only QR payload, redeeming it is rejected
    qr_data: str
    card_id: str
    card_name: str
