"""Short-lived exchange credential bound to (issuer, card)."""

import enum
from datetime import datetime

from flocka.models.base import BaseModel
from sqlalchemy import DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column


class ExchangeTokenKind(enum.Enum):
    QR = "qr"
    SHARE = "share"


class ExchangeToken(BaseModel):
    __tablename__ = "exchange_tokens"

    token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    card_id: Mapped[str] = mapped_column(ForeignKey("cards.id", ondelete="CASCADE"))
    kind: Mapped[ExchangeTokenKind] = mapped_column(
        Enum(
            ExchangeTokenKind,
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
            name="exchange_token_kind",
        ),
        nullable=False,
        default=ExchangeTokenKind.QR,
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, index=True)
