"""Proximity exchange request: requester offers a card, target accepts or rejects."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from flocka.models.base import BaseModel
from sqlalchemy import DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

if TYPE_CHECKING:
    from flocka.models.card import Card
    from flocka.models.user import User


class ExchangeRequestStatus(enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class ExchangeRequestAction(enum.Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class ExchangeRequest(BaseModel):
    __tablename__ = "exchange_requests"

    requester_user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    requester_user: Mapped["User"] = relationship(
        foreign_keys=[requester_user_id], viewonly=True
    )
    requester_card_id: Mapped[str] = mapped_column(
        ForeignKey("cards.id", ondelete="CASCADE")
    )
    requester_card: Mapped["Card"] = relationship(
        foreign_keys=[requester_card_id], viewonly=True
    )
    target_user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    target_user: Mapped["User"] = relationship(
        foreign_keys=[target_user_id], viewonly=True
    )

    message: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    status: Mapped[ExchangeRequestStatus] = mapped_column(
        Enum(
            ExchangeRequestStatus,
            values_callable=lambda enum_cls: [e.value for e in enum_cls],
            name="exchange_request_status",
        ),
        nullable=False,
        default=ExchangeRequestStatus.PENDING,
        index=True,
    )
    responder_card_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("cards.id", ondelete="SET NULL"), nullable=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, index=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
